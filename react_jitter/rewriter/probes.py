"""Probe code synthesis and recognition of already-probed code.

Generated shapes::

    const h = useJitterScope({ name, id, file, line, offset });
    (h.s("<id>"), h.e(useThing(a), { id, file, hook, line, offset }))
    return h.re(<expr>);

The runtime names the display column ``offset``.
"""
import json
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

import tree_sitter

from ..analyzer.js_import_tracker import is_directive
from ..analyzer.subtree import callee_name
from ..config import RUNTIME_MODULE, RUNTIME_SYMBOL

SCOPE_HANDLE = "h"
START_PROBE = "s"
END_PROBE = "e"
RENDER_WRAP = "re"

SPREAD_SENTINEL = "..."
UNSUPPORTED_ARGUMENT = "<unsupported>"


def js_string(value: str) -> str:
    """JSON string escaping is valid JavaScript string syntax."""
    return json.dumps(value)


def object_literal(pairs: Iterable[Tuple[str, str]]) -> str:
    return "{ " + ", ".join(f"{key}: {value}" for key, value in pairs) + " }"


@dataclass(frozen=True)
class SiteMetadata:
    """Identity of one instrumented component or hook utility."""
    name: str
    id: str
    file: str
    line: int
    column: int

    def to_js(self) -> str:
        return object_literal([
            ("name", js_string(self.name)),
            ("id", js_string(self.id)),
            ("file", js_string(self.file)),
            ("line", str(self.line)),
            ("offset", str(self.column)),
        ])


@dataclass(frozen=True)
class HookMetadata:
    """Identity of one rewritten hook call site."""
    id: str
    file: str
    hook: str
    line: int
    column: int
    arguments: Optional[Tuple[str, ...]] = None

    def to_js(self) -> str:
        pairs = [
            ("id", js_string(self.id)),
            ("file", js_string(self.file)),
            ("hook", js_string(self.hook)),
            ("line", str(self.line)),
            ("offset", str(self.column)),
        ]
        if self.arguments is not None:
            pairs.append(("arguments", "[" + ", ".join(js_string(a) for a in self.arguments) + "]"))
        return object_literal(pairs)


def scope_init_statement(meta: SiteMetadata) -> str:
    return f"const {SCOPE_HANDLE} = {RUNTIME_SYMBOL}({meta.to_js()});"


def hook_probe(call_text: str, meta: HookMetadata) -> str:
    """Sequence expression whose value is the end probe's, i.e. the call's."""
    return (
        f"({SCOPE_HANDLE}.{START_PROBE}({js_string(meta.id)}), "
        f"{SCOPE_HANDLE}.{END_PROBE}({call_text}, {meta.to_js()}))"
    )


def render_wrap(expr_text: str) -> str:
    return f"{SCOPE_HANDLE}.{RENDER_WRAP}({expr_text})"


def runtime_import() -> str:
    return f"import {{ {RUNTIME_SYMBOL} }} from {js_string(RUNTIME_MODULE)};"


def _is_handle_method_call(node: Optional[tree_sitter.Node], method: str) -> bool:
    """``h.<method>(...)`` with ``h`` a bare identifier."""
    if node is None or node.type != 'call_expression':
        return False
    callee = node.child_by_field_name('function')
    if callee is None or callee.type != 'member_expression':
        return False
    obj = callee.child_by_field_name('object')
    prop = callee.child_by_field_name('property')
    return (
        obj is not None and obj.type == 'identifier' and obj.text == SCOPE_HANDLE.encode()
        and prop is not None and prop.text == method.encode()
    )


def is_render_wrap(node: tree_sitter.Node) -> bool:
    return _is_handle_method_call(node, RENDER_WRAP)


def is_probed_call(call: tree_sitter.Node) -> bool:
    """True if ``call`` is already the first argument of ``h.e(...)``."""
    args = call.parent
    if args is None or args.type != 'arguments':
        return False
    if not _is_handle_method_call(args.parent, END_PROBE):
        return False
    first = next((c for c in args.named_children if c.type != 'comment'), None)
    return first is not None and first == call


def leading_directives(block: tree_sitter.Node) -> List[tree_sitter.Node]:
    """The directive prologue (`"use strict";` ...) at the top of a function body."""
    directives = []
    for child in block.named_children:
        if child.type == 'comment':
            continue
        if not is_directive(child):
            break
        directives.append(child)
    return directives


def first_statement(block: tree_sitter.Node) -> Optional[tree_sitter.Node]:
    """First statement after the directive prologue."""
    directives = leading_directives(block)
    after = directives[-1].end_byte if directives else block.start_byte
    return next((c for c in block.named_children
                 if c.type != 'comment' and c.start_byte >= after), None)


def is_scope_init(statement: Optional[tree_sitter.Node]) -> bool:
    """``const h = useJitterScope(...)``"""
    if statement is None or statement.type != 'lexical_declaration':
        return False
    declarators = [c for c in statement.named_children if c.type == 'variable_declarator']
    if len(declarators) != 1:
        return False
    name = declarators[0].child_by_field_name('name')
    value = declarators[0].child_by_field_name('value')
    return (
        name is not None and name.text == SCOPE_HANDLE.encode()
        and value is not None and value.type == 'call_expression'
        and callee_name(value) == RUNTIME_SYMBOL
    )
