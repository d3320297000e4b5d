"""Declarations that may receive a jitter scope.

Every instrumentable shape is reduced to one ``Candidate`` so eligibility
and rewriting are decided by a single procedure:

    function Foo() {...}                      FUNCTION_DECLARATION
    export default function () {...}          DEFAULT_EXPORT
    export const Foo = () => ...              EXPORTED_COMPONENT
    export const useFoo = () => ...           HOOK_UTILITY
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from tree_sitter import Node

from .naming import is_component_name, is_hook_name
from .subtree import SubtreeAnalyzer

ANONYMOUS_NAME = "(anonymous)"

FUNCTION_DECLARATION_TYPES = frozenset({
    'function_declaration',
    'generator_function_declaration',
})

# 'function' is the pre-0.23 grammar name for function expressions
FUNCTION_EXPRESSION_TYPES = frozenset({
    'function_expression',
    'function',
    'generator_function',
})

CLASS_DECLARATION_TYPES = frozenset({
    'class_declaration',
    'abstract_class_declaration',
})

BINDING_IDENTIFIER_TYPES = frozenset({
    'identifier',
    'shorthand_property_identifier_pattern',
})

NON_BINDING_TYPES = frozenset({
    'type_annotation',
    'decorator',
    'accessibility_modifier',
    'comment',
})


class CandidateKind(Enum):
    FUNCTION_DECLARATION = "function_declaration"
    DEFAULT_EXPORT = "default_export"
    EXPORTED_COMPONENT = "exported_component"
    HOOK_UTILITY = "hook_utility"


@dataclass
class Candidate:
    kind: CandidateKind
    name: str
    function_node: Node  # also the node whose location identifies the scope
    body: Node  # statement_block, or an expression for concise arrows
    anonymous: bool = False

    @property
    def has_block_body(self) -> bool:
        return self.body.type == 'statement_block'

    def binds(self, name: str) -> bool:
        """True if a parameter or a top-level declaration of the body binds ``name``."""
        parameters = (self.function_node.child_by_field_name('parameters')
                      or self.function_node.child_by_field_name('parameter'))
        if parameters is not None and _pattern_binds(parameters, name):
            return True
        if not self.has_block_body:
            return False
        return any(_declaration_binds(statement, name) for statement in self.body.named_children)

    def is_eligible(self) -> bool:
        """Decided once, before anything in the declaration is rewritten."""
        if self.has_block_body and self.body.children[0].type != '{':
            # Error recovery produced a block without its opening brace
            return False

        if self.kind is CandidateKind.HOOK_UTILITY:
            # Hook utilities qualify by name alone
            return is_hook_name(self.name)

        if not (self.anonymous or is_component_name(self.name)):
            return False
        return SubtreeAnalyzer().analyze(self.body)


def _text(node: Node) -> str:
    return node.text.decode('utf-8')


def _is_default_export(export_node: Node) -> bool:
    return any(child.type == 'default' for child in export_node.children)


def _pattern_binds(node: Node, name: str) -> bool:
    """Does a parameter list or binding pattern introduce ``name``?"""
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type in BINDING_IDENTIFIER_TYPES:
            if _text(current) == name:
                return True
            continue

        # Default values and type annotations are not bindings
        if current.type in {'assignment_pattern', 'object_assignment_pattern'}:
            binding = current.child_by_field_name('left')
        elif current.type in {'required_parameter', 'optional_parameter'}:
            binding = current.child_by_field_name('pattern')
        elif current.type == 'pair_pattern':
            binding = current.child_by_field_name('value')
        else:
            stack.extend(c for c in current.named_children if c.type not in NON_BINDING_TYPES)
            continue

        if binding is not None:
            stack.append(binding)
    return False


def _declaration_binds(statement: Node, name: str) -> bool:
    if statement.type in {'lexical_declaration', 'variable_declaration'}:
        for declarator in statement.named_children:
            if declarator.type != 'variable_declarator':
                continue
            pattern = declarator.child_by_field_name('name')
            if pattern is not None and _pattern_binds(pattern, name):
                return True
        return False

    if statement.type in FUNCTION_DECLARATION_TYPES or statement.type in CLASS_DECLARATION_TYPES:
        name_node = statement.child_by_field_name('name')
        return name_node is not None and _text(name_node) == name
    return False


def _exported_binding(node: Node) -> Optional[str]:
    """Binding name for ``export const name = <node>``, else None."""
    declarator = node.parent
    if declarator is None or declarator.type != 'variable_declarator':
        return None

    value = declarator.child_by_field_name('value')
    name_node = declarator.child_by_field_name('name')
    if value is None or value != node or name_node is None or name_node.type != 'identifier':
        return None

    declaration = declarator.parent
    if declaration is None or declaration.type not in {'lexical_declaration', 'variable_declaration'}:
        return None

    export = declaration.parent
    if export is None or export.type != 'export_statement':
        return None

    return _text(name_node)


def match_candidate(node: Node) -> Optional[Candidate]:
    """Classify ``node`` as a candidate declaration, or None if it is not one."""
    body = node.child_by_field_name('body')
    if body is None:
        return None

    if node.type in FUNCTION_DECLARATION_TYPES:
        name_node = node.child_by_field_name('name')
        if name_node is None:
            return None
        return Candidate(CandidateKind.FUNCTION_DECLARATION, _text(name_node), node, body)

    if node.type in FUNCTION_EXPRESSION_TYPES:
        parent = node.parent
        if parent is not None and parent.type == 'export_statement' and _is_default_export(parent):
            name_node = node.child_by_field_name('name')
            if name_node is None:
                return Candidate(CandidateKind.DEFAULT_EXPORT, ANONYMOUS_NAME, node, body,
                                 anonymous=True)
            return Candidate(CandidateKind.DEFAULT_EXPORT, _text(name_node), node, body)

    if node.type in FUNCTION_EXPRESSION_TYPES or node.type == 'arrow_function':
        binding = _exported_binding(node)
        if binding is None:
            return None
        if node.type == 'arrow_function' and is_hook_name(binding):
            return Candidate(CandidateKind.HOOK_UTILITY, binding, node, body)
        if is_component_name(binding):
            return Candidate(CandidateKind.EXPORTED_COMPONENT, binding, node, body)

    return None
