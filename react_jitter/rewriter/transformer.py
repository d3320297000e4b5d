"""Injects jitter probes into components and hooks of one JS/TS module.

The tree-sitter tree is never modified. Each module is re-emitted from its
original bytes: text between child nodes is copied verbatim and each child
is rendered recursively, so a node only changes when a rewrite rule matches
it exactly. Rewrites compose bottom-up: a hook call nested in another hook
call's arguments is probed first and then carried inside its parent's probe.
"""
import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import PurePath
from typing import Dict, List, Optional, Tuple

from tree_sitter import Node, Tree

from ..analyzer.candidates import Candidate, match_candidate
from ..analyzer.exclusion import Excluder
from ..analyzer.js_import_tracker import JSImportTracker, find_import_anchor
from ..analyzer.location import PositionIndex, compute_id
from ..analyzer.naming import should_wrap_hook
from ..analyzer.parser import LanguageParser
from ..analyzer.subtree import SCOPE_BOUNDARY_TYPES, callee_name
from ..config import RUNTIME_MODULE, RUNTIME_SYMBOL, TransformOptions
from ..errors import SourceSnippetError
from .probes import (
    SCOPE_HANDLE,
    SPREAD_SENTINEL,
    UNSUPPORTED_ARGUMENT,
    HookMetadata,
    SiteMetadata,
    first_statement,
    hook_probe,
    is_probed_call,
    is_render_wrap,
    is_scope_init,
    leading_directives,
    render_wrap,
    runtime_import,
    scope_init_statement,
)

logger = logging.getLogger(__name__)

Span = Tuple[int, int]


@dataclass
class TraversalState:
    """Per-module state. ``current_scope`` is None while Idle."""
    file_path: str
    current_scope: Optional[str] = None
    instrumented_any: bool = False

    @property
    def in_scope(self) -> bool:
        return self.current_scope is not None

    @contextmanager
    def enter(self, scope_name: Optional[str]):
        """Switch scope for a nested declaration and restore it afterwards."""
        previous = self.current_scope
        self.current_scope = scope_name
        try:
            yield
        finally:
            self.current_scope = previous


@dataclass
class TransformResult:
    code: str
    instrumented: bool = False
    excluded: bool = False
    scopes: List[SiteMetadata] = field(default_factory=list)
    hook_sites: List[HookMetadata] = field(default_factory=list)


def _span(node: Node) -> Span:
    return (node.start_byte, node.end_byte)


class _ModulePass:
    """One traversal of one module. Never reused."""

    def __init__(self, options: TransformOptions, source: bytes, file_path: str,
                 index: PositionIndex, import_tracker: JSImportTracker):
        self.options = options
        self.source = source
        self.index = index
        self.import_tracker = import_tracker
        self.state = TraversalState(file_path=file_path)
        self.scopes: List[SiteMetadata] = []
        self.hook_sites: List[HookMetadata] = []

    # ------------------------------------------------------------------
    # Module
    # ------------------------------------------------------------------

    def run(self, root: Node) -> TransformResult:
        anchor = find_import_anchor(root)
        anchor_at = None

        pieces: List[str] = []
        cursor = 0
        for child in root.children:
            pieces.append(self._slice(cursor, child.start_byte))
            pieces.append(self._render(child))
            cursor = child.end_byte
            if anchor is not None and child == anchor:
                anchor_at = len(pieces)
        pieces.append(self._slice(cursor, len(self.source)))

        if self.state.instrumented_any and not self.import_tracker.has_named_import(
                root, self.source, RUNTIME_SYMBOL, RUNTIME_MODULE):
            if anchor_at is None:
                pieces.insert(0, runtime_import() + "\n")
            else:
                pieces.insert(anchor_at, "\n" + runtime_import())

        if self.state.instrumented_any:
            logger.info("Instrumented %d scope(s) and %d hook call(s) in %s",
                        len(self.scopes), len(self.hook_sites), self.state.file_path)

        return TransformResult(
            code=''.join(pieces),
            instrumented=self.state.instrumented_any,
            scopes=sorted(self.scopes, key=lambda m: (m.line, m.column)),
            hook_sites=sorted(self.hook_sites, key=lambda m: (m.line, m.column)),
        )

    # ------------------------------------------------------------------
    # Generic rendering
    # ------------------------------------------------------------------

    def _slice(self, start: int, end: int) -> str:
        return self.source[start:end].decode('utf-8')

    def _render_children(self, node: Node, overrides: Optional[Dict[Span, str]] = None) -> str:
        """Original text of ``node`` with every child rendered (or overridden)."""
        pieces: List[str] = []
        cursor = node.start_byte
        for child in node.children:
            pieces.append(self._slice(cursor, child.start_byte))
            if overrides and _span(child) in overrides:
                pieces.append(overrides[_span(child)])
            else:
                pieces.append(self._render(child))
            cursor = child.end_byte
        pieces.append(self._slice(cursor, node.end_byte))
        return ''.join(pieces)

    def _render(self, node: Node) -> str:
        if node.child_count == 0:
            return self._slice(node.start_byte, node.end_byte)

        candidate = match_candidate(node)
        if candidate is not None:
            return self._render_candidate(candidate)

        if node.type in SCOPE_BOUNDARY_TYPES:
            # Closures inside a component are not part of its scope
            with self.state.enter(None):
                return self._render_children(node)

        if self.state.in_scope:
            if node.type == 'call_expression':
                return self._render_call(node)
            if node.type == 'return_statement':
                return self._render_return(node)

        return self._render_children(node)

    # ------------------------------------------------------------------
    # Declarations
    # ------------------------------------------------------------------

    def _render_candidate(self, candidate: Candidate) -> str:
        fn = candidate.function_node

        eligible = candidate.is_eligible()
        if not eligible:
            logger.debug("Skipping %s '%s': not instrumentable", candidate.kind.value, candidate.name)
        elif not self._has_scope_init(candidate) and candidate.binds(SCOPE_HANDLE):
            logger.debug("Skipping %s '%s': '%s' is already bound in its scope",
                         candidate.kind.value, candidate.name, SCOPE_HANDLE)
            eligible = False

        if not eligible:
            with self.state.enter(None):
                return self._render_children(fn)

        location = self.index.resolve(fn)
        file_path = self.state.file_path
        meta = SiteMetadata(
            name=candidate.name,
            id=compute_id(file_path, location.line, location.column),
            file=file_path,
            line=location.line,
            column=location.column,
        )
        self.state.instrumented_any = True
        self.scopes.append(meta)
        logger.debug("Instrumenting %s '%s' at %s:%d:%d", candidate.kind.value,
                     candidate.name, file_path, location.line, location.column)

        with self.state.enter(candidate.name):
            if candidate.has_block_body:
                body = self._render_block_body(candidate.body, meta)
            else:
                body = self._render_concise_body(candidate, meta)

        # Parameters belong to the function but run before the handle exists
        with self.state.enter(None):
            return self._render_children(fn, overrides={_span(candidate.body): body})

    @staticmethod
    def _has_scope_init(candidate: Candidate) -> bool:
        return candidate.has_block_body and is_scope_init(first_statement(candidate.body))

    def _render_block_body(self, block: Node, meta: SiteMetadata) -> str:
        if is_scope_init(first_statement(block)):
            return self._render_children(block)

        init = scope_init_statement(meta)
        directives = leading_directives(block)
        if directives:
            # Directives must stay first in the body to keep their effect
            last = directives[-1]
            following = first_statement(block)
            next_start = following.start_byte if following is not None else block.end_byte - 1
            if self.index.locate(next_start).line != self.index.locate(last.end_byte).line:
                separator = '\n' + self._indentation(last)
            else:
                separator = ' '
            text = self._slice(last.start_byte, last.end_byte) + separator + init
            return self._render_children(block, overrides={_span(last): text})

        rendered = self._render_children(block)
        first = next((c for c in block.named_children), None)
        if first is not None and self.index.locate(first.start_byte).line != self.index.locate(block.start_byte).line:
            return '{\n' + self._indentation(first) + init + rendered[1:]
        return '{ ' + init + rendered[1:]

    def _render_concise_body(self, candidate: Candidate, meta: SiteMetadata) -> str:
        """``() => expr`` becomes a block returning the wrapped expression."""
        expr = candidate.body
        rendered = self._render(expr)
        value = rendered if is_render_wrap(expr) else render_wrap(rendered)

        outer = self._indentation(candidate.function_node)
        inner = outer + '  '
        return (
            '{\n'
            + inner + scope_init_statement(meta) + '\n'
            + inner + 'return ' + value + ';\n'
            + outer + '}'
        )

    def _indentation(self, node: Node) -> str:
        """Leading whitespace of the line ``node`` starts on."""
        line_start = self.index.line_starts[self.index.locate(node.start_byte).line - 1]
        line = self._slice(line_start, node.start_byte)
        return line[:len(line) - len(line.lstrip(' \t'))]

    # ------------------------------------------------------------------
    # Statements and expressions inside a scope
    # ------------------------------------------------------------------

    def _render_call(self, call: Node) -> str:
        rendered = self._render_children(call)

        name = callee_name(call)
        args = call.child_by_field_name('arguments')
        if not should_wrap_hook(name, self.options.ignored_hooks):
            return rendered
        if args is None or args.type != 'arguments' or is_probed_call(call):
            return rendered

        location = self.index.resolve(call)
        file_path = self.state.file_path
        meta = HookMetadata(
            id=compute_id(file_path, location.line, location.column),
            file=file_path,
            hook=name,
            line=location.line,
            column=location.column,
            arguments=self._capture_arguments(args) if self.options.include_arguments else None,
        )
        self.hook_sites.append(meta)
        logger.debug("Probing %s() in '%s' at line %d", name, self.state.current_scope, location.line)
        return hook_probe(rendered, meta)

    def _capture_arguments(self, args: Node) -> Tuple[str, ...]:
        captured = []
        for arg in args.named_children:
            if arg.type == 'comment':
                continue
            if arg.type == 'spread_element':
                captured.append(SPREAD_SENTINEL)
                continue
            try:
                captured.append(self.index.snippet(arg.start_byte, arg.end_byte))
            except SourceSnippetError as exc:
                logger.debug("Argument text unavailable: %s", exc)
                captured.append(UNSUPPORTED_ARGUMENT)
        return tuple(captured)

    def _render_return(self, statement: Node) -> str:
        expr = next((c for c in statement.named_children if c.type != 'comment'), None)
        if expr is None or is_render_wrap(expr):
            return self._render_children(statement)
        wrapped = render_wrap(self._render(expr))
        return self._render_children(statement, overrides={_span(expr): wrapped})


class JitterTransformer:
    """
    Entry point for the jitter pass.

    One transformer can process any number of modules, sequentially or from
    several threads: all traversal state lives in a per-module pass object.
    """

    def __init__(self, options: Optional[TransformOptions] = None):
        self.options = options or TransformOptions()
        self.excluder = Excluder(self.options.exclude_patterns)
        self.import_tracker = JSImportTracker()

    def should_exclude(self, file_path: str) -> bool:
        return self.excluder.should_exclude(file_path)

    def transform(self, tree: Tree, source: str | bytes, file_path: str,
                  index: Optional[PositionIndex] = None) -> TransformResult:
        """Instrument a parsed module.

        Args:
            tree: tree-sitter tree parsed from ``source``
            source: The module text the tree was parsed from
            file_path: Path embedded in probe metadata and matched by excludes
            index: Position index over ``source`` (built here if omitted)

        Returns:
            TransformResult; ``code`` is the original text untouched when the
            module is excluded, the pass is disabled, or nothing qualifies
        """
        skipped = self._skip(source, file_path)
        if skipped is not None:
            return skipped

        original = source if isinstance(source, str) else source.decode('utf-8')
        source_bytes = source.encode('utf-8') if isinstance(source, str) else source

        module_pass = _ModulePass(
            self.options,
            source_bytes,
            file_path,
            index or PositionIndex(source_bytes),
            self.import_tracker,
        )
        result = module_pass.run(tree.root_node)
        if not result.instrumented:
            result.code = original
        return result

    def transform_source(self, source: str | bytes, file_path: str,
                         parser: Optional[LanguageParser] = None) -> TransformResult:
        """Parse ``source`` with the grammar matching ``file_path`` and instrument it."""
        skipped = self._skip(source, file_path)
        if skipped is not None:
            return skipped

        parser = parser or LanguageParser.from_file_extension(file_path)
        return self.transform(parser.parse_source(source), source, file_path)

    def transform_batch(self, file_contents: Dict[str, str]) -> Dict[str, TransformResult]:
        """
        Instruments several modules.

        Args:
            file_contents: Mapping of file path (as embedded in metadata) to source.

        Returns:
            Dict mapping each path to its TransformResult. Files without a
            grammar are skipped.
        """
        results = {}
        parsers: Dict[str, LanguageParser] = {}

        for file_path, content in file_contents.items():
            if not LanguageParser.is_supported(file_path):
                continue
            language = LanguageParser.SUPPORTED_LANGUAGES[PurePath(file_path).suffix.lower()]
            if language not in parsers:
                parsers[language] = LanguageParser(language)
            results[file_path] = self.transform_source(content, file_path, parsers[language])

        return results

    def _skip(self, source: str | bytes, file_path: str) -> Optional[TransformResult]:
        """Result for modules left untouched as a whole, else None."""
        if self.options.enabled and not self.should_exclude(file_path):
            return None

        original = source if isinstance(source, str) else source.decode('utf-8')
        if not self.options.enabled:
            return TransformResult(code=original)

        logger.info("Excluded from instrumentation: %s", file_path)
        return TransformResult(code=original, excluded=True)
