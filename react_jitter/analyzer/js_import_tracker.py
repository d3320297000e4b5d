from dataclasses import dataclass
from typing import Dict, Optional, Union

import tree_sitter


@dataclass
class ImportInfo:
    source_module: str
    original_name: Optional[str] = None
    is_namespace: bool = False


class JSImportTracker:
    def analyze_imports(self, root_node, source_code: Union[str, bytes]) -> Dict[str, ImportInfo]:
        """
        Maps local bindings created by top-level ESM imports to their source.

        Only module-level ``import`` statements can satisfy the runtime import,
        so nested scopes and CommonJS ``require`` are not visited.
        """
        if isinstance(source_code, str):
            source_code = source_code.encode('utf-8')

        imports: Dict[str, ImportInfo] = {}

        def get_text(node) -> str:
            return source_code[node.start_byte : node.end_byte].decode('utf-8')

        def strip_quotes(text: str) -> str:
            return text.strip('"\'`')

        for node in root_node.named_children:
            if node.type != 'import_statement':
                continue

            source_node = node.child_by_field_name('source')
            if not source_node:
                continue

            module_name = strip_quotes(get_text(source_node))

            for import_clause in node.named_children:
                if import_clause.type != 'import_clause':
                    continue

                for child in import_clause.named_children:
                    # import x from 'mod'
                    if child.type == 'identifier':
                        imports[get_text(child)] = ImportInfo(
                            source_module=module_name,
                            original_name='default',
                        )

                    # import * as ns from 'mod'
                    elif child.type == 'namespace_import':
                        for ns_child in child.named_children:
                            if ns_child.type == 'identifier':
                                imports[get_text(ns_child)] = ImportInfo(
                                    source_module=module_name,
                                    is_namespace=True,
                                )

                    # import { x, y as z } from 'mod'
                    elif child.type == 'named_imports':
                        for specifier in child.named_children:
                            if specifier.type != 'import_specifier':
                                continue
                            name_node = specifier.child_by_field_name('name')
                            alias_node = specifier.child_by_field_name('alias')
                            if name_node is None:
                                continue

                            original = strip_quotes(get_text(name_node))
                            local_name = get_text(alias_node) if alias_node else original
                            imports[local_name] = ImportInfo(
                                source_module=module_name,
                                original_name=original,
                            )

        return imports

    def has_named_import(self, root_node, source_code: Union[str, bytes],
                         symbol: str, module: str) -> bool:
        """True for ``import { symbol } from 'module'`` (unaliased)."""
        info = self.analyze_imports(root_node, source_code).get(symbol)
        return (
            info is not None
            and info.original_name == symbol
            and info.source_module == module
        )


def is_directive(node: tree_sitter.Node) -> bool:
    """``"use client";`` and friends."""
    named = [c for c in node.named_children if c.type != 'comment']
    return node.type == 'expression_statement' and len(named) == 1 and named[0].type == 'string'


def find_import_anchor(root_node: tree_sitter.Node) -> Optional[tree_sitter.Node]:
    """Top-level node a new import should follow.

    The last import of the leading import block; failing that the hashbang
    line or directive prologue, which must stay first. ``None`` means the
    very top of the file.
    """
    last_import = None
    prologue = None

    for child in root_node.named_children:
        if child.type == 'comment':
            continue
        if child.type == 'hash_bang_line':
            prologue = child
            continue
        if child.type == 'import_statement':
            last_import = child
            continue
        if last_import is None and is_directive(child):
            prologue = child
            continue
        break

    return last_import or prologue
