"""Shared fixtures: parsers, a node finder and the transformer."""
from pathlib import Path

import pytest

from react_jitter.analyzer.parser import LanguageParser
from react_jitter.config import TransformOptions
from react_jitter.rewriter.transformer import JitterTransformer

FIXTURES_DIR = Path(__file__).parent / 'fixtures'


@pytest.fixture
def fixtures_dir():
    return FIXTURES_DIR


@pytest.fixture(scope="session")
def tsx_parser():
    return LanguageParser('tsx')


@pytest.fixture(scope="session")
def js_parser():
    return LanguageParser('javascript')


@pytest.fixture
def find_node():
    """Return the first node (pre-order) of ``node_type``, optionally with a given ``name`` field."""

    def _find(root, node_type, name=None):
        stack = [root]
        while stack:
            node = stack.pop()
            if node.type == node_type:
                name_node = node.child_by_field_name('name')
                if name is None or (name_node is not None and name_node.text.decode() == name):
                    return node
            stack.extend(reversed(node.children))
        raise LookupError(f"No {node_type} named {name!r}")

    return _find


@pytest.fixture
def transformer():
    return JitterTransformer(TransformOptions())


@pytest.fixture
def instrument(transformer):
    """Transform a snippet as ``src/App.tsx`` unless another path is given."""

    def _instrument(source, file_path="src/App.tsx"):
        return transformer.transform_source(source, file_path)

    return _instrument
