"""Tests for position lookups and location ids."""
import hashlib

import pytest

from react_jitter.analyzer.location import Location, PositionIndex, compute_id, display_width
from react_jitter.errors import SourceSnippetError


class TestComputeId:

    def test_deterministic(self):
        assert compute_id("src/Foo.tsx", 3, 7) == compute_id("src/Foo.tsx", 3, 7)

    def test_eight_hex_characters(self):
        value = compute_id("src/Foo.tsx", 1, 0)
        assert len(value) == 8
        int(value, 16)

    def test_sha256_prefix(self):
        expected = hashlib.sha256(b"src/Foo.tsx:12:4").hexdigest()[:8]
        assert compute_id("src/Foo.tsx", 12, 4) == expected

    def test_sensitive_to_every_component(self):
        base = compute_id("a.tsx", 1, 1)
        assert compute_id("b.tsx", 1, 1) != base
        assert compute_id("a.tsx", 2, 1) != base
        assert compute_id("a.tsx", 1, 2) != base


class TestDisplayWidth:

    def test_ascii(self):
        assert display_width("const x = ") == 10

    def test_wide_characters_count_two(self):
        assert display_width("日本") == 4

    def test_tab_counts_four(self):
        assert display_width("\t\t") == 8


class TestPositionIndex:

    def test_first_line(self):
        index = PositionIndex(b"function Foo() {}\n")
        assert index.locate(9) == Location(line=1, column=9)

    def test_later_lines(self):
        source = b"const a = 1;\n\nfunction Foo() {}\n"
        index = PositionIndex(source)
        assert index.locate(source.index(b"Foo")) == Location(line=3, column=9)

    def test_multibyte_prefix_uses_display_width(self):
        source = "const s = '日本'; useFoo();\n".encode('utf-8')
        index = PositionIndex(source)
        location = index.locate(source.index(b"useFoo"))
        # 16 characters before the call, two of them wide
        assert location.column == 18

    def test_snippet(self):
        index = PositionIndex(b"useThing(a, b)")
        assert index.snippet(9, 10) == "a"

    @pytest.mark.parametrize("start,end", [(-1, 2), (0, 99), (5, 2)])
    def test_snippet_out_of_range(self, start, end):
        index = PositionIndex(b"useThing(a)")
        with pytest.raises(SourceSnippetError):
            index.snippet(start, end)

    def test_snippet_inside_multibyte_character(self):
        index = PositionIndex("日".encode('utf-8'))
        with pytest.raises(SourceSnippetError):
            index.snippet(0, 1)
