"""Source locations and location hashes.

Columns are display columns: the on-screen width of the text preceding the
node on its line, measured the way terminals and editors measure it.
Wide (CJK, emoji) characters count 2, combining marks 0 and TAB counts 4.
The same convention is used everywhere an id is computed, so ids are stable
for a given file, whatever the byte length of the characters involved.
"""
import hashlib
from bisect import bisect_right
from dataclasses import dataclass
from typing import List

from rich.cells import cell_len
from tree_sitter import Node

from ..errors import SourceSnippetError

TAB_WIDTH = 4


@dataclass(frozen=True)
class Location:
    line: int  # 1-based
    column: int  # 0-based display column


def compute_id(file: str, line: int, column: int) -> str:
    """Short, deterministic id for a source site.

    First 4 bytes of ``sha256("file:line:column")`` as 8 hex characters.
    Short enough to read in generated code; collisions are tolerated.
    """
    digest = hashlib.sha256(f"{file}:{line}:{column}".encode('utf-8')).digest()
    return digest[:4].hex()


def display_width(text: str) -> int:
    width = 0
    for char in text:
        width += TAB_WIDTH if char == '\t' else cell_len(char)
    return width


class PositionIndex:
    """Line/column lookups over the original source bytes.

    Built once per module. Every offset handed in is a tree-sitter byte
    offset into the same bytes the tree was parsed from.
    """

    def __init__(self, source: bytes):
        self.source = source
        self.line_starts: List[int] = [0]
        for offset, byte in enumerate(source):
            if byte == 10:  # \n
                self.line_starts.append(offset + 1)

    def locate(self, byte_offset: int) -> Location:
        line_index = bisect_right(self.line_starts, byte_offset) - 1
        line_start = self.line_starts[line_index]
        prefix = self.source[line_start:byte_offset].decode('utf-8', errors='replace')
        return Location(line=line_index + 1, column=display_width(prefix))

    def resolve(self, node: Node) -> Location:
        """Location of the first byte of ``node``."""
        return self.locate(node.start_byte)

    def snippet(self, start: int, end: int) -> str:
        """Original text for a byte span.

        Raises:
            SourceSnippetError: If the span is outside the source or does not
                decode as UTF-8
        """
        if start < 0 or end > len(self.source) or start > end:
            raise SourceSnippetError(start, end)
        try:
            return self.source[start:end].decode('utf-8')
        except UnicodeDecodeError as exc:
            raise SourceSnippetError(start, end, str(exc)) from exc
