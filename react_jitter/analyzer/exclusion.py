"""Path exclusion for whole modules.

Globs follow the path-glob dialect hosts use in their plugin options:

- ``?`` matches one character, ``*`` any run of characters (``/`` included)
- ``**`` must be a whole path component and spans zero or more directories
- ``[abc]`` / ``[!abc]`` are character classes

Matching is done on the path with backslashes turned into forward slashes,
so ``**/node_modules/**`` excludes dependencies on every platform.
"""
import logging
import re
from typing import Iterable, List, Pattern, Tuple

from ..errors import PatternCompilationError

logger = logging.getLogger(__name__)


def normalize_path(file_path: str) -> str:
    """Convert Windows-style separators to forward slashes."""
    return file_path.replace('\\', '/')


def compile_glob(pattern: str) -> Pattern[str]:
    """Translate a glob into an anchored regular expression.

    Args:
        pattern: Glob such as ``**/node_modules/**``

    Returns:
        Compiled regex matching the full (normalized) path

    Raises:
        PatternCompilationError: If the glob is malformed
    """
    out: List[str] = []
    i = 0
    n = len(pattern)

    while i < n:
        char = pattern[i]

        if char == '*':
            j = i
            while j < n and pattern[j] == '*':
                j += 1
            run = j - i

            if run > 2:
                raise PatternCompilationError(
                    pattern, "wildcards are either regular `*` or recursive `**`"
                )

            if run == 2:
                starts_component = i == 0 or pattern[i - 1] == '/'
                ends_component = j == n or pattern[j] == '/'
                if not (starts_component and ends_component):
                    raise PatternCompilationError(
                        pattern, "recursive wildcards must form a single path component"
                    )
                if j == n:
                    out.append('.*')
                else:
                    # '**/' also matches zero directories
                    out.append('(?:.*/)?')
                    j += 1
            else:
                out.append('.*')
            i = j

        elif char == '?':
            out.append('.')
            i += 1

        elif char == '[':
            # A ']' directly after '[' (or '[!') is a literal member
            search_from = i + 2 if pattern[i + 1:i + 2] != '!' else i + 3
            end = pattern.find(']', search_from)
            if end == -1:
                raise PatternCompilationError(pattern, "unterminated character class")

            body = pattern[i + 1:end]
            negate = body.startswith('!')
            if negate:
                body = body[1:]
            for special in ('\\', '^', '[', ']'):
                body = body.replace(special, '\\' + special)
            out.append('[' + ('^' if negate else '') + body + ']')
            i = end + 1

        else:
            out.append(re.escape(char))
            i += 1

    try:
        return re.compile('(?s:' + ''.join(out) + r')\Z')
    except re.error as exc:
        raise PatternCompilationError(pattern, str(exc)) from exc


def compile_patterns(patterns: Iterable[str]) -> Tuple[Pattern[str], ...]:
    """Compile globs in order, dropping any that fail to compile."""
    compiled = []
    for pattern in patterns:
        try:
            compiled.append(compile_glob(pattern))
        except PatternCompilationError as exc:
            logger.debug("Dropping exclude pattern: %s", exc)
    return tuple(compiled)


class Excluder:
    """Gates whole-module processing by file path."""

    def __init__(self, patterns: Iterable[Pattern[str]]):
        self.patterns = tuple(patterns)

    @classmethod
    def from_globs(cls, globs: Iterable[str]) -> 'Excluder':
        return cls(compile_patterns(globs))

    def should_exclude(self, file_path: str) -> bool:
        """Return True on the first pattern matching the normalized path."""
        normalized = normalize_path(file_path)
        for pattern in self.patterns:
            if pattern.match(normalized):
                return True
        return False
