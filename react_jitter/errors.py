"""Exception types raised by the jitter transform."""


class JitterError(Exception):
    """Base class for every error raised by react_jitter."""


class ConfigurationError(JitterError):
    """Plugin options have the wrong shape. Fatal for the whole invocation."""


class PatternCompilationError(JitterError):
    """An exclude glob could not be compiled.

    Only the offending pattern is dropped; the remaining patterns still apply.
    """

    def __init__(self, pattern: str, reason: str):
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Invalid exclude pattern {pattern!r}: {reason}")


class SourceSnippetError(JitterError):
    """Original source text for a span could not be recovered."""

    def __init__(self, start: int, end: int, reason: str = "span out of range"):
        self.start = start
        self.end = end
        super().__init__(f"Cannot read source bytes [{start}:{end}]: {reason}")


class UnsupportedFileError(JitterError):
    """File extension has no tree-sitter grammar attached."""
