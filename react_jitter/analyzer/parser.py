"""Tree-sitter parser for JavaScript and TypeScript modules."""
from pathlib import Path
from tree_sitter import Language, Parser, Tree
import tree_sitter_javascript as tsjavascript
import tree_sitter_typescript as tstypescript

from ..errors import UnsupportedFileError


class LanguageParser:
    """JS/TS parser using the tree-sitter v0.25 API."""

    SUPPORTED_LANGUAGES = {
        '.js': 'javascript',
        '.jsx': 'javascript',
        '.mjs': 'javascript',
        '.cjs': 'javascript',
        '.ts': 'typescript',
        '.mts': 'typescript',
        '.cts': 'typescript',
        '.tsx': 'tsx',
    }

    def __init__(self, language: str):
        """Initialize parser for given language (javascript, typescript, tsx).

        Args:
            language: One of 'javascript', 'typescript', 'tsx'

        Raises:
            UnsupportedFileError: If language is not supported
        """
        self.language = language
        self.parser = self._create_parser()

    def _create_parser(self) -> Parser:
        """Wrap the grammar capsule with Language() and hand it to Parser().

        Returns:
            Configured Parser instance
        """
        if self.language == 'javascript':
            # The JavaScript grammar parses JSX as well
            lang = Language(tsjavascript.language())
        elif self.language == 'typescript':
            lang = Language(tstypescript.language_typescript())
        elif self.language == 'tsx':
            lang = Language(tstypescript.language_tsx())
        else:
            raise UnsupportedFileError(f"Unsupported language: {self.language}")

        return Parser(lang)

    def parse_source(self, source: str | bytes) -> Tree:
        """Parse in-memory source code.

        Args:
            source: Module text (str is encoded as UTF-8)

        Returns:
            Parsed Tree (may contain ERROR nodes for invalid input)
        """
        if isinstance(source, str):
            source = source.encode('utf-8')
        return self.parser.parse(source)

    @classmethod
    def is_supported(cls, file_path: str | Path) -> bool:
        return Path(file_path).suffix.lower() in cls.SUPPORTED_LANGUAGES

    @classmethod
    def from_file_extension(cls, file_path: str | Path) -> 'LanguageParser':
        """Create parser based on file extension.

        Args:
            file_path: Path to determine language from

        Returns:
            LanguageParser instance

        Raises:
            UnsupportedFileError: If the extension has no grammar
        """
        extension = Path(file_path).suffix.lower()

        language = cls.SUPPORTED_LANGUAGES.get(extension)
        if language is None:
            raise UnsupportedFileError(f"No grammar for '{extension}' files: {file_path}")
        return cls(language)
