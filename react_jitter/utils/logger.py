"""Logging setup and Windows-safe output for terminal compatibility.

Library modules log through ``logging.getLogger(__name__)``; the CLI calls
``configure_logging`` once to route the ``react_jitter`` logger through a
Rich handler. Unicode icons are replaced by ASCII on terminals that cannot
print them.
"""
import sys
import locale
import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "react_jitter"

# Unicode to ASCII icon mapping for Windows compatibility
ICON_MAP = {
    '✓': '[OK]',
    '✗': '[FAIL]',
    '⚠': '[WARN]',
    '→': '->',
    '…': '...',
    '•': '*',
}


def detect_terminal_encoding() -> str:
    """Detect the terminal's encoding capability.

    Returns:
        str: Terminal encoding ('utf-8', 'cp1252', 'ascii', etc.)
    """
    if hasattr(sys.stdout, 'encoding') and sys.stdout.encoding:
        return sys.stdout.encoding.lower()

    try:
        return locale.getpreferredencoding().lower()
    except (LookupError, ValueError):
        return 'ascii'


def is_utf8_capable() -> bool:
    """Check if the terminal can handle UTF-8 Unicode characters."""
    return detect_terminal_encoding() in ('utf-8', 'utf8', 'utf_8')


def sanitize_for_terminal(text: str) -> str:
    """Replace Unicode icons with ASCII equivalents if terminal doesn't support UTF-8.

    Args:
        text: Text potentially containing Unicode icons

    Returns:
        str: Sanitized text safe for current terminal
    """
    if is_utf8_capable():
        return text

    sanitized = text
    for unicode_char, ascii_replacement in ICON_MAP.items():
        sanitized = sanitized.replace(unicode_char, ascii_replacement)
    return sanitized


def configure_logging(level: str | int = logging.WARNING, console: Optional[Console] = None) -> logging.Logger:
    """Attach a single RichHandler to the package logger.

    Calling it again replaces the previous handler, so the CLI can re-point
    logging at a different console (tests do this).

    Args:
        level: Logging level name or number
        console: Console to write to (stderr by default)

    Returns:
        The configured ``react_jitter`` logger
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_time=False,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    logger.addHandler(handler)
    logger.setLevel(level)
    return logger
