"""Terminal rendering of bookmark line text.

Neutralizes control bytes, then colors the text with Pygments using the lexer
for the bookmark's file name.
"""

from __future__ import annotations

import re
from functools import lru_cache
from pathlib import Path

from pygments import highlight
from pygments.formatters import TerminalFormatter
from pygments.lexers import TextLexer, get_lexer_for_filename
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

DEFAULT_STYLE = "monokai"

_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")


def sanitize_terminal_text(source: str) -> str:
    """Escape terminal control bytes to avoid side effects (bell, cursor moves, etc.)."""
    if _CONTROL_RE.search(source) is None:
        return source
    return _CONTROL_RE.sub(lambda match: f"\\x{ord(match.group(0)):02x}", source)


@lru_cache(maxsize=32)
def _formatter(style: str) -> TerminalFormatter:
    try:
        get_style_by_name(style)
    except ClassNotFound:
        style = DEFAULT_STYLE
    return TerminalFormatter(style=style)


def _lexer_for(path: Path, text: str):
    try:
        return get_lexer_for_filename(path.name, text)
    except ClassNotFound:
        return TextLexer()


def colorize_line(text: str, path: Path, style: str = DEFAULT_STYLE, no_color: bool = False) -> str:
    """Return ``text`` made safe for a terminal, syntax-colored unless ``no_color``."""
    clean = sanitize_terminal_text(text.strip())
    if no_color or not clean:
        return clean
    rendered = highlight(clean, _lexer_for(path, clean), _formatter(style))
    return rendered.rstrip("\n")
