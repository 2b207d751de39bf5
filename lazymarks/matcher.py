"""Regex scanning of document text into bookmark entries.

Each configured word is a regular expression. Matches are collected left to
right without overlap per word; different words and categories may overlap.
A malformed word is logged once and skipped, never aborting the scan.
"""

from __future__ import annotations

import bisect
import logging
import re
import threading
from collections import OrderedDict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from .errors import ConfigurationError

logger = logging.getLogger(__name__)

PATTERN_CACHE_MAX = 256

_PATTERN_CACHE: OrderedDict[str, re.Pattern[str] | ConfigurationError] = OrderedDict()
_PATTERN_CACHE_LOCK = threading.Lock()


@dataclass(frozen=True, order=True)
class Position:
    """Zero-based line/character location inside a document."""

    line: int
    character: int


@dataclass(frozen=True)
class Range:
    """Half-open span between two positions."""

    start: Position
    end: Position

    @classmethod
    def from_coords(cls, start_line: int, start_character: int, end_line: int, end_character: int) -> Range:
        return cls(Position(start_line, start_character), Position(end_line, end_character))


@dataclass(frozen=True)
class BookmarkEntry:
    """One match of ``word`` inside a document.

    ``text`` runs from the match start to the end of its line and is captured
    at scan time; it goes stale when the document changes without a rescan.
    """

    category: str
    word: str
    range: Range
    text: str

    @property
    def line(self) -> int:
        return self.range.start.line


def clear_pattern_cache() -> None:
    """Forget compiled patterns and remembered compile failures."""
    with _PATTERN_CACHE_LOCK:
        _PATTERN_CACHE.clear()


def compile_pattern(pattern: str) -> re.Pattern[str]:
    """Compile ``pattern`` through a bounded LRU cache.

    Raises ``ConfigurationError`` for invalid expressions; failures are cached
    as well so repeated scans do not recompile (or re-log) them.
    """
    with _PATTERN_CACHE_LOCK:
        cached = _PATTERN_CACHE.get(pattern)
        if cached is not None:
            _PATTERN_CACHE.move_to_end(pattern)
    if cached is None:
        try:
            cached = re.compile(pattern)
        except (re.error, TypeError) as exc:
            cached = ConfigurationError(pattern, str(exc))
            logger.warning("skipping %s", cached)
        with _PATTERN_CACHE_LOCK:
            _PATTERN_CACHE[pattern] = cached
            while len(_PATTERN_CACHE) > PATTERN_CACHE_MAX:
                _PATTERN_CACHE.popitem(last=False)
    if isinstance(cached, ConfigurationError):
        raise cached
    return cached


class LineIndex:
    """Offset to position conversion for one text snapshot."""

    def __init__(self, text: str) -> None:
        self.text = text
        self._line_starts = [0]
        for match in re.finditer("\n", text):
            self._line_starts.append(match.end())

    def position_at(self, offset: int) -> Position:
        offset = max(0, min(offset, len(self.text)))
        line = bisect.bisect_right(self._line_starts, offset) - 1
        return Position(line, offset - self._line_starts[line])

    def line_end(self, offset: int) -> int:
        """Return the offset of the line terminator following ``offset``."""
        end = self.text.find("\n", offset)
        if end < 0:
            end = len(self.text)
        if end > offset and self.text[end - 1] == "\r":
            end -= 1
        return end


def find_words(
    text: str,
    category: str,
    words: Sequence[str],
    line_index: LineIndex | None = None,
) -> list[BookmarkEntry]:
    """Return all matches of ``words`` in ``text``, word by word in order."""
    if line_index is None:
        line_index = LineIndex(text)
    entries: list[BookmarkEntry] = []
    for word in words:
        try:
            regex = compile_pattern(word)
        except ConfigurationError:
            continue
        for match in regex.finditer(text):
            matched = match.group(0)
            if not matched:
                continue
            start = match.start()
            # Trailing/leading blanks of the match are not highlighted.
            end = start + len(matched.strip())
            entries.append(
                BookmarkEntry(
                    category=category,
                    word=word,
                    range=Range(line_index.position_at(start), line_index.position_at(end)),
                    text=text[start : line_index.line_end(start)],
                )
            )
    return entries


def scan(text: str, patterns: Iterable[tuple[str, str]]) -> list[BookmarkEntry]:
    """Scan ``text`` for ordered ``(category, pattern)`` pairs."""
    line_index = LineIndex(text)
    entries: list[BookmarkEntry] = []
    for category, pattern in patterns:
        entries.extend(find_words(text, category, [pattern], line_index))
    return entries
