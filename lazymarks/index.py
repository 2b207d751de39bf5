"""Per-document bookmark index with copy-on-write updates.

Maps document key -> category -> ordered entries. A key exists only while it
has at least one non-empty category. Every mutation builds the new per-key
state first and publishes it with a single assignment under the lock, so a
reader holding a snapshot never sees a half-cleared document.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass

from .matcher import BookmarkEntry, LineIndex, find_words

logger = logging.getLogger(__name__)

Categories = Mapping[str, tuple[BookmarkEntry, ...]]


@dataclass(frozen=True)
class ScanRules:
    """Exclusions applied before scanning.

    ``ignored_suffixes`` blacklists whole documents by key suffix.
    ``ignored_word_prefixes`` drops configured words starting with any prefix.
    """

    ignored_suffixes: tuple[str, ...] = ()
    ignored_word_prefixes: tuple[str, ...] = ()

    def is_blacklisted(self, key: str) -> bool:
        return any(suffix and key.endswith(suffix) for suffix in self.ignored_suffixes)

    def is_ignored_word(self, word: str) -> bool:
        return any(prefix and word.startswith(prefix) for prefix in self.ignored_word_prefixes)

    def active_words(self, words: Iterable[str]) -> list[str]:
        """Return ``words`` minus ignored ones, keeping order."""
        return [word for word in words if not self.is_ignored_word(word)]


NO_RULES = ScanRules()


class BookmarkIndex:
    """Thread-safe document -> category -> entries mapping."""

    def __init__(self, documents: Mapping[str, Mapping[str, Sequence[BookmarkEntry]]] | None = None) -> None:
        self._lock = threading.Lock()
        self._documents: dict[str, dict[str, tuple[BookmarkEntry, ...]]] = {}
        for key, categories in (documents or {}).items():
            self.replace(key, categories)

    def __len__(self) -> int:
        with self._lock:
            return len(self._documents)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._documents

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BookmarkIndex):
            return NotImplemented
        return self.documents() == other.documents()

    def __repr__(self) -> str:
        return f"BookmarkIndex({len(self)} documents)"

    def has(self, key: str) -> bool:
        return key in self

    def keys(self) -> list[str]:
        """Return a sorted snapshot of indexed document keys."""
        with self._lock:
            return sorted(self._documents)

    def snapshot(self, key: str) -> dict[str, tuple[BookmarkEntry, ...]]:
        """Return the point-in-time categories for ``key`` (empty when absent)."""
        with self._lock:
            return dict(self._documents.get(key, {}))

    def documents(self) -> dict[str, dict[str, tuple[BookmarkEntry, ...]]]:
        """Return a point-in-time copy of the whole mapping."""
        with self._lock:
            return {key: dict(categories) for key, categories in self._documents.items()}

    def entries(self, key: str) -> list[BookmarkEntry]:
        """Flatten all categories for ``key`` in category then scan order."""
        return [entry for category_entries in self.snapshot(key).values() for entry in category_entries]

    def replace(self, key: str, categories: Mapping[str, Sequence[BookmarkEntry]]) -> None:
        """Publish ``categories`` as the complete state for ``key``."""
        published = {category: tuple(items) for category, items in categories.items() if items}
        with self._lock:
            if published:
                self._documents[key] = published
            else:
                self._documents.pop(key, None)

    def clear(self, key: str) -> None:
        with self._lock:
            self._documents.pop(key, None)

    def reset(self) -> None:
        with self._lock:
            self._documents.clear()

    def scan_document(
        self,
        key: str,
        text: str,
        categorized_patterns: Mapping[str, Sequence[str]],
        rules: ScanRules = NO_RULES,
    ) -> bool:
        """Rescan every category for ``key``, replacing its previous state.

        Returns whether ``key`` holds bookmarks afterwards. Blacklisted keys
        are cleared and never scanned.
        """
        if rules.is_blacklisted(key):
            logger.debug("skipping blacklisted document %s", key)
            self.clear(key)
            return False

        line_index = LineIndex(text)
        categories: dict[str, list[BookmarkEntry]] = {}
        for category, words in categorized_patterns.items():
            active = rules.active_words(words)
            if not active:
                continue
            found = find_words(text, category, active, line_index)
            if found:
                categories[category] = found
        self.replace(key, categories)
        return bool(categories)

    def scan_category(
        self,
        key: str,
        category: str,
        text: str,
        patterns: Sequence[str],
        rules: ScanRules = NO_RULES,
    ) -> bool:
        """Rescan one category of ``key`` and leave the others untouched."""
        if rules.is_blacklisted(key):
            self.clear(key)
            return False

        active = rules.active_words(patterns)
        found = find_words(text, category, active) if active else []
        with self._lock:
            categories = dict(self._documents.get(key, {}))
            if found:
                categories[category] = tuple(found)
            else:
                categories.pop(category, None)
            if categories:
                self._documents[key] = categories
            else:
                self._documents.pop(key, None)
        return bool(found)
