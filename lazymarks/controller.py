"""Owner of the bookmark index and everything that updates it.

The controller ties settings, styles, the document source, and persistence
together. Document scans replace one key's state at a time; workspace scans
fan single-document scans out over a thread pool and persist once at the end.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from .config import BookmarkSettings
from .documents import DocumentSource, document_key
from .errors import ResourceUnavailable
from .gitignore import workspace_ignore_matcher
from .index import BookmarkIndex
from .persistence import PersistenceBridge, Store
from .styles import Styles
from .workspace import collect_workspace_files

logger = logging.getLogger(__name__)

SCAN_WORKERS = 8


class BookmarkController:
    """Scans documents into a ``BookmarkIndex`` and keeps it persisted."""

    def __init__(
        self,
        settings: BookmarkSettings,
        documents: DocumentSource,
        store: Store | None = None,
        styles: Styles | None = None,
    ) -> None:
        self.settings = settings
        self.documents = documents
        self.styles = styles or Styles.from_settings(settings.custom_styles)
        self.words = settings.words
        self.persistence = PersistenceBridge(store, documents.exists)
        self.index = BookmarkIndex()
        self.load_from_workspace()

    def has_bookmarks(self) -> bool:
        return len(self.index) > 0

    def _read(self, key: str, text: str | None) -> str | None:
        if text is not None:
            return text
        try:
            return self.documents.get_text(key)
        except ResourceUnavailable as exc:
            logger.warning("%s", exc)
            return None

    def update_bookmarks(self, key: str, text: str | None = None, *, save: bool = True) -> bool:
        """Rescan every category of ``key``; returns whether it has bookmarks.

        ``text`` is the current buffer content when the host has it; otherwise
        the document source is read. Unreadable documents are skipped.
        """
        text = self._read(key, text)
        if text is None:
            return False
        found = self.index.scan_document(key, text, self.words, self.settings.scan_rules)
        if save:
            self.save_to_workspace()
        return found

    def update_category(self, key: str, category: str, text: str | None = None, *, save: bool = True) -> bool:
        """Rescan only ``category`` of ``key``."""
        text = self._read(key, text)
        if text is None:
            return False
        found = self.index.scan_category(
            key,
            category,
            text,
            self.words.get(category, ()),
            self.settings.scan_rules,
        )
        if save:
            self.save_to_workspace()
        return found

    def refresh(self) -> None:
        """Rescan every document currently holding bookmarks."""
        for key in self.index.keys():
            self.update_bookmarks(key, save=False)
        self.save_to_workspace()

    def scan_workspace(
        self,
        roots: Sequence[Path],
        *,
        skip_gitignored: bool = False,
        max_workers: int = SCAN_WORKERS,
    ) -> int:
        """Scan every matching file below ``roots``; returns the file count.

        Files that cannot be read are logged and skipped, never retried.
        """
        ignore_matcher = workspace_ignore_matcher(list(roots)) if skip_gitignored else None
        files = collect_workspace_files(roots, self.settings.search, ignore_matcher)
        if not files:
            return 0

        keys = [document_key(path) for path in files]
        with ThreadPoolExecutor(max_workers=max(1, max_workers), thread_name_prefix="lazymarks-scan") as executor:
            for key, future in zip(keys, [executor.submit(self.update_bookmarks, key, save=False) for key in keys]):
                try:
                    future.result()
                except Exception:
                    logger.exception("scanning %s failed", key)
        self.save_to_workspace()
        logger.info("scanned %d files, %d with bookmarks", len(files), len(self.index))
        return len(files)

    def load_from_workspace(self) -> None:
        loaded = self.persistence.load()
        for key, categories in loaded.documents().items():
            self.index.replace(key, categories)

    def save_to_workspace(self) -> None:
        self.persistence.save(self.index)

    def reset_workspace(self) -> None:
        self.index.reset()
        self.persistence.reset()
