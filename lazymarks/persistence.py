"""Saving and restoring the bookmark index through a key/value store.

The persisted blob is a JSON object::

    {document_key: {category: [{"text": str, "word": str,
                                "range": [{"line": int, "character": int},
                                          {"line": int, "character": int}]}]}}

Loading drops documents that no longer exist and skips malformed records.
A missing blob or an unavailable store yields an empty index.
"""

from __future__ import annotations

import hashlib
import json
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Protocol

from platformdirs import user_state_dir

from .errors import StoreUnavailable
from .index import BookmarkIndex
from .matcher import BookmarkEntry, Position, Range

logger = logging.getLogger(__name__)

APP_NAME = "lazymarks"
STORE_KEY = "bookmarks.object"
EMPTY_BLOB = "{}"


class Store(Protocol):
    def get(self, key: str, default: object = None) -> object: ...

    def set(self, key: str, value: object) -> None: ...


def workspace_store_path(workspace_roots: list[Path]) -> Path | None:
    """Return the state file for a workspace, or ``None`` without roots."""
    if not workspace_roots:
        return None
    identity = "\n".join(str(root.resolve()) for root in workspace_roots)
    digest = hashlib.sha1(identity.encode("utf-8")).hexdigest()
    return Path(user_state_dir(APP_NAME, appauthor=False)) / "workspaces" / f"{digest}.json"


class JsonFileStore:
    """Key/value store persisted as one JSON object in ``path``.

    Constructed without a path it models "no workspace": every access raises
    ``StoreUnavailable``.
    """

    def __init__(self, path: Path | None) -> None:
        self.path = path

    @property
    def available(self) -> bool:
        return self.path is not None

    def _require_path(self) -> Path:
        if self.path is None:
            raise StoreUnavailable("no workspace is open")
        return self.path

    def _load(self) -> dict[str, object]:
        path = self._require_path()
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as exc:
            logger.warning("ignoring unreadable store %s: %s", path, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def get(self, key: str, default: object = None) -> object:
        return self._load().get(key, default)

    def set(self, key: str, value: object) -> None:
        path = self._require_path()
        data = self._load()
        data[key] = value
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(data) + "\n", encoding="utf-8")
        except OSError as exc:
            logger.warning("could not write store %s: %s", path, exc)


def encode_entry(entry: BookmarkEntry) -> dict[str, object]:
    start, end = entry.range.start, entry.range.end
    return {
        "text": entry.text,
        "word": entry.word,
        "range": [
            {"line": start.line, "character": start.character},
            {"line": end.line, "character": end.character},
        ],
    }


def _decode_position(raw: object) -> Position | None:
    if not isinstance(raw, dict):
        return None
    line = raw.get("line")
    character = raw.get("character")
    if isinstance(line, bool) or isinstance(character, bool):
        return None
    if not isinstance(line, int) or not isinstance(character, int):
        return None
    return Position(max(0, line), max(0, character))


def decode_entry(category: str, raw: object) -> BookmarkEntry | None:
    """Rebuild one entry, returning ``None`` for malformed records."""
    if not isinstance(raw, dict):
        return None
    text = raw.get("text")
    word = raw.get("word")
    raw_range = raw.get("range")
    if not isinstance(text, str) or not isinstance(word, str):
        return None
    if not isinstance(raw_range, list) or len(raw_range) != 2:
        return None
    start = _decode_position(raw_range[0])
    end = _decode_position(raw_range[1])
    if start is None or end is None:
        return None
    return BookmarkEntry(category=category, word=word, range=Range(start, end), text=text)


def save_index(index: BookmarkIndex) -> str:
    """Serialize ``index`` to the JSON wire format."""
    payload = {
        key: {category: [encode_entry(entry) for entry in entries] for category, entries in categories.items()}
        for key, categories in index.documents().items()
    }
    return json.dumps(payload)


def load_index(blob: str | None, exists: Callable[[str], bool]) -> BookmarkIndex:
    """Deserialize ``blob`` keeping only documents for which ``exists`` holds."""
    index = BookmarkIndex()
    if not blob:
        return index
    try:
        payload = json.loads(blob)
    except ValueError as exc:
        logger.warning("discarding malformed bookmark blob: %s", exc)
        return index
    if not isinstance(payload, dict):
        return index

    for key, raw_categories in payload.items():
        if not isinstance(key, str) or not isinstance(raw_categories, dict):
            continue
        if not exists(key):
            logger.debug("dropping stale bookmarks for %s", key)
            continue
        categories: dict[str, list[BookmarkEntry]] = {}
        for category, raw_entries in raw_categories.items():
            if not isinstance(raw_entries, list):
                continue
            decoded = [decode_entry(category, raw) for raw in raw_entries]
            categories[category] = [entry for entry in decoded if entry is not None]
        index.replace(key, categories)
    return index


class PersistenceBridge:
    """Reads and writes the index blob under ``STORE_KEY``."""

    def __init__(self, store: Store | None, exists: Callable[[str], bool]) -> None:
        self.store = store
        self.exists = exists

    def save(self, index: BookmarkIndex) -> None:
        if self.store is None:
            return
        try:
            self.store.set(STORE_KEY, save_index(index))
        except StoreUnavailable:
            logger.debug("no workspace store; bookmarks not saved")

    def load(self) -> BookmarkIndex:
        if self.store is None:
            return BookmarkIndex()
        try:
            blob = self.store.get(STORE_KEY)
        except StoreUnavailable:
            logger.debug("no workspace store; starting with empty bookmarks")
            return BookmarkIndex()
        return load_index(blob if isinstance(blob, str) else None, self.exists)

    def reset(self) -> None:
        if self.store is None:
            return
        try:
            self.store.set(STORE_KEY, EMPTY_BLOB)
        except StoreUnavailable:
            logger.debug("no workspace store; nothing to reset")
