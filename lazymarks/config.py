"""Persistent JSON settings for bookmark words, exclusions, search, and view.

The file mirrors the host settings tree (``default.words.red``,
``exceptions.words.ignore``, ``search.maxFiles``, ...) as nested objects.
All access is defensive: malformed or missing values fall back to defaults.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

from platformdirs import user_config_dir

from .index import ScanRules

logger = logging.getLogger(__name__)

APP_NAME = "lazymarks"
CONFIG_FILENAME = "config.json"
CONFIG_PATH = Path(user_config_dir(APP_NAME, appauthor=False)) / CONFIG_FILENAME

DEFAULT_WORDS: dict[str, str] = {
    "blue": r"@audit\-info[ \t\n]",
    "purple": r"@audit[ \t\n]",
    "green": r"@audit\-ok[ \t\n]",
    "red": r"@audit\-issue[ \t\n]",
}
DEFAULT_INCLUDES = ("**/*",)
DEFAULT_EXCLUDES = ("**/.git/**", "**/node_modules/**")
DEFAULT_MAX_FILES = 5000


def split_unique_list(value: object) -> list[str]:
    """Split a comma-separated setting into trimmed unique items, keeping order."""
    if isinstance(value, (list, tuple)):
        items = [str(item).strip() for item in value]
    elif isinstance(value, str):
        items = [item.strip() for item in value.strip().split(",")]
    else:
        return []
    return list(dict.fromkeys(item for item in items if item))


@dataclass(frozen=True)
class SearchSettings:
    includes: tuple[str, ...] = DEFAULT_INCLUDES
    excludes: tuple[str, ...] = DEFAULT_EXCLUDES
    max_files: int = DEFAULT_MAX_FILES


@dataclass(frozen=True)
class ViewSettings:
    show_visible_files_only: bool = False
    expanded: bool = False
    hide_words: bool = False


@dataclass(frozen=True)
class BookmarkSettings:
    """Resolved settings; ``words`` maps category to its ordered patterns."""

    words: dict[str, tuple[str, ...]] = field(
        default_factory=lambda: {name: tuple(split_unique_list(value)) for name, value in DEFAULT_WORDS.items()}
    )
    custom_styles: dict[str, dict[str, object]] = field(default_factory=dict)
    ignored_extensions: tuple[str, ...] = ()
    ignored_word_prefixes: tuple[str, ...] = ()
    search: SearchSettings = field(default_factory=SearchSettings)
    view: ViewSettings = field(default_factory=ViewSettings)

    @property
    def scan_rules(self) -> ScanRules:
        return ScanRules(
            ignored_suffixes=self.ignored_extensions,
            ignored_word_prefixes=self.ignored_word_prefixes,
        )

    def all_words(self) -> list[str]:
        return [word for words in self.words.values() for word in words]


def load_config(path: Path | None = None) -> dict[str, object]:
    """Load the persisted JSON config object.

    Returns an empty dict when the file is missing, unreadable, malformed, or
    does not decode to a top-level JSON object.
    """
    config_path = path or CONFIG_PATH
    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as exc:
        logger.warning("ignoring unreadable config %s: %s", config_path, exc)
        return {}
    return data if isinstance(data, dict) else {}


def save_config(data: dict[str, object], path: Path | None = None) -> None:
    """Persist config data as pretty-printed JSON, logging write failures."""
    config_path = path or CONFIG_PATH
    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    except OSError as exc:
        logger.warning("could not write config %s: %s", config_path, exc)


def _lookup(data: dict[str, object], dotted: str) -> object:
    """Walk ``a.b.c`` through nested dicts, returning ``None`` when absent."""
    current: object = data
    for part in dotted.split("."):
        if not isinstance(current, dict):
            return None
        current = current.get(part)
    return current


def _coerce_bool(value: object, default: bool) -> bool:
    return value if isinstance(value, bool) else default


def _coerce_globs(value: object, default: tuple[str, ...]) -> tuple[str, ...]:
    if isinstance(value, str):
        return (value,) if value.strip() else default
    if isinstance(value, list):
        globs = tuple(item for item in value if isinstance(item, str) and item.strip())
        return globs
    return default


def _coerce_max_files(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        return DEFAULT_MAX_FILES
    return value


def _resolve_words(data: dict[str, object]) -> dict[str, tuple[str, ...]]:
    """Merge default category words with the custom mapping (custom wins)."""
    words: dict[str, tuple[str, ...]] = {}
    for name, fallback in DEFAULT_WORDS.items():
        raw = _lookup(data, f"default.words.{name}")
        words[name] = tuple(split_unique_list(raw if isinstance(raw, str) else fallback))

    mapping = _lookup(data, "expert.custom.words.mapping")
    if isinstance(mapping, dict):
        for name, raw in mapping.items():
            if isinstance(raw, list):
                # Custom words are regexes and may legitimately contain commas.
                words[str(name)] = tuple(item for item in raw if isinstance(item, str) and item)
            elif isinstance(raw, str):
                words[str(name)] = tuple(split_unique_list(raw))
    return words


def settings_from_dict(data: dict[str, object]) -> BookmarkSettings:
    """Build ``BookmarkSettings`` from a decoded config object."""
    raw_styles = _lookup(data, "expert.custom.styles")
    custom_styles = {
        str(name): dict(options)
        for name, options in (raw_styles.items() if isinstance(raw_styles, dict) else [])
        if isinstance(options, dict)
    }
    return BookmarkSettings(
        words=_resolve_words(data),
        custom_styles=custom_styles,
        ignored_extensions=tuple(split_unique_list(_lookup(data, "exceptions.file.extensions.ignore"))),
        ignored_word_prefixes=tuple(split_unique_list(_lookup(data, "exceptions.words.ignore"))),
        search=SearchSettings(
            includes=_coerce_globs(_lookup(data, "search.includes"), DEFAULT_INCLUDES),
            excludes=_coerce_globs(_lookup(data, "search.excludes"), DEFAULT_EXCLUDES),
            max_files=_coerce_max_files(_lookup(data, "search.maxFiles")),
        ),
        view=ViewSettings(
            show_visible_files_only=_coerce_bool(_lookup(data, "view.showVisibleFilesOnly"), False),
            expanded=_coerce_bool(_lookup(data, "view.expanded"), False),
            hide_words=_coerce_bool(_lookup(data, "view.words.hide"), False),
        ),
    )


def load_settings(path: Path | None = None) -> BookmarkSettings:
    """Load settings from ``path`` (default ``CONFIG_PATH``)."""
    return settings_from_dict(load_config(path))
