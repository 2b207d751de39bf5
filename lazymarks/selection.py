"""Flat, path-grouped bookmark lists for pickers and plain-text listings.

Entries are sorted by (path, file name, word, label). The longest common
directory shared by all files is stripped for display, and a header entry is
inserted before the first bookmark of every file.
"""

from __future__ import annotations

from collections.abc import Callable, Collection
from dataclasses import dataclass, replace
from pathlib import PurePath

from .documents import key_to_path
from .index import BookmarkIndex
from .matcher import Range

INDENT = "    "


@dataclass(frozen=True)
class SelectionEntry:
    """One picker row: either a file header or a bookmark below it."""

    label: str
    filename: str
    filepath: str
    key: str
    is_header: bool = False
    relative_path: str = ""
    text: str = ""
    word: str = ""
    category: str = ""
    range: Range | None = None

    @property
    def description(self) -> str:
        return self.filename


def common_directory(paths: Collection[str]) -> PurePath | None:
    """Return the deepest directory containing every path, if any."""
    if not paths:
        return None
    parts_lists = [PurePath(path).parts for path in paths]
    # The file name itself never counts, so one file keeps a non-empty label.
    common_len = min(len(parts) for parts in parts_lists) - 1
    for idx in range(max(0, common_len)):
        token = parts_lists[0][idx]
        if any(parts[idx] != token for parts in parts_lists[1:]):
            common_len = idx
            break
    if common_len <= 0:
        return None
    return PurePath(*parts_lists[0][:common_len])


def relative_to_common(path: str, common: PurePath | None) -> str:
    if common is None:
        return path
    return PurePath(path).relative_to(common).as_posix()


def collect_entries(
    index: BookmarkIndex,
    path_filter: Callable[[str], bool] | None = None,
    visible_paths: Collection[str] | None = None,
) -> list[SelectionEntry]:
    """Return every bookmark as an unsorted, ungrouped entry."""
    entries: list[SelectionEntry] = []
    for key, categories in index.documents().items():
        filepath = str(key_to_path(key))
        if visible_paths is not None and filepath not in visible_paths:
            continue
        if path_filter is not None and not path_filter(filepath):
            continue
        filename = PurePath(filepath).name
        for category, bookmarks in categories.items():
            for bookmark in bookmarks:
                entries.append(
                    SelectionEntry(
                        label=f"{filename}: {bookmark.text}",
                        filename=filename,
                        filepath=filepath,
                        key=key,
                        text=bookmark.text,
                        word=bookmark.word,
                        category=category,
                        range=bookmark.range,
                    )
                )
    entries.sort(key=lambda entry: (entry.filepath, entry.filename, entry.word, entry.label))
    return entries


def build_selection_entries(
    index: BookmarkIndex,
    path_filter: Callable[[str], bool] | None = None,
    visible_paths: Collection[str] | None = None,
) -> list[SelectionEntry]:
    """Return sorted entries grouped under one header per relative path."""
    entries = collect_entries(index, path_filter, visible_paths)
    common = common_directory({entry.filepath for entry in entries})

    grouped: list[SelectionEntry] = []
    current_relative: str | None = None
    for entry in entries:
        relative = relative_to_common(entry.filepath, common)
        if relative != current_relative:
            current_relative = relative
            grouped.append(
                SelectionEntry(
                    label=relative,
                    filename=entry.filename,
                    filepath=entry.filepath,
                    key=entry.key,
                    is_header=True,
                    relative_path=relative,
                )
            )
        grouped.append(replace(entry, label=INDENT + entry.text.strip(), relative_path=relative))
    return grouped


def format_listing(
    index: BookmarkIndex,
    path_filter: Callable[[str], bool] | None = None,
    render_text: Callable[[SelectionEntry], str] | None = None,
    visible_paths: Collection[str] | None = None,
) -> list[str]:
    """Return a numbered ``path:line:column`` listing, two lines per bookmark."""
    lines: list[str] = []
    for number, entry in enumerate(collect_entries(index, path_filter, visible_paths), start=1):
        assert entry.range is not None
        start = entry.range.start
        lines.append(f"#{number}\t{entry.filepath}:{start.line + 1}:{start.character + 1}")
        text = render_text(entry) if render_text is not None else entry.text
        lines.append(f"\t{text}")
        lines.append("")
    return lines
