"""Two-level bookmark tree (file -> location) derived from the index.

Nodes are rebuilt on every query from an index snapshot and never cached.
Their ids hash the identifying fields, so an unchanged bookmark keeps its id
across rebuilds.
"""

from __future__ import annotations

import hashlib
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from typing import ClassVar, NamedTuple, Union

from .errors import ConfigurationError
from .index import BookmarkIndex
from .matcher import BookmarkEntry, Range, compile_pattern
from .styles import Styles

FILE_NODE = "file"
LOCATION_NODE = "location"
FILE_ICON = "file"

COLLAPSIBLE_NONE = "none"
COLLAPSIBLE_COLLAPSED = "collapsed"
COLLAPSIBLE_EXPANDED = "expanded"


def node_id(*fields: object) -> str:
    """Return a stable SHA-1 id for an ordered tuple of identifying fields."""
    digest = hashlib.sha1()
    for value in fields:
        digest.update(repr(value).encode("utf-8"))
        digest.update(b"\x1f")
    return digest.hexdigest()


def _range_fields(value: Range) -> tuple[int, int, int, int]:
    return (value.start.line, value.start.character, value.end.line, value.end.character)


@dataclass(frozen=True)
class FileNode:
    """Tree root for one bookmarked document."""

    kind: ClassVar[str] = FILE_NODE

    key: str
    label: str
    icon: str = FILE_ICON

    @property
    def id(self) -> str:
        return node_id(self.key)

    @property
    def word(self) -> str:
        return ""


@dataclass(frozen=True)
class LocationNode:
    """One bookmark below its document's ``FileNode``."""

    kind: ClassVar[str] = LOCATION_NODE

    key: str
    category: str
    entry: BookmarkEntry
    parent: FileNode | None = None
    icon: str = ""

    @property
    def id(self) -> str:
        return node_id(self.key, *_range_fields(self.entry.range))

    @property
    def label(self) -> str:
        return self.entry.text.strip()

    @property
    def word(self) -> str:
        return self.entry.word.strip()

    @property
    def range(self) -> Range:
        return self.entry.range

    def same_location(self, other: LocationNode) -> bool:
        return self.key == other.key and self.entry.range == other.entry.range


TreeNode = Union[FileNode, LocationNode]


class Neighbors(NamedTuple):
    previous: LocationNode | None
    next: LocationNode | None


@dataclass(frozen=True)
class TreeItem:
    """Widget-agnostic description of how one node is displayed."""

    id: str
    label: str
    collapsible: str
    resource: str
    icon: str
    target: tuple[str, Range] | None = None
    tooltip: str | None = None


def hide_words(label: str, words: Iterable[str]) -> str:
    """Remove every match of ``words`` from ``label``; invalid words are skipped."""
    for word in words:
        try:
            label = compile_pattern(word).sub("", label)
        except ConfigurationError:
            continue
    return label


class TreeModel:
    """Derives ``FileNode``/``LocationNode`` hierarchies from a ``BookmarkIndex``."""

    def __init__(
        self,
        index: BookmarkIndex,
        styles: Styles,
        relative_path: Callable[[str], str] | None = None,
    ) -> None:
        self.index = index
        self.styles = styles
        self.relative_path = relative_path or (lambda key: key)

    def file_node(self, key: str) -> FileNode:
        return FileNode(key=key, label=self.relative_path(key))

    def roots(self, visible: Callable[[str], bool] | None = None) -> list[FileNode]:
        """Return one node per indexed document passing ``visible``, sorted by key."""
        return [self.file_node(key) for key in self.index.keys() if visible is None or visible(key)]

    def children(self, node: TreeNode) -> list[LocationNode]:
        """Return locations of a file node sorted by start line; locations are leaves."""
        if node.kind != FILE_NODE:
            return []
        locations = [
            LocationNode(
                key=node.key,
                category=category,
                entry=entry,
                parent=node,
                icon=self.styles.icon_for(category),
            )
            for category, entries in self.index.snapshot(node.key).items()
            for entry in entries
        ]
        locations.sort(key=lambda location: location.entry.range.start.line)
        return locations

    def parent(self, node: TreeNode) -> FileNode | None:
        return node.parent if node.kind == LOCATION_NODE else None

    def neighbors(self, node: LocationNode) -> Neighbors:
        """Return the siblings before and after ``node`` within its document.

        A location without a parent gets one synthesized from its key.
        Siblings are compared by key and range, not object identity.
        """
        parent = node.parent or self.file_node(node.key)
        previous: LocationNode | None = None
        found = False
        for sibling in self.children(parent):
            if not found and sibling.same_location(node):
                found = True
                continue
            if not found:
                previous = sibling
            else:
                return Neighbors(previous, sibling)
        return Neighbors(previous, None)

    def tree_item(
        self,
        node: TreeNode,
        expanded: bool = False,
        hidden_words: Sequence[str] = (),
    ) -> TreeItem:
        label = hide_words(node.label, hidden_words) if hidden_words else node.label
        if node.kind == LOCATION_NODE:
            return TreeItem(
                id=node.id,
                label=label,
                collapsible=COLLAPSIBLE_NONE,
                resource=node.key,
                icon=node.icon,
                target=(node.key, node.entry.range),
                tooltip=node.category,
            )
        return TreeItem(
            id=node.id,
            label=label,
            collapsible=COLLAPSIBLE_EXPANDED if expanded else COLLAPSIBLE_COLLAPSED,
            resource=node.key,
            icon=node.icon,
            tooltip=node.key,
        )

