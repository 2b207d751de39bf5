"""Tree view provider: filtered children, parents, and display items.

This is the surface a tree widget drives. Every call rebuilds nodes from the
index and runs them through the ``FilterEngine``.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence

from .config import ViewSettings
from .filtering import FilterEngine, IgnoreMatcher
from .tree import LOCATION_NODE, FileNode, Neighbors, TreeItem, TreeModel, TreeNode


class BookmarkTreeProvider:
    """Serves filtered bookmark nodes and notifies listeners on refresh."""

    def __init__(
        self,
        model: TreeModel,
        view: ViewSettings,
        words: Sequence[str] = (),
        visible_keys: Callable[[], Iterable[str]] | None = None,
    ) -> None:
        self.model = model
        self.view = view
        self.words = list(words)
        self.visible_keys = visible_keys
        self.engine = FilterEngine(model)
        self._listeners: list[Callable[[], None]] = []

    def _visible(self) -> Callable[[str], bool] | None:
        if not self.view.show_visible_files_only or self.visible_keys is None:
            return None
        keys = set(self.visible_keys())
        return keys.__contains__

    def children(self, node: TreeNode | None = None) -> list[TreeNode]:
        self.engine.visible = self._visible()
        if node is None:
            nodes: list[TreeNode] = list(self.model.roots())
        else:
            nodes = list(self.model.children(node))
        return self.engine.filter(nodes)

    def parent(self, node: TreeNode | None) -> FileNode | None:
        return self.model.parent(node) if node is not None else None

    def neighbors(self, node: TreeNode) -> Neighbors:
        if node.kind != LOCATION_NODE:
            return Neighbors(None, None)
        return self.model.neighbors(node)

    def tree_item(self, node: TreeNode) -> TreeItem:
        hidden = self.words if self.view.hide_words else ()
        return self.model.tree_item(node, expanded=self.view.expanded, hidden_words=hidden)

    def set_filter_words(self, words: Sequence[str]) -> None:
        self.engine.set_words(words)

    def set_ignore_matcher(self, matcher: IgnoreMatcher | None) -> None:
        self.engine.ignore_matcher = matcher

    def on_did_change(self, listener: Callable[[], None]) -> Callable[[], None]:
        """Register ``listener``; returns a callable that unregisters it."""
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def refresh(self) -> None:
        for listener in list(self._listeners):
            listener()
