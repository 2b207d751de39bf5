from __future__ import annotations

import unittest

from lazymarks.index import BookmarkIndex
from lazymarks.matcher import Range
from lazymarks.styles import Styles, bookmark_icon_uri, RED
from lazymarks.tree import (
    COLLAPSIBLE_COLLAPSED,
    COLLAPSIBLE_EXPANDED,
    COLLAPSIBLE_NONE,
    FileNode,
    LocationNode,
    TreeModel,
    hide_words,
)

WORDS = {"red": ["TODO"], "blue": ["FIXME"]}


def _relative(key: str) -> str:
    return key.rsplit("/", 1)[-1]


class TreeModelBehaviorTests(unittest.TestCase):
    def setUp(self) -> None:
        self.index = BookmarkIndex()
        self.model = TreeModel(self.index, Styles.from_settings(), _relative)

    def test_roots_are_sorted_by_key_and_labelled_relative(self) -> None:
        self.index.scan_document("file:///w/b.txt", "TODO", WORDS)
        self.index.scan_document("file:///w/a.txt", "FIXME", WORDS)

        roots = self.model.roots()

        self.assertEqual([node.key for node in roots], ["file:///w/a.txt", "file:///w/b.txt"])
        self.assertEqual([node.label for node in roots], ["a.txt", "b.txt"])
        self.assertTrue(all(node.kind == "file" for node in roots))

    def test_roots_honor_visibility_predicate(self) -> None:
        self.index.scan_document("file:///w/a.txt", "TODO", WORDS)
        self.index.scan_document("file:///w/b.txt", "TODO", WORDS)

        roots = self.model.roots(lambda key: key.endswith("b.txt"))

        self.assertEqual([node.key for node in roots], ["file:///w/b.txt"])

    def test_children_sorted_by_line_with_stable_ties(self) -> None:
        self.index.scan_document("file:///w/a.txt", "FIXME TODO\nTODO", WORDS)

        children = self.model.children(self.model.roots()[0])

        self.assertEqual(
            [(child.category, child.range.start.line, child.range.start.character) for child in children],
            [("red", 0, 6), ("blue", 0, 0), ("red", 1, 0)],
        )
        self.assertTrue(all(child.parent == self.model.roots()[0] for child in children))
        self.assertEqual(children[0].icon, bookmark_icon_uri(RED))

    def test_locations_are_leaves(self) -> None:
        self.index.scan_document("file:///w/a.txt", "TODO", WORDS)
        location = self.model.children(self.model.roots()[0])[0]

        self.assertEqual(self.model.children(location), [])
        self.assertEqual(self.model.parent(location), self.model.roots()[0])
        self.assertIsNone(self.model.parent(self.model.roots()[0]))

    def test_children_of_removed_document_are_empty(self) -> None:
        self.index.scan_document("file:///w/a.txt", "TODO", WORDS)
        root = self.model.roots()[0]

        self.index.clear("file:///w/a.txt")

        self.assertEqual(self.model.children(root), [])

    def test_neighbors_walk_siblings(self) -> None:
        self.index.scan_document("file:///w/a.txt", "TODO 1\nTODO 2\nFIXME 3", WORDS)
        first, second, third = self.model.children(self.model.roots()[0])

        self.assertEqual(self.model.neighbors(first), (None, second))
        self.assertEqual(self.model.neighbors(second), (first, third))
        self.assertEqual(self.model.neighbors(third), (second, None))

    def test_neighbors_are_symmetric(self) -> None:
        self.index.scan_document("file:///w/a.txt", "TODO\nFIXME\n\nTODO FIXME\nTODO", WORDS)

        for node in self.model.children(self.model.roots()[0]):
            following = self.model.neighbors(node).next
            if following is not None:
                self.assertTrue(self.model.neighbors(following).previous.same_location(node))

    def test_neighbors_of_parentless_location_use_its_document(self) -> None:
        self.index.scan_document("file:///w/a.txt", "TODO 1\nTODO 2", WORDS)
        first, second = self.model.children(self.model.roots()[0])
        bare = LocationNode(key=second.key, category="red", entry=second.entry)

        neighbors = self.model.neighbors(bare)

        self.assertTrue(neighbors.previous.same_location(first))
        self.assertIsNone(neighbors.next)

    def test_node_ids_are_stable_across_rebuilds(self) -> None:
        self.index.scan_document("file:///w/a.txt", "TODO 1\nTODO 2", WORDS)
        first_build = [node.id for node in self.model.children(self.model.roots()[0])]

        self.index.scan_document("file:///w/a.txt", "TODO 1\nTODO 2", WORDS)
        second_build = [node.id for node in self.model.children(self.model.roots()[0])]

        self.assertEqual(first_build, second_build)
        self.assertEqual(len(set(first_build)), 2)
        self.assertEqual(FileNode("file:///w/a.txt", "x").id, FileNode("file:///w/a.txt", "y").id)
        self.assertNotEqual(FileNode("file:///w/a.txt", "x").id, first_build[0])

    def test_tree_items_describe_files_and_locations(self) -> None:
        self.index.scan_document("file:///w/a.txt", "  TODO fix me  ", WORDS)
        root = self.model.roots()[0]
        location = self.model.children(root)[0]

        file_item = self.model.tree_item(root, expanded=True)
        location_item = self.model.tree_item(location)

        self.assertEqual(file_item.collapsible, COLLAPSIBLE_EXPANDED)
        self.assertEqual(self.model.tree_item(root).collapsible, COLLAPSIBLE_COLLAPSED)
        self.assertEqual(location_item.collapsible, COLLAPSIBLE_NONE)
        self.assertEqual(location_item.label, "TODO fix me")
        self.assertEqual(location_item.target, ("file:///w/a.txt", Range.from_coords(0, 2, 0, 6)))
        self.assertEqual(location_item.id, location.id)

    def test_tree_item_can_hide_matched_words(self) -> None:
        self.index.scan_document("file:///w/a.txt", "TODO fix me", WORDS)
        location = self.model.children(self.model.roots()[0])[0]

        item = self.model.tree_item(location, hidden_words=["TODO", "("])

        self.assertEqual(item.label, " fix me")

    def test_hide_words_skips_invalid_patterns(self) -> None:
        self.assertEqual(hide_words("a TODO b", ["[", "TODO"]), "a  b")


if __name__ == "__main__":
    unittest.main()
