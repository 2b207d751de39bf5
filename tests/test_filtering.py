from __future__ import annotations

import unittest
from pathlib import Path

from lazymarks.filtering import FilterEngine, compile_filter_words
from lazymarks.index import BookmarkIndex
from lazymarks.matcher import BookmarkEntry, Range
from lazymarks.styles import Styles
from lazymarks.tree import TreeModel

WORDS = {"red": ["TODO"], "blue": ["FIXME"]}


def _relative(key: str) -> str:
    return key.rsplit("/", 1)[-1]


class _IgnoreByName:
    def __init__(self, *names: str) -> None:
        self.names = set(names)

    def is_ignored(self, path: Path) -> bool:
        return path.name in self.names


class FilterEngineBehaviorTests(unittest.TestCase):
    def setUp(self) -> None:
        self.index = BookmarkIndex()
        self.model = TreeModel(self.index, Styles.from_settings(), _relative)

    def test_file_without_matching_descendant_is_pruned(self) -> None:
        self.index.scan_document("file:///w/x.txt", "FIXME later", WORDS)
        engine = FilterEngine(self.model, words=["TODO"])

        self.assertEqual(engine.filter(self.model.roots()), [])

    def test_file_is_kept_when_one_descendant_matches(self) -> None:
        self.index.scan_document("file:///w/x.txt", "FIXME later\nTODO now", WORDS)
        engine = FilterEngine(self.model, words=["TODO"])

        roots = engine.filter(self.model.roots())
        children = engine.filter(self.model.children(roots[0]))

        self.assertEqual([node.key for node in roots], ["file:///w/x.txt"])
        self.assertEqual([node.word for node in children], ["TODO"])

    def test_invalid_regex_is_non_matching_and_others_still_apply(self) -> None:
        self.index.scan_document("file:///w/x.txt", "TODO now", WORDS)
        self.index.scan_document("file:///w/y.txt", "FIXME now", WORDS)

        kept = FilterEngine(self.model, words=["(", "TODO"]).filter(self.model.roots())
        nothing = FilterEngine(self.model, words=["("]).filter(self.model.roots())

        self.assertEqual([node.key for node in kept], ["file:///w/x.txt"])
        self.assertEqual(nothing, [])

    def test_exact_word_match_needs_no_valid_regex(self) -> None:
        entry = BookmarkEntry("red", "[", Range.from_coords(0, 0, 0, 1), "[ bracket")
        self.index.replace("file:///w/x.txt", {"red": [entry]})

        roots = FilterEngine(self.model, words=["["]).filter(self.model.roots())

        self.assertEqual(len(roots), 1)

    def test_regex_matches_word_or_label(self) -> None:
        self.index.scan_document("file:///w/x.txt", "TODO call bob", WORDS)
        self.index.scan_document("file:///w/y.txt", "FIXME call alice", WORDS)

        by_word = FilterEngine(self.model, words=["^TO"]).filter(self.model.roots())
        by_label = FilterEngine(self.model, words=["al+ice"]).filter(self.model.roots())

        self.assertEqual([node.key for node in by_word], ["file:///w/x.txt"])
        self.assertEqual([node.key for node in by_label], ["file:///w/y.txt"])

    def test_file_label_match_keeps_file_but_not_its_children(self) -> None:
        self.index.scan_document("file:///w/notes.txt", "FIXME later", WORDS)
        engine = FilterEngine(self.model, words=["notes"])

        roots = engine.filter(self.model.roots())

        self.assertEqual(len(roots), 1)
        self.assertEqual(engine.filter(self.model.children(roots[0])), [])

    def test_file_retained_iff_child_retained_or_file_matches(self) -> None:
        self.index.scan_document("file:///w/a.txt", "TODO one\nFIXME two", WORDS)
        self.index.scan_document("file:///w/b.txt", "FIXME three", WORDS)
        self.index.scan_document("file:///w/todo.txt", "FIXME four", WORDS)

        for words in (["TODO"], ["FIXME"], ["two"], ["todo"], ["nothing"]):
            engine = FilterEngine(self.model, words=words)
            kept = {node.key for node in engine.filter(self.model.roots())}
            for root in self.model.roots():
                expected = engine.node_matches(root) or bool(engine.filter(self.model.children(root)))
                self.assertEqual(root.key in kept, expected, (words, root.key))

    def test_visibility_and_ignore_predicates(self) -> None:
        for name in ("a.txt", "b.txt", "c.txt"):
            self.index.scan_document(f"file:///w/{name}", "TODO", WORDS)
        engine = FilterEngine(
            self.model,
            visible=lambda key: not key.endswith("a.txt"),
            ignore_matcher=_IgnoreByName("b.txt"),
        )

        kept = engine.filter(self.model.roots())

        self.assertEqual([node.key for node in kept], ["file:///w/c.txt"])

    def test_empty_word_list_keeps_everything(self) -> None:
        self.index.scan_document("file:///w/a.txt", "TODO", WORDS)

        self.assertEqual(len(FilterEngine(self.model, words=["", ""]).filter(self.model.roots())), 1)

    def test_compile_filter_words_skips_invalid(self) -> None:
        self.assertEqual([pattern.pattern for pattern in compile_filter_words(["(", "a+", "[x"])], ["a+"])


if __name__ == "__main__":
    unittest.main()
