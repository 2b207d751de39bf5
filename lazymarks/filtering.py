"""Pruning tree nodes by visibility, ignore rules, and filter words.

Predicates run as a pipeline. The word filter is recursive: a node survives
when it matches or when any descendant does, so a file stays visible exactly
as long as one of its bookmarks passes.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable, Sequence
from pathlib import Path
from typing import Protocol

from .documents import key_to_path
from .errors import ConfigurationError
from .matcher import compile_pattern
from .tree import TreeModel, TreeNode

logger = logging.getLogger(__name__)


class IgnoreMatcher(Protocol):
    def is_ignored(self, path: Path) -> bool: ...


def compile_filter_words(words: Iterable[str]) -> list[re.Pattern[str]]:
    """Compile filter words, leaving out invalid expressions."""
    compiled: list[re.Pattern[str]] = []
    for word in words:
        try:
            compiled.append(compile_pattern(word))
        except ConfigurationError:
            continue
    return compiled


class FilterEngine:
    """Applies visibility, ignore, and word predicates to tree nodes."""

    def __init__(
        self,
        model: TreeModel,
        visible: Callable[[str], bool] | None = None,
        ignore_matcher: IgnoreMatcher | None = None,
        words: Sequence[str] = (),
    ) -> None:
        self.model = model
        self.visible = visible
        self.ignore_matcher = ignore_matcher
        self.set_words(words)

    def set_words(self, words: Sequence[str]) -> None:
        self.words = [word for word in words if word]
        self._patterns = compile_filter_words(self.words)

    def node_matches(self, node: TreeNode) -> bool:
        """Return whether ``node`` itself matches any filter word."""
        word = node.word
        if word and word in self.words:
            return True
        if word and any(pattern.search(word) for pattern in self._patterns):
            return True
        label = node.label
        return bool(label) and any(pattern.search(label) for pattern in self._patterns)

    def matches(self, node: TreeNode) -> bool:
        """Return whether ``node`` or any descendant matches the filter words."""
        if self.node_matches(node):
            return True
        return any(self.matches(child) for child in self.model.children(node))

    def is_ignored(self, node: TreeNode) -> bool:
        if self.ignore_matcher is None:
            return False
        try:
            return self.ignore_matcher.is_ignored(key_to_path(node.key))
        except (OSError, ValueError) as exc:
            logger.debug("ignore check failed for %s: %s", node.key, exc)
            return False

    def filter(self, nodes: Iterable[TreeNode]) -> list[TreeNode]:
        result = list(nodes)
        if self.visible is not None:
            result = [node for node in result if self.visible(node.key)]
        if self.ignore_matcher is not None:
            result = [node for node in result if not self.is_ignored(node)]
        if self.words:
            result = [node for node in result if self.matches(node)]
        return result
