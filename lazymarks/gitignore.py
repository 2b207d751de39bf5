"""Git ignore rules for document keys.

Asks git once per workspace root which files and directories are ignored and
answers ``is_ignored`` queries from that snapshot. Matchers are cached with a
short TTL and invalidated when the root directory changes.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import time
from collections import OrderedDict
from dataclasses import dataclass
from pathlib import Path

from .documents import key_to_path

logger = logging.getLogger(__name__)

MATCHER_CACHE_MAX = 64
MATCHER_CACHE_TTL_SECONDS = 2.0


@dataclass(frozen=True)
class _CachedMatcher:
    matcher: GitIgnoreMatcher | None
    root_mtime_ns: int | None
    loaded_at: float


_MATCHER_CACHE: OrderedDict[Path, _CachedMatcher] = OrderedDict()


def clear_gitignore_cache() -> None:
    _MATCHER_CACHE.clear()


@dataclass(frozen=True)
class GitIgnoreMatcher:
    """Ignored paths under ``root`` as reported by ``git ls-files``.

    Directories are kept separately so a file is ignored when any ancestor up
    to ``root`` is.
    """

    root: Path
    ignored_files: frozenset[Path]
    ignored_dirs: frozenset[Path]

    def is_ignored(self, path: Path) -> bool:
        resolved = path.resolve()
        if not resolved.is_relative_to(self.root):
            return False
        if resolved in self.ignored_files:
            return True
        for parent in (resolved, *resolved.parents):
            if not parent.is_relative_to(self.root):
                break
            if parent in self.ignored_dirs:
                return True
        return False

    def is_key_ignored(self, key: str) -> bool:
        return self.is_ignored(key_to_path(key))


class WorkspaceIgnoreMatcher:
    """Combines per-root matchers; a path is ignored if any root ignores it."""

    def __init__(self, matchers: list[GitIgnoreMatcher]) -> None:
        self.matchers = matchers

    def is_ignored(self, path: Path) -> bool:
        return any(matcher.is_ignored(path) for matcher in self.matchers)

    def is_key_ignored(self, key: str) -> bool:
        return self.is_ignored(key_to_path(key))


def _git(args: list[str], cwd: Path) -> bytes | None:
    try:
        proc = subprocess.run(
            ["git", "-C", str(cwd), *args],
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError) as exc:
        logger.debug("git %s failed in %s: %s", args[0], cwd, exc)
        return None
    return proc.stdout


def load_matcher(root: Path) -> GitIgnoreMatcher | None:
    """Query git for ignored paths below ``root``.

    Returns ``None`` when git is missing or ``root`` is not inside a work tree.
    """
    if shutil.which("git") is None:
        return None
    root = root.resolve()
    top_level = _git(["rev-parse", "--show-toplevel"], root)
    if not top_level or not top_level.strip():
        return None
    repo_root = Path(top_level.decode("utf-8", errors="replace").strip()).resolve()
    if not root.is_relative_to(repo_root):
        return None

    listing = _git(["ls-files", "-z", "--others", "-i", "--exclude-standard", "--directory"], repo_root)
    if listing is None:
        return None

    ignored_files: set[Path] = set()
    ignored_dirs: set[Path] = set()
    for raw in listing.split(b"\x00"):
        relative = raw.decode("utf-8", errors="replace")
        if not relative.rstrip("/"):
            continue
        path = (repo_root / relative.rstrip("/")).resolve()
        if not path.is_relative_to(root):
            continue
        if relative.endswith("/") or path.is_dir():
            ignored_dirs.add(path)
        else:
            ignored_files.add(path)
    return GitIgnoreMatcher(root=root, ignored_files=frozenset(ignored_files), ignored_dirs=frozenset(ignored_dirs))


def get_gitignore_matcher(root: Path) -> GitIgnoreMatcher | None:
    """Return a cached matcher for ``root`` with bounded staleness."""
    root = root.resolve()
    try:
        root_mtime_ns: int | None = root.stat().st_mtime_ns
    except OSError:
        root_mtime_ns = None
    now = time.monotonic()

    cached = _MATCHER_CACHE.get(root)
    if (
        cached is not None
        and cached.root_mtime_ns == root_mtime_ns
        and now - cached.loaded_at <= MATCHER_CACHE_TTL_SECONDS
    ):
        _MATCHER_CACHE.move_to_end(root)
        return cached.matcher

    matcher = load_matcher(root)
    _MATCHER_CACHE[root] = _CachedMatcher(matcher=matcher, root_mtime_ns=root_mtime_ns, loaded_at=now)
    _MATCHER_CACHE.move_to_end(root)
    while len(_MATCHER_CACHE) > MATCHER_CACHE_MAX:
        _MATCHER_CACHE.popitem(last=False)
    return matcher


def workspace_ignore_matcher(roots: list[Path]) -> WorkspaceIgnoreMatcher | None:
    """Return a matcher covering every git-backed root, or ``None``."""
    matchers = [matcher for matcher in (get_gitignore_matcher(root) for root in roots) if matcher is not None]
    if not matchers:
        return None
    return WorkspaceIgnoreMatcher(matchers)
