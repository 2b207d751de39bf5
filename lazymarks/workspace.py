"""Workspace file discovery for bulk bookmark scans.

Walks each workspace root, keeps files matching an include glob and no
exclude glob, and stops at the configured file cap. Globs are matched against
root-relative POSIX paths; a leading ``**/`` also matches at the root.
"""

from __future__ import annotations

import fnmatch
import logging
import os
from collections.abc import Sequence
from pathlib import Path

from .config import DEFAULT_INCLUDES, SearchSettings
from .filtering import IgnoreMatcher

logger = logging.getLogger(__name__)


def glob_matches(relative: str, pattern: str) -> bool:
    """Match ``relative`` against ``pattern`` letting ``**/`` span zero directories."""
    candidates = {pattern, pattern.replace("/**/", "/")}
    for candidate in list(candidates):
        if candidate.startswith("**/"):
            candidates.add(candidate[3:])
    return any(fnmatch.fnmatchcase(relative, candidate) for candidate in candidates)


def _matches_any(relative: str, patterns: Sequence[str]) -> bool:
    return any(glob_matches(relative, pattern) for pattern in patterns)


def collect_workspace_files(
    roots: Sequence[Path],
    search: SearchSettings,
    ignore_matcher: IgnoreMatcher | None = None,
) -> list[Path]:
    """Return at most ``search.max_files`` files below ``roots`` in walk order."""
    includes = search.includes or DEFAULT_INCLUDES
    files: list[Path] = []
    for root in roots:
        root = root.resolve()
        for dirpath, dirnames, filenames in os.walk(root):
            base = Path(dirpath)
            relative_base = base.relative_to(root).as_posix()
            prefix = "" if relative_base == "." else relative_base + "/"

            kept_dirs = []
            for name in sorted(dirnames):
                if _matches_any(f"{prefix}{name}/", search.excludes):
                    continue
                if ignore_matcher is not None and ignore_matcher.is_ignored(base / name):
                    continue
                kept_dirs.append(name)
            dirnames[:] = kept_dirs

            for name in sorted(filenames):
                relative = prefix + name
                if not _matches_any(relative, includes) or _matches_any(relative, search.excludes):
                    continue
                path = base / name
                if ignore_matcher is not None and ignore_matcher.is_ignored(path):
                    continue
                files.append(path)
                if len(files) >= search.max_files:
                    logger.info("file limit of %d reached; remaining files are not scanned", search.max_files)
                    return files
    if not files:
        logger.info("no files found")
    return files
