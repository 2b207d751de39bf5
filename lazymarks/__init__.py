"""Public package surface for lazymarks.

Exports ``main`` for programmatic CLI invocation plus the core index types.
Most implementation lives in submodules under ``lazymarks``.
"""

from __future__ import annotations

from .index import BookmarkIndex, ScanRules
from .matcher import BookmarkEntry, Position, Range


def main(*args, **kwargs):
    """Lazily import CLI entrypoint to keep package imports lightweight."""
    from .cli import main as _main

    return _main(*args, **kwargs)


__all__ = ["main", "BookmarkEntry", "BookmarkIndex", "Position", "Range", "ScanRules"]
