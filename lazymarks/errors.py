"""Exception types for scanning, reading, and persisting bookmarks.

None of these abort a scan or a load. Callers catch them at the seam where
the failure happens, log it, and continue with fewer bookmarks.
"""

from __future__ import annotations


class BookmarkError(Exception):
    """Base class for recoverable bookmark failures."""


class ConfigurationError(BookmarkError):
    """A configured word or filter is not a valid regular expression."""

    def __init__(self, pattern: str, reason: str) -> None:
        super().__init__(f"invalid pattern {pattern!r}: {reason}")
        self.pattern = pattern
        self.reason = reason


class ResourceUnavailable(BookmarkError):
    """A document could not be opened or decoded."""

    def __init__(self, key: str, reason: str = "") -> None:
        message = f"cannot read {key}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.key = key


class StoreUnavailable(BookmarkError):
    """No workspace context exists to persist bookmarks into."""
