"""Document identity and the file-system document source.

Documents are identified by their canonical URI string (``file:///...`` for
files on disk). The index only ever sees these keys; translating them back to
paths, text, and workspace-relative labels goes through a ``DocumentSource``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol
from urllib.parse import unquote, urlparse
from urllib.request import url2pathname

from .errors import ResourceUnavailable


def document_key(path: Path) -> str:
    """Return the canonical key (file URI) for ``path``."""
    return path.resolve().as_uri()


def key_to_path(key: str) -> Path:
    """Return the file-system path addressed by ``key``.

    Plain paths are accepted as well as URIs so hand-written keys still work.
    """
    parsed = urlparse(key)
    if parsed.scheme == "file":
        return Path(url2pathname(parsed.path))
    if not parsed.scheme or len(parsed.scheme) == 1:
        # Bare path, or a Windows drive letter parsed as a scheme.
        return Path(key)
    return Path(unquote(parsed.path))


def read_text(path: Path) -> str:
    """Read ``path`` trying common encodings before replacing bad bytes."""
    for encoding in ("utf-8", "utf-8-sig", "latin-1"):
        try:
            return path.read_text(encoding=encoding)
        except UnicodeDecodeError:
            continue
    return path.read_bytes().decode("utf-8", errors="replace")


class DocumentSource(Protocol):
    def get_text(self, key: str) -> str: ...

    def exists(self, key: str) -> bool: ...

    def resolve_relative_path(self, key: str) -> str: ...


class FileDocumentSource:
    """``DocumentSource`` reading documents from disk under workspace roots."""

    def __init__(self, workspace_roots: list[Path] | None = None) -> None:
        self.workspace_roots = [root.resolve() for root in (workspace_roots or [])]

    def get_text(self, key: str) -> str:
        path = key_to_path(key)
        try:
            return read_text(path)
        except OSError as exc:
            raise ResourceUnavailable(key, exc.strerror or str(exc)) from exc

    def exists(self, key: str) -> bool:
        try:
            return key_to_path(key).exists()
        except (OSError, ValueError):
            return False

    def resolve_relative_path(self, key: str) -> str:
        """Return ``key`` relative to its workspace root.

        With several roots the root folder name is kept as the first segment
        so equally named files stay distinguishable. Paths outside every root
        are returned unchanged.
        """
        path = key_to_path(key)
        for root in self.workspace_roots:
            if not path.is_relative_to(root):
                continue
            relative = path.relative_to(root).as_posix()
            if len(self.workspace_roots) > 1:
                return f"{root.name}/{relative}"
            return relative
        return str(path)
