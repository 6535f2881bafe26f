"""Filesystem-backed blob store for uploaded file bytes."""

from __future__ import annotations

import re
from pathlib import Path

from vector_agent.core.errors import StorageError

_UNSAFE_CHARS_RE = re.compile(r"[^A-Za-z0-9._-]+")


class BlobStore:
    """Stores bytes under ``<root>/<key>/<filename>`` and hands back the relative reference."""

    def __init__(self, root: Path) -> None:
        self.root = root.expanduser()

    def put(self, data: bytes, key: str, filename: str) -> str:
        reference = f"{_safe_name(key)}/{_safe_name(filename) or 'blob'}"
        target = self._resolve(reference)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as exc:
            raise StorageError(f"failed to write blob {reference}: {exc}") from exc
        return reference

    def get(self, reference: str) -> bytes:
        target = self._resolve(reference)
        try:
            return target.read_bytes()
        except OSError as exc:
            raise StorageError(f"failed to read blob {reference}: {exc}") from exc

    def _resolve(self, reference: str) -> Path:
        root = self.root.resolve()
        target = (root / reference).resolve()
        if root not in target.parents:
            raise StorageError(f"blob reference escapes store root: {reference}")
        return target


def _safe_name(name: str) -> str:
    return _UNSAFE_CHARS_RE.sub("_", name).strip("._")


__all__ = ["BlobStore"]
