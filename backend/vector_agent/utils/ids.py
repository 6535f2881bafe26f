"""Opaque record identifiers: ``<kind>_<32 hex chars>``."""

from __future__ import annotations

import uuid

ID_KINDS = frozenset({"vs", "file", "chunk", "web"})


def new_id(kind: str) -> str:
    """Return a fresh id whose prefix names the record kind."""
    if kind not in ID_KINDS:
        raise ValueError(f"unknown id kind: {kind}")
    return f"{kind}_{uuid.uuid4().hex}"
