"""Internal dataclasses representing persisted entities."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass, field
from typing import Any, Literal

import orjson

FileStatus = Literal["processing", "completed", "error"]
ResultSource = Literal["vector", "web"]


@dataclass(slots=True)
class VectorStore:
    id: str
    name: str
    created_at: int
    last_active_at: int
    expires_at: int | None = None
    expires_after_anchor: str | None = None
    expires_after_days: int | None = None

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "VectorStore":
        return cls(
            id=row["id"],
            name=row["name"],
            created_at=row["created_at"],
            last_active_at=row["last_active_at"],
            expires_at=row["expires_at"],
            expires_after_anchor=row["expires_after_anchor"],
            expires_after_days=row["expires_after_days"],
        )


@dataclass(slots=True)
class FileRecord:
    id: str
    filename: str
    content_type: str
    size: int
    storage_reference: str
    created_at: int

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "FileRecord":
        return cls(
            id=row["id"],
            filename=row["filename"],
            content_type=row["content_type"],
            size=row["size"],
            storage_reference=row["storage_reference"],
            created_at=row["created_at"],
        )


@dataclass(slots=True)
class VectorStoreFile:
    """One ingestion attempt of a file into a vector store."""

    vector_store_id: str
    file_id: str
    status: FileStatus
    chunking_strategy: dict[str, int]
    created_at: int
    chunk_count: int | None = None
    error_message: str | None = None
    completed_at: int | None = None

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "VectorStoreFile":
        return cls(
            vector_store_id=row["vector_store_id"],
            file_id=row["file_id"],
            status=row["status"],
            chunking_strategy=orjson.loads(row["chunking_strategy_json"]),
            created_at=row["created_at"],
            chunk_count=row["chunk_count"],
            error_message=row["error_message"],
            completed_at=row["completed_at"],
        )


@dataclass(slots=True)
class Chunk:
    vector_store_id: str
    file_id: str
    chunk_index: int
    content: str
    embedding: list[float]
    token_count: int
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(slots=True)
class SearchResult:
    """A single ranked hit; scores are only comparable within one query."""

    id: str
    content: str
    metadata: dict[str, Any]
    score: float
    source: ResultSource

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "content": self.content,
            "metadata": self.metadata,
            "score": self.score,
            "source": self.source,
        }


__all__ = [
    "FileStatus",
    "ResultSource",
    "VectorStore",
    "FileRecord",
    "VectorStoreFile",
    "Chunk",
    "SearchResult",
]
