"""Common ingestion data structures."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ChunkingStrategy:
    """Chunk budget in approximate tokens (whitespace-delimited words)."""

    max_chunk_size_tokens: int = 1000
    chunk_overlap_tokens: int = 200

    def __post_init__(self) -> None:
        if self.max_chunk_size_tokens <= 0 or self.chunk_overlap_tokens <= 0:
            raise ValueError("chunking strategy values must be positive integers")

    def to_dict(self) -> dict[str, int]:
        return {
            "max_chunk_size_tokens": self.max_chunk_size_tokens,
            "chunk_overlap_tokens": self.chunk_overlap_tokens,
        }


@dataclass(slots=True)
class IngestOutcome:
    """Terminal result of processing one file into one vector store."""

    vector_store_id: str
    file_id: str
    status: str
    chunk_count: int = 0
    detail: str | None = None


__all__ = ["ChunkingStrategy", "IngestOutcome"]
