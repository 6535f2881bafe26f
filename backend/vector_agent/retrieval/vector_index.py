"""Chunk store with cosine nearest-neighbour search scoped to a vector store."""

from __future__ import annotations

import math
import sqlite3
from dataclasses import dataclass
from typing import Any, Sequence

import orjson

from vector_agent.core.errors import StorageError
from vector_agent.db.sqlite import SQLiteDatabase
from vector_agent.ingest.embeddings import vector_from_bytes, vector_to_bytes
from vector_agent.models.entities import Chunk
from vector_agent.utils.ids import new_id
from vector_agent.utils.time import now_ms


@dataclass(slots=True)
class ChunkHit:
    chunk_id: str
    content: str
    metadata: dict[str, Any]
    score: float


class ChunkStore:
    """Persist embedded chunks in SQLite and rank them by cosine similarity."""

    def __init__(self, db: SQLiteDatabase) -> None:
        self.db = db

    def insert(self, chunk: Chunk) -> str:
        chunk_id = new_id("chunk")
        try:
            with self.db.transaction() as cursor:
                cursor.execute(
                    """
                    INSERT INTO vector_store_chunks (
                      id, vector_store_id, file_id, chunk_index, content, embedding,
                      dim, token_count, metadata_json, created_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    [
                        chunk_id,
                        chunk.vector_store_id,
                        chunk.file_id,
                        chunk.chunk_index,
                        chunk.content,
                        vector_to_bytes(chunk.embedding),
                        len(chunk.embedding),
                        chunk.token_count,
                        orjson.dumps(chunk.metadata).decode("utf-8"),
                        now_ms(),
                    ],
                )
        except sqlite3.Error as exc:
            raise StorageError(f"failed to store chunk {chunk.chunk_index} of {chunk.file_id}: {exc}") from exc
        return chunk_id

    def nearest_neighbors(
        self,
        vector: Sequence[float],
        vector_store_id: str,
        threshold: float,
        limit: int,
    ) -> list[ChunkHit]:
        """Return up to ``limit`` chunks whose similarity exceeds ``threshold``."""
        if limit <= 0:
            return []
        try:
            rows = self.db.query(
                """
                SELECT id, content, embedding, metadata_json
                FROM vector_store_chunks
                WHERE vector_store_id = ?
                ORDER BY file_id, chunk_index
                """,
                [vector_store_id],
            )
        except sqlite3.Error as exc:
            raise StorageError(f"chunk lookup failed for {vector_store_id}: {exc}") from exc

        hits: list[ChunkHit] = []
        for row in rows:
            score = cosine_similarity(vector, vector_from_bytes(row["embedding"]))
            if score > threshold:
                hits.append(
                    ChunkHit(
                        chunk_id=row["id"],
                        content=row["content"],
                        metadata=orjson.loads(row["metadata_json"]),
                        score=score,
                    )
                )
        hits.sort(key=lambda hit: hit.score, reverse=True)
        return hits[:limit]

    def count_for_file(self, vector_store_id: str, file_id: str) -> int:
        row = self.db.query_one(
            "SELECT COUNT(*) AS count FROM vector_store_chunks WHERE vector_store_id = ? AND file_id = ?",
            [vector_store_id, file_id],
        )
        return int(row["count"]) if row else 0


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    if len(a) != len(b):
        raise ValueError("Vector dimension mismatch")
    dot = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return dot / (norm_a * norm_b)


__all__ = ["ChunkStore", "ChunkHit", "cosine_similarity"]
