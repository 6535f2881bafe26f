"""Vector store creation, activity tracking, expiry and aggregate status."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from typing import Literal

from vector_agent.core.errors import NotFoundError, StorageError, ValidationError
from vector_agent.core.logging import get_logger
from vector_agent.db.sqlite import SQLiteDatabase
from vector_agent.models.entities import VectorStore, VectorStoreFile
from vector_agent.utils.ids import new_id
from vector_agent.utils.time import add_days_ms, now_ms

logger = get_logger(__name__)

ExpiryAnchor = Literal["created_at", "last_active_at"]
StoreState = Literal["empty", "processing", "ready"]


@dataclass(frozen=True, slots=True)
class ExpiresAfter:
    """Expiry policy.

    ``created_at`` fixes ``expires_at`` once at creation. ``last_active_at``
    starts from the same value and slides forward on every touch.
    """

    anchor: ExpiryAnchor
    days: int

    def __post_init__(self) -> None:
        if self.anchor not in ("created_at", "last_active_at"):
            raise ValidationError(f"Unsupported expiry anchor: {self.anchor}")
        if self.days <= 0:
            raise ValidationError("expiresAfter.days must be positive")


@dataclass(frozen=True, slots=True)
class StoreStatus:
    status: StoreState
    file_count: int
    processing_count: int


class VectorStoreService:
    def __init__(self, db: SQLiteDatabase) -> None:
        self.db = db

    def create_vector_store(self, name: str, expires_after: ExpiresAfter | None = None) -> VectorStore:
        if not name or not name.strip():
            raise ValidationError("Vector store name is required")
        now = now_ms()
        store = VectorStore(
            id=new_id("vs"),
            name=name,
            created_at=now,
            last_active_at=now,
            expires_at=add_days_ms(now, expires_after.days) if expires_after else None,
            expires_after_anchor=expires_after.anchor if expires_after else None,
            expires_after_days=expires_after.days if expires_after else None,
        )
        try:
            with self.db.transaction() as cursor:
                cursor.execute(
                    """
                    INSERT INTO vector_stores (
                      id, name, created_at, last_active_at, expires_at,
                      expires_after_anchor, expires_after_days
                    ) VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    [
                        store.id,
                        store.name,
                        store.created_at,
                        store.last_active_at,
                        store.expires_at,
                        store.expires_after_anchor,
                        store.expires_after_days,
                    ],
                )
        except sqlite3.Error as exc:
            raise StorageError(f"failed to create vector store: {exc}") from exc
        logger.info("Created vector store %s", store.id, extra={"vector_store_id": store.id})
        return store

    def get_vector_store(self, vector_store_id: str) -> VectorStore:
        row = self.db.query_one("SELECT * FROM vector_stores WHERE id = ?", [vector_store_id])
        if row is None:
            raise NotFoundError("vector store", vector_store_id)
        return VectorStore.from_row(row)

    def touch(self, vector_store_id: str) -> VectorStore:
        """Record activity; slides ``expires_at`` for last-activity anchored stores."""
        with self.db.transaction() as cursor:
            row = cursor.execute("SELECT * FROM vector_stores WHERE id = ?", [vector_store_id]).fetchone()
            if row is None:
                raise NotFoundError("vector store", vector_store_id)
            store = VectorStore.from_row(row)
            now = now_ms()
            store.last_active_at = now
            if store.expires_after_anchor == "last_active_at" and store.expires_after_days:
                store.expires_at = add_days_ms(now, store.expires_after_days)
            cursor.execute(
                "UPDATE vector_stores SET last_active_at = ?, expires_at = ? WHERE id = ?",
                [store.last_active_at, store.expires_at, store.id],
            )
        return store

    def check_status(self, vector_store_id: str) -> StoreStatus:
        self.touch(vector_store_id)
        row = self.db.query_one(
            """
            SELECT
              COUNT(*) AS file_count,
              COALESCE(SUM(CASE WHEN status = 'processing' THEN 1 ELSE 0 END), 0) AS processing_count
            FROM vector_store_files
            WHERE vector_store_id = ?
            """,
            [vector_store_id],
        )
        file_count = int(row["file_count"]) if row else 0
        processing_count = int(row["processing_count"]) if row else 0
        return StoreStatus(
            status=derive_status(file_count, processing_count),
            file_count=file_count,
            processing_count=processing_count,
        )

    def list_vector_store_files(self, vector_store_id: str) -> list[VectorStoreFile]:
        self.get_vector_store(vector_store_id)
        rows = self.db.query(
            "SELECT * FROM vector_store_files WHERE vector_store_id = ? ORDER BY created_at, file_id",
            [vector_store_id],
        )
        return [VectorStoreFile.from_row(row) for row in rows]


def derive_status(file_count: int, processing_count: int) -> StoreState:
    # Any file still processing wins over completed siblings.
    if processing_count > 0:
        return "processing"
    if file_count == 0:
        return "empty"
    return "ready"


def is_expired(store: VectorStore, at_ms: int | None = None) -> bool:
    if store.expires_at is None:
        return False
    return (at_ms if at_ms is not None else now_ms()) >= store.expires_at


__all__ = [
    "ExpiresAfter",
    "StoreStatus",
    "VectorStoreService",
    "derive_status",
    "is_expired",
]
