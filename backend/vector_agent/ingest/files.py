"""Uploaded file records and their stored bytes."""

from __future__ import annotations

import sqlite3
from pathlib import PurePosixPath
from urllib.parse import urlparse

import requests

from vector_agent.core.errors import NotFoundError, StorageError, UpstreamProviderError, ValidationError
from vector_agent.core.logging import get_logger
from vector_agent.db.sqlite import SQLiteDatabase
from vector_agent.models.entities import FileRecord
from vector_agent.storage.blob import BlobStore
from vector_agent.utils.ids import new_id
from vector_agent.utils.time import now_ms

logger = get_logger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


class FileService:
    """Create immutable file records backed by the blob store."""

    def __init__(self, db: SQLiteDatabase, blob_store: BlobStore, fetch_timeout: float = 30.0) -> None:
        self.db = db
        self.blob_store = blob_store
        self.fetch_timeout = fetch_timeout

    def upload_bytes(self, filename: str, content_type: str | None, data: bytes) -> FileRecord:
        if not filename:
            raise ValidationError("Filename is required")
        file_id = new_id("file")
        reference = self.blob_store.put(data, file_id, filename)
        record = FileRecord(
            id=file_id,
            filename=filename,
            content_type=content_type or DEFAULT_CONTENT_TYPE,
            size=len(data),
            storage_reference=reference,
            created_at=now_ms(),
        )
        try:
            with self.db.transaction() as cursor:
                cursor.execute(
                    """
                    INSERT INTO files (id, filename, content_type, size, storage_reference, created_at)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    [
                        record.id,
                        record.filename,
                        record.content_type,
                        record.size,
                        record.storage_reference,
                        record.created_at,
                    ],
                )
        except sqlite3.Error as exc:
            raise StorageError(f"failed to create file record: {exc}") from exc
        logger.info("Stored file %s (%s bytes)", file_id, record.size, extra={"file_id": file_id})
        return record

    def upload_from_url(self, url: str) -> FileRecord:
        parsed = urlparse(url)
        if parsed.scheme not in {"http", "https"}:
            raise ValidationError("fileUrl must be an http(s) URL")
        try:
            response = requests.get(url, timeout=self.fetch_timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            logger.warning("Failed to fetch %s: %s", url, exc)
            raise UpstreamProviderError(f"failed to fetch file from URL: {exc}") from exc
        content_type = response.headers.get("content-type") or DEFAULT_CONTENT_TYPE
        filename = PurePosixPath(parsed.path).name or f"file-{now_ms()}"
        return self.upload_bytes(filename, content_type, response.content)

    def get_file(self, file_id: str) -> FileRecord:
        row = self.db.query_one(
            "SELECT id, filename, content_type, size, storage_reference, created_at FROM files WHERE id = ?",
            [file_id],
        )
        if row is None:
            raise NotFoundError("file", file_id)
        return FileRecord.from_row(row)

    def read_bytes(self, record: FileRecord) -> bytes:
        return self.blob_store.get(record.storage_reference)


__all__ = ["FileService", "DEFAULT_CONTENT_TYPE"]
