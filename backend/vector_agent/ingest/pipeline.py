"""Ingest pipeline orchestration."""

from __future__ import annotations

import sqlite3
import time
from concurrent.futures import Future

import orjson

from vector_agent.core.errors import ConflictError, StorageError
from vector_agent.core.logging import get_logger
from vector_agent.core.metrics import CHUNKS_WRITTEN, INGEST_DURATION
from vector_agent.db.sqlite import SQLiteDatabase
from vector_agent.ingest.chunker import chunk_text, count_tokens
from vector_agent.ingest.embeddings import EmbeddingProvider
from vector_agent.ingest.files import FileService
from vector_agent.ingest.loaders import decode_text, is_binary_content_type
from vector_agent.ingest.types import ChunkingStrategy, IngestOutcome
from vector_agent.ingest.worker import IngestWorker
from vector_agent.models.entities import Chunk, FileRecord
from vector_agent.retrieval.vector_index import ChunkStore
from vector_agent.stores.lifecycle import VectorStoreService
from vector_agent.utils.time import now_ms

logger = get_logger(__name__)


class IngestPipeline:
    """Attach files to vector stores and turn them into embedded chunks."""

    def __init__(
        self,
        database: SQLiteDatabase,
        files: FileService,
        stores: VectorStoreService,
        chunk_store: ChunkStore,
        embedding_model: EmbeddingProvider,
        worker: IngestWorker,
        default_strategy: ChunkingStrategy | None = None,
    ) -> None:
        self.db = database
        self.files = files
        self.stores = stores
        self.chunk_store = chunk_store
        self.embedding_model = embedding_model
        self.worker = worker
        self.default_strategy = default_strategy or ChunkingStrategy()

    def add_file_to_vector_store(
        self,
        vector_store_id: str,
        file_id: str,
        chunking_strategy: ChunkingStrategy | None = None,
    ) -> Future[IngestOutcome]:
        """Record the attachment as ``processing`` and queue the work.

        Returns as soon as the row is committed; the returned future is only
        for tests and shutdown, callers observe completion via status polling.
        """
        self.stores.get_vector_store(vector_store_id)
        record = self.files.get_file(file_id)
        strategy = chunking_strategy or self.default_strategy
        try:
            with self.db.transaction() as cursor:
                cursor.execute(
                    """
                    INSERT INTO vector_store_files (
                      vector_store_id, file_id, status, chunking_strategy_json, created_at
                    ) VALUES (?, ?, 'processing', ?, ?)
                    """,
                    [
                        vector_store_id,
                        file_id,
                        orjson.dumps(strategy.to_dict()).decode("utf-8"),
                        now_ms(),
                    ],
                )
        except sqlite3.IntegrityError as exc:
            raise ConflictError("File is already attached to this vector store") from exc
        except sqlite3.Error as exc:
            raise StorageError(f"failed to create vector store file record: {exc}") from exc

        logger.info(
            "Queued %s for ingestion into %s",
            file_id,
            vector_store_id,
            extra={"vector_store_id": vector_store_id, "file_id": file_id},
        )
        return self.worker.submit(self.process_file, vector_store_id, record, strategy)

    def process_file(self, vector_store_id: str, record: FileRecord, strategy: ChunkingStrategy) -> IngestOutcome:
        """Fetch, decode, chunk, embed and persist; never raises."""
        started = time.perf_counter()
        try:
            chunk_count = self._ingest(vector_store_id, record, strategy)
            self._mark_completed(vector_store_id, record.id, chunk_count)
        except Exception as exc:
            message = _error_message(exc)
            logger.exception(
                "Ingestion of %s into %s failed: %s",
                record.id,
                vector_store_id,
                message,
                extra={"vector_store_id": vector_store_id, "file_id": record.id},
            )
            self._mark_error(vector_store_id, record.id, message)
            INGEST_DURATION.labels(outcome="error").observe(time.perf_counter() - started)
            return IngestOutcome(vector_store_id, record.id, status="error", detail=message)

        INGEST_DURATION.labels(outcome="completed").observe(time.perf_counter() - started)
        logger.info(
            "Ingested %s into %s as %s chunks",
            record.id,
            vector_store_id,
            chunk_count,
            extra={"vector_store_id": vector_store_id, "file_id": record.id},
        )
        return IngestOutcome(vector_store_id, record.id, status="completed", chunk_count=chunk_count)

    # Internal helpers -------------------------------------------------

    def _ingest(self, vector_store_id: str, record: FileRecord, strategy: ChunkingStrategy) -> int:
        raw = self.files.read_bytes(record)
        if is_binary_content_type(record.content_type):
            logger.warning("Decoding %s (%s) as plain text", record.id, record.content_type)
        text = decode_text(raw, record.content_type)
        chunks = chunk_text(text, strategy.max_chunk_size_tokens, strategy.chunk_overlap_tokens)
        if not chunks:
            logger.warning("File %s produced no chunks", record.id)

        for index, content in enumerate(chunks):
            embedding = self.embedding_model.embed(content)
            self.chunk_store.insert(
                Chunk(
                    vector_store_id=vector_store_id,
                    file_id=record.id,
                    chunk_index=index,
                    content=content,
                    embedding=embedding,
                    token_count=count_tokens(content),
                    metadata={
                        "file_id": record.id,
                        "chunk_index": index,
                        "filename": record.filename,
                    },
                )
            )
            CHUNKS_WRITTEN.inc()
            logger.debug(
                "Stored chunk %s of %s",
                index,
                record.id,
                extra={"vector_store_id": vector_store_id, "file_id": record.id, "chunk_index": index},
            )
        return len(chunks)

    def _mark_completed(self, vector_store_id: str, file_id: str, chunk_count: int) -> None:
        with self.db.transaction() as cursor:
            cursor.execute(
                """
                UPDATE vector_store_files
                SET status = 'completed', chunk_count = ?, completed_at = ?
                WHERE vector_store_id = ? AND file_id = ? AND status = 'processing'
                """,
                [chunk_count, now_ms(), vector_store_id, file_id],
            )

    def _mark_error(self, vector_store_id: str, file_id: str, message: str) -> None:
        try:
            with self.db.transaction() as cursor:
                cursor.execute(
                    """
                    UPDATE vector_store_files
                    SET status = 'error', error_message = ?
                    WHERE vector_store_id = ? AND file_id = ? AND status = 'processing'
                    """,
                    [message, vector_store_id, file_id],
                )
        except sqlite3.Error:
            logger.exception("Could not record ingestion error for %s", file_id, extra={"file_id": file_id})


def _error_message(exc: Exception) -> str:
    return str(exc).strip() or exc.__class__.__name__


__all__ = ["IngestPipeline"]
