"""Shared FastAPI dependencies."""

from __future__ import annotations

from functools import lru_cache

from vector_agent.core.config import Settings, get_settings
from vector_agent.db.sqlite import SQLiteDatabase
from vector_agent.ingest.embeddings import EmbeddingProvider, build_embedding_provider
from vector_agent.ingest.files import FileService
from vector_agent.ingest.pipeline import IngestPipeline
from vector_agent.ingest.types import ChunkingStrategy
from vector_agent.ingest.worker import IngestWorker
from vector_agent.retrieval import AnswerService, ChunkStore, SearchService
from vector_agent.retrieval.completion import CompletionProvider, build_completion_provider
from vector_agent.retrieval.web import SimulatedWebSearch
from vector_agent.storage.blob import BlobStore
from vector_agent.stores.lifecycle import VectorStoreService

_DB: SQLiteDatabase | None = None
_EMBEDDING_MODEL: EmbeddingProvider | None = None
_COMPLETION_MODEL: CompletionProvider | None = None
_WORKER: IngestWorker | None = None
_PIPELINE: IngestPipeline | None = None
_SEARCH_SERVICE: SearchService | None = None
_ANSWER_SERVICE: AnswerService | None = None


@lru_cache(maxsize=1)
def get_app_settings() -> Settings:
    return get_settings()


def get_database() -> SQLiteDatabase:
    global _DB
    if _DB is None:
        settings = get_app_settings()
        db = SQLiteDatabase(settings.db_path)
        db.ensure_schema()
        _DB = db
    return _DB


def get_embedding_model() -> EmbeddingProvider:
    global _EMBEDDING_MODEL
    if _EMBEDDING_MODEL is None:
        _EMBEDDING_MODEL = build_embedding_provider(get_app_settings())
    return _EMBEDDING_MODEL


def get_completion_model() -> CompletionProvider:
    global _COMPLETION_MODEL
    if _COMPLETION_MODEL is None:
        _COMPLETION_MODEL = build_completion_provider(get_app_settings())
    return _COMPLETION_MODEL


def get_worker() -> IngestWorker:
    global _WORKER
    if _WORKER is None:
        _WORKER = IngestWorker(max_workers=get_app_settings().ingest_workers)
    return _WORKER


def get_vector_store_service() -> VectorStoreService:
    return VectorStoreService(get_database())


def get_chunk_store() -> ChunkStore:
    return ChunkStore(get_database())


def get_file_service() -> FileService:
    settings = get_app_settings()
    return FileService(
        db=get_database(),
        blob_store=BlobStore(settings.blob_dir),
        fetch_timeout=settings.url_fetch_timeout,
    )


def get_ingest_pipeline() -> IngestPipeline:
    global _PIPELINE
    if _PIPELINE is None:
        settings = get_app_settings()
        _PIPELINE = IngestPipeline(
            database=get_database(),
            files=get_file_service(),
            stores=get_vector_store_service(),
            chunk_store=get_chunk_store(),
            embedding_model=get_embedding_model(),
            worker=get_worker(),
            default_strategy=ChunkingStrategy(
                max_chunk_size_tokens=settings.default_max_chunk_size_tokens,
                chunk_overlap_tokens=settings.default_chunk_overlap_tokens,
            ),
        )
    return _PIPELINE


def get_search_service() -> SearchService:
    global _SEARCH_SERVICE
    if _SEARCH_SERVICE is None:
        settings = get_app_settings()
        _SEARCH_SERVICE = SearchService(
            stores=get_vector_store_service(),
            chunk_store=get_chunk_store(),
            embedding_model=get_embedding_model(),
            web_search=SimulatedWebSearch(),
            default_max_results=settings.default_max_results,
            default_score_threshold=settings.default_score_threshold,
        )
    return _SEARCH_SERVICE


def get_answer_service() -> AnswerService:
    global _ANSWER_SERVICE
    if _ANSWER_SERVICE is None:
        _ANSWER_SERVICE = AnswerService(
            search_service=get_search_service(),
            completion_model=get_completion_model(),
            stores=get_vector_store_service(),
        )
    return _ANSWER_SERVICE


def shutdown() -> None:
    """Drain ingestion, close the database and drop every cached singleton."""
    global _DB, _EMBEDDING_MODEL, _COMPLETION_MODEL, _WORKER, _PIPELINE, _SEARCH_SERVICE, _ANSWER_SERVICE
    if _WORKER is not None:
        _WORKER.shutdown(wait=True)
    if _DB is not None:
        _DB.close()
    _DB = None
    _EMBEDDING_MODEL = None
    _COMPLETION_MODEL = None
    _WORKER = None
    _PIPELINE = None
    _SEARCH_SERVICE = None
    _ANSWER_SERVICE = None
    get_app_settings.cache_clear()


__all__ = [
    "get_app_settings",
    "get_database",
    "get_embedding_model",
    "get_completion_model",
    "get_worker",
    "get_vector_store_service",
    "get_chunk_store",
    "get_file_service",
    "get_ingest_pipeline",
    "get_search_service",
    "get_answer_service",
    "shutdown",
]
