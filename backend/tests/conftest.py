"""Test fixtures for Vector Agent."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Sequence

import pytest

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

from vector_agent.api import dependencies as deps  # noqa: E402
from vector_agent.core.config import get_settings  # noqa: E402
from vector_agent.db.sqlite import SQLiteDatabase  # noqa: E402
from vector_agent.ingest.embeddings import EmbeddingModel  # noqa: E402
from vector_agent.ingest.files import FileService  # noqa: E402
from vector_agent.ingest.pipeline import IngestPipeline  # noqa: E402
from vector_agent.ingest.types import ChunkingStrategy  # noqa: E402
from vector_agent.ingest.worker import IngestWorker  # noqa: E402
from vector_agent.retrieval.vector_index import ChunkStore  # noqa: E402
from vector_agent.storage.blob import BlobStore  # noqa: E402
from vector_agent.stores.lifecycle import VectorStoreService  # noqa: E402


@pytest.fixture(autouse=True)
def reset_state(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Reset global singletons and environment between tests."""
    monkeypatch.setenv("VAGENT_DB_PATH", str(tmp_path / "vagent.db"))
    monkeypatch.setenv("VAGENT_BLOB_DIR", str(tmp_path / "blobs"))
    monkeypatch.setenv("VAGENT_EMBEDDING_BACKEND", "hashed")
    monkeypatch.setenv("VAGENT_COMPLETION_BACKEND", "extractive")
    monkeypatch.delenv("VAGENT_CONFIG", raising=False)

    get_settings.cache_clear()
    deps.shutdown()
    yield
    deps.shutdown()
    get_settings.cache_clear()


class FixedEmbedding:
    """Maps known texts to fixed vectors; everything else gets ``fallback``."""

    def __init__(self, vectors: dict[str, list[float]], fallback: Sequence[float] | None = None) -> None:
        self.vectors = vectors
        self.fallback = list(fallback) if fallback is not None else [0.0, 0.0, 1.0]
        self.calls: list[str] = []

    @property
    def dim(self) -> int:
        return len(self.fallback)

    def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        return list(self.vectors.get(text, self.fallback))


class Services:
    """Service graph wired against a temporary database."""

    def __init__(self, root: Path, embedding_model=None) -> None:
        self.db = SQLiteDatabase(root / "services.db")
        self.db.ensure_schema()
        self.stores = VectorStoreService(self.db)
        self.files = FileService(self.db, BlobStore(root / "blobs"))
        self.chunk_store = ChunkStore(self.db)
        self.embedding_model = embedding_model or EmbeddingModel(dim=64)
        self.worker = IngestWorker(max_workers=2)
        self.pipeline = IngestPipeline(
            database=self.db,
            files=self.files,
            stores=self.stores,
            chunk_store=self.chunk_store,
            embedding_model=self.embedding_model,
            worker=self.worker,
            default_strategy=ChunkingStrategy(),
        )

    def close(self) -> None:
        self.worker.shutdown(wait=True)
        self.db.close()


@pytest.fixture
def make_services(tmp_path: Path):
    created: list[Services] = []

    def factory(embedding_model=None) -> Services:
        wired = Services(tmp_path / f"svc{len(created)}", embedding_model)
        created.append(wired)
        return wired

    yield factory
    for wired in created:
        wired.close()


@pytest.fixture
def services(make_services) -> Services:
    return make_services()


@pytest.fixture(scope="session")
def sample_text() -> str:
    return "Title\n\nParagraph one.\n\nParagraph two is here."
