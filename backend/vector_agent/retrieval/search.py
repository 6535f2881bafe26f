"""Search orchestration."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Callable, Literal

from vector_agent.core.logging import get_logger
from vector_agent.core.metrics import REQUEST_COUNT, REQUEST_LATENCY, SEARCH_SOURCE_FAILURES
from vector_agent.ingest.embeddings import EmbeddingProvider
from vector_agent.models.entities import SearchResult
from vector_agent.retrieval.hybrid import MetadataFilter, apply_filter, apply_hybrid_ranking, rank
from vector_agent.retrieval.vector_index import ChunkStore
from vector_agent.retrieval.web import WebSearchProvider
from vector_agent.stores.lifecycle import VectorStoreService

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class WebSearchOptions:
    enabled: bool = False
    max_results: int = 3
    recent_only: bool = False
    domains: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class HybridSearchOptions:
    enabled: bool = False
    vector_weight: float = 0.7
    keyword_weight: float = 0.3


@dataclass(frozen=True, slots=True)
class RankingOptions:
    ranker: str | None = None
    score_threshold: float = 0.7


@dataclass(slots=True)
class SourceOutcome:
    """Result of one sub-search: either hits, or the reason it failed."""

    source: Literal["vector", "web"]
    results: list[SearchResult] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def capture(source: Literal["vector", "web"], run: Callable[[], list[SearchResult]]) -> SourceOutcome:
    """Run one sub-search, turning any failure into a failed outcome."""
    try:
        return SourceOutcome(source=source, results=run())
    except Exception as exc:
        logger.warning("%s search failed: %s", source.capitalize(), exc, exc_info=True)
        SEARCH_SOURCE_FAILURES.labels(source=source).inc()
        return SourceOutcome(source=source, error=str(exc) or exc.__class__.__name__)


class SearchService:
    """Fuse vector and web results, then filter and rank them."""

    def __init__(
        self,
        stores: VectorStoreService,
        chunk_store: ChunkStore,
        embedding_model: EmbeddingProvider,
        web_search: WebSearchProvider,
        default_max_results: int = 5,
        default_score_threshold: float = 0.7,
    ) -> None:
        self.stores = stores
        self.chunk_store = chunk_store
        self.embedding_model = embedding_model
        self.web_search = web_search
        self.default_max_results = default_max_results
        self.default_score_threshold = default_score_threshold

    def search(
        self,
        vector_store_id: str,
        query: str,
        max_results: int | None = None,
        filters: MetadataFilter | None = None,
        web_search: WebSearchOptions | None = None,
        hybrid_search: HybridSearchOptions | None = None,
        ranking_options: RankingOptions | None = None,
    ) -> list[SearchResult]:
        start_time = time.perf_counter()
        limit = max_results or self.default_max_results
        threshold = ranking_options.score_threshold if ranking_options else self.default_score_threshold

        self.stores.touch(vector_store_id)

        outcomes = [capture("vector", lambda: self._vector_results(vector_store_id, query, threshold, limit))]
        if web_search and web_search.enabled:
            outcomes.append(capture("web", lambda: self._web_results(query, web_search)))

        combined: list[SearchResult] = []
        for outcome in outcomes:
            combined.extend(outcome.results)

        if filters is not None:
            combined = apply_filter(combined, filters)
        if hybrid_search and hybrid_search.enabled:
            combined = apply_hybrid_ranking(
                combined,
                query,
                vector_weight=hybrid_search.vector_weight,
                keyword_weight=hybrid_search.keyword_weight,
            )
        results = rank(combined, limit)

        REQUEST_LATENCY.labels(endpoint="search").observe(time.perf_counter() - start_time)
        REQUEST_COUNT.labels(endpoint="search", status="ok").inc()
        logger.debug(
            "Search returned %s results",
            len(results),
            extra={
                "vector_store_id": vector_store_id,
                "failed_sources": [outcome.source for outcome in outcomes if not outcome.ok],
            },
        )
        return results

    # ------------------------------------------------------------------

    def _vector_results(
        self,
        vector_store_id: str,
        query: str,
        threshold: float,
        limit: int,
    ) -> list[SearchResult]:
        # Embedding failures degrade the vector branch only.
        query_vector = self.embedding_model.embed(query)
        hits = self.chunk_store.nearest_neighbors(query_vector, vector_store_id, threshold, limit)
        return [
            SearchResult(
                id=hit.chunk_id,
                content=hit.content,
                metadata=hit.metadata,
                score=hit.score,
                source="vector",
            )
            for hit in hits
        ]

    def _web_results(self, query: str, options: WebSearchOptions) -> list[SearchResult]:
        hits = self.web_search.search(
            query,
            options.max_results,
            recent_only=options.recent_only,
            domains=list(options.domains) or None,
        )
        return [
            SearchResult(
                id=hit.id,
                content=hit.content,
                metadata=hit.metadata,
                score=hit.score,
                source="web",
            )
            for hit in hits
        ]


__all__ = [
    "SearchService",
    "SourceOutcome",
    "WebSearchOptions",
    "HybridSearchOptions",
    "RankingOptions",
    "capture",
]
