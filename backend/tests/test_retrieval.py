"""Tests for retrieval utilities."""

from __future__ import annotations

import pytest

from conftest import FixedEmbedding
from vector_agent.core.errors import NotFoundError, UpstreamProviderError
from vector_agent.models.entities import Chunk, SearchResult
from vector_agent.retrieval.hybrid import MetadataFilter, apply_filter, apply_hybrid_ranking, keyword_score, rank
from vector_agent.retrieval.search import (
    HybridSearchOptions,
    RankingOptions,
    SearchService,
    WebSearchOptions,
    capture,
)
from vector_agent.retrieval.vector_index import cosine_similarity
from vector_agent.retrieval.web import SimulatedWebSearch, build_web_query


def _result(result_id: str, score: float, content: str = "", **metadata) -> SearchResult:
    return SearchResult(id=result_id, content=content, metadata=metadata, score=score, source="vector")


def _insert(services, store_id: str, index: int, content: str, embedding: list[float]) -> Chunk:
    record = services.files.upload_bytes(f"seed-{index}.txt", "text/plain", content.encode("utf-8"))
    chunk = Chunk(
        vector_store_id=store_id,
        file_id=record.id,
        chunk_index=index,
        content=content,
        embedding=embedding,
        token_count=len(content.split()),
        metadata={"file_id": record.id, "chunk_index": index},
    )
    services.chunk_store.insert(chunk)
    return chunk


class _FailingEmbedding:
    dim = 3

    def embed(self, text: str) -> list[float]:
        raise UpstreamProviderError("embedding provider unavailable")


class _FailingWeb:
    def search(self, query, limit, recent_only=False, domains=None):
        raise RuntimeError("web provider down")


def _search_service(services, embedding_model=None, web=None) -> SearchService:
    return SearchService(
        stores=services.stores,
        chunk_store=services.chunk_store,
        embedding_model=embedding_model or services.embedding_model,
        web_search=web or SimulatedWebSearch(),
    )


# Filters ---------------------------------------------------------------


def test_equality_filter_keeps_matching_results() -> None:
    results = [_result("a", 0.9, category="docs"), _result("b", 0.8, category="blog"), _result("c", 0.7)]
    kept = apply_filter(results, MetadataFilter(type="eq", key="category", value="docs"))
    assert [r.id for r in kept] == ["a"]


def test_not_equal_filter_keeps_missing_keys() -> None:
    results = [_result("a", 0.9, category="docs"), _result("b", 0.8, category="blog"), _result("c", 0.7)]
    kept = apply_filter(results, MetadataFilter(type="neq", key="category", value="docs"))
    assert [r.id for r in kept] == ["b", "c"]


@pytest.mark.parametrize(
    ("filter_type", "value", "expected"),
    [("gt", 2, ["c"]), ("gte", 2, ["b", "c"]), ("lt", 2, ["a"]), ("lte", 2, ["a", "b"])],
)
def test_numeric_filters_skip_missing_keys(filter_type: str, value: int, expected: list[str]) -> None:
    results = [_result("a", 0.9, page=1), _result("b", 0.8, page=2), _result("c", 0.7, page=3), _result("d", 0.6)]
    kept = apply_filter(results, MetadataFilter(type=filter_type, key="page", value=value))
    assert [r.id for r in kept] == expected


def test_in_and_contains_filters() -> None:
    results = [_result("a", 0.9, tag="alpha"), _result("b", 0.8, tag="beta"), _result("c", 0.7, tag="gamma")]
    members = apply_filter(results, MetadataFilter(type="in", key="tag", value=["alpha", "gamma"]))
    assert [r.id for r in members] == ["a", "c"]
    substrings = apply_filter(results, MetadataFilter(type="contains", key="tag", value="et"))
    assert [r.id for r in substrings] == ["b"]


def test_unknown_filter_type_keeps_everything() -> None:
    results = [_result("a", 0.9, tag="alpha"), _result("b", 0.8)]
    kept = apply_filter(results, MetadataFilter(type="regex", key="tag", value=".*"))
    assert [r.id for r in kept] == ["a", "b"]


# Hybrid scoring and ranking ------------------------------------------


def test_keyword_score_ignores_short_words_but_counts_them() -> None:
    # "is" and "x" cannot match but still count toward the denominator.
    assert keyword_score("what is x", "What a day") == pytest.approx(1 / 3)
    assert keyword_score("", "anything") == 0.0


def test_hybrid_ranking_blends_scores() -> None:
    blended = apply_hybrid_ranking([_result("a", 0.8, content="sqlite storage")], "sqlite storage")
    assert blended[0].score == pytest.approx(0.8 * 0.7 + 1.0 * 0.3)


def test_hybrid_ranking_honours_zero_weights() -> None:
    blended = apply_hybrid_ranking(
        [_result("a", 0.8, content="sqlite")], "sqlite", vector_weight=0.0, keyword_weight=1.0
    )
    assert blended[0].score == pytest.approx(1.0)


def test_rank_is_stable_descending_and_truncated() -> None:
    ranked = rank([_result("a", 0.5), _result("b", 0.9), _result("c", 0.5), _result("d", 0.1)], limit=3)
    assert [r.id for r in ranked] == ["b", "a", "c"]


def test_cosine_similarity_handles_zero_vectors() -> None:
    assert cosine_similarity([1.0, 0.0], [1.0, 0.0]) == pytest.approx(1.0)
    assert cosine_similarity([0.0, 0.0], [1.0, 0.0]) == 0.0
    with pytest.raises(ValueError):
        cosine_similarity([1.0], [1.0, 0.0])


def test_web_query_modifiers() -> None:
    assert build_web_query("rust", domains=["a.com", "b.org"]) == "rust site:a.com OR site:b.org"
    assert build_web_query("rust", recent_only=True) == "rust time:month"


# Search orchestration --------------------------------------------------


def test_nearest_neighbors_apply_strict_threshold(services) -> None:
    store = services.stores.create_vector_store("Docs")
    _insert(services, store.id, 0, "exact", [1.0, 0.0, 0.0])
    _insert(services, store.id, 1, "orthogonal", [0.0, 1.0, 0.0])

    hits = services.chunk_store.nearest_neighbors([1.0, 0.0, 0.0], store.id, threshold=0.0, limit=5)
    assert [hit.content for hit in hits] == ["exact"]


def test_search_returns_vector_results_above_threshold(services) -> None:
    store = services.stores.create_vector_store("Docs")
    close = _insert(services, store.id, 0, "close", [1.0, 0.0, 0.0])
    _insert(services, store.id, 1, "far", [0.0, 1.0, 0.0])
    embedder = FixedEmbedding({"query": [1.0, 0.0, 0.0]})

    results = _search_service(services, embedder).search(store.id, "query", max_results=5)
    assert [r.content for r in results] == ["close"]
    assert results[0].source == "vector"
    assert results[0].metadata == close.metadata


def test_search_is_scoped_to_one_store(services) -> None:
    first = services.stores.create_vector_store("First")
    second = services.stores.create_vector_store("Second")
    _insert(services, first.id, 0, "first store", [1.0, 0.0, 0.0])
    embedder = FixedEmbedding({"query": [1.0, 0.0, 0.0]})

    assert _search_service(services, embedder).search(second.id, "query") == []


def test_search_merges_web_results_and_ranks(services) -> None:
    store = services.stores.create_vector_store("Docs")
    _insert(services, store.id, 0, "close", [1.0, 0.0, 0.0])
    embedder = FixedEmbedding({"query": [1.0, 0.0, 0.0]})

    results = _search_service(services, embedder).search(
        store.id,
        "query",
        max_results=2,
        web_search=WebSearchOptions(enabled=True, max_results=3),
    )
    assert len(results) == 2
    assert results[0].source == "vector"
    assert results[1].source == "web"
    assert results[1].score == pytest.approx(0.95)


def test_vector_failure_degrades_to_web_results(services) -> None:
    store = services.stores.create_vector_store("Docs")
    results = _search_service(services, _FailingEmbedding()).search(
        store.id,
        "query",
        max_results=5,
        web_search=WebSearchOptions(enabled=True, max_results=3),
    )
    assert [r.source for r in results] == ["web", "web"]


def test_web_failure_keeps_vector_results(services) -> None:
    store = services.stores.create_vector_store("Docs")
    _insert(services, store.id, 0, "close", [1.0, 0.0, 0.0])
    embedder = FixedEmbedding({"query": [1.0, 0.0, 0.0]})

    results = _search_service(services, embedder, web=_FailingWeb()).search(
        store.id, "query", web_search=WebSearchOptions(enabled=True)
    )
    assert [r.content for r in results] == ["close"]


def test_search_applies_filter_and_zero_threshold(services) -> None:
    store = services.stores.create_vector_store("Docs")
    _insert(services, store.id, 0, "zero", [0.8, 0.6, 0.0])
    _insert(services, store.id, 1, "one", [0.6, 0.8, 0.0])
    embedder = FixedEmbedding({"query": [1.0, 0.0, 0.0]})

    results = _search_service(services, embedder).search(
        store.id,
        "query",
        filters=MetadataFilter(type="eq", key="chunk_index", value=1),
        ranking_options=RankingOptions(score_threshold=0.0),
    )
    assert [r.content for r in results] == ["one"]


def test_search_hybrid_reorders_by_keywords(services) -> None:
    store = services.stores.create_vector_store("Docs")
    _insert(services, store.id, 0, "unrelated words", [0.9, 0.43589, 0.0])
    _insert(services, store.id, 1, "sqlite storage engine", [0.8, 0.6, 0.0])
    embedder = FixedEmbedding({"sqlite storage": [1.0, 0.0, 0.0]})

    results = _search_service(services, embedder).search(
        store.id,
        "sqlite storage",
        hybrid_search=HybridSearchOptions(enabled=True),
        ranking_options=RankingOptions(score_threshold=0.5),
    )
    assert [r.content for r in results] == ["sqlite storage engine", "unrelated words"]


def test_search_unknown_store_raises(services) -> None:
    with pytest.raises(NotFoundError):
        _search_service(services).search("vs_missing", "query")


def test_capture_records_failure() -> None:
    def explode() -> list[SearchResult]:
        raise RuntimeError("boom")

    outcome = capture("web", explode)
    assert not outcome.ok
    assert outcome.results == []
    assert outcome.error == "boom"


def test_eq_filter_on_source_keeps_web_results(services) -> None:
    store = services.stores.create_vector_store("Docs")
    _insert(services, store.id, 0, "close", [1.0, 0.0, 0.0])
    embedder = FixedEmbedding({"query": [1.0, 0.0, 0.0]})

    results = _search_service(services, embedder).search(
        store.id,
        "query",
        filters=MetadataFilter(type="eq", key="source", value="web"),
        web_search=WebSearchOptions(enabled=True),
    )
    assert [r.source for r in results] == ["web", "web"]


def test_hybrid_with_vector_only_weights_preserves_order() -> None:
    results = [_result("a", 0.9, content="nothing"), _result("b", 0.8, content="query words"), _result("c", 0.75)]
    blended = apply_hybrid_ranking(results, "query words", vector_weight=1.0, keyword_weight=0.0)
    assert [r.id for r in rank(blended, 3)] == ["a", "b", "c"]
    assert [r.score for r in blended] == [0.9, 0.8, 0.75]
