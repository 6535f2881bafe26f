"""Search, chat and query routes."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from vector_agent.api.dependencies import get_answer_service, get_app_settings, get_search_service
from vector_agent.core.config import Settings
from vector_agent.models.dto import (
    ChatRequest,
    ChatResponse,
    QueryRequest,
    QueryResponse,
    RetrievalRequest,
    SearchRequest,
    SearchResponse,
    SearchResultResponse,
)
from vector_agent.models.entities import SearchResult
from vector_agent.retrieval.answer import AnswerService
from vector_agent.retrieval.hybrid import MetadataFilter
from vector_agent.retrieval.search import HybridSearchOptions, RankingOptions, SearchService, WebSearchOptions

router = APIRouter()


@router.post("/search", response_model=SearchResponse, summary="Semantic search against a vector store")
async def search(
    request: SearchRequest,
    service: SearchService = Depends(get_search_service),
    settings: Settings = Depends(get_app_settings),
) -> SearchResponse:
    results = service.search(request.vector_store_id, request.query, **retrieval_options(request, settings))
    return SearchResponse(results=_to_results(results))


@router.post("/chat", response_model=ChatResponse, summary="Chat grounded in a vector store")
async def chat(
    request: ChatRequest,
    service: AnswerService = Depends(get_answer_service),
    settings: Settings = Depends(get_app_settings),
) -> ChatResponse:
    reply = service.chat(
        request.vector_store_id,
        [message.model_dump() for message in request.messages],
        **retrieval_options(request, settings),
    )
    return ChatResponse(response=reply.response, context=_to_results(reply.context))


@router.post("/query", response_model=QueryResponse, summary="Answer a single question")
async def query(
    request: QueryRequest,
    service: AnswerService = Depends(get_answer_service),
    settings: Settings = Depends(get_app_settings),
) -> QueryResponse:
    answer = service.query(request.vector_store_id, request.question, **retrieval_options(request, settings))
    return QueryResponse(answer=answer.answer, context=_to_results(answer.context))


def retrieval_options(request: RetrievalRequest, settings: Settings) -> dict[str, Any]:
    """Translate request options into service arguments, filling configured defaults."""
    options: dict[str, Any] = {
        "max_results": request.max_results or settings.default_max_results,
        "filters": None,
        "web_search": None,
        "hybrid_search": None,
        "ranking_options": None,
    }
    if request.filters is not None:
        options["filters"] = MetadataFilter(
            type=request.filters.type,
            key=request.filters.key,
            value=request.filters.value,
        )
    if request.web_search is not None:
        options["web_search"] = WebSearchOptions(
            enabled=request.web_search.enabled,
            max_results=request.web_search.max_results or settings.web_search_max_results,
            recent_only=request.web_search.recent_only,
            domains=tuple(request.web_search.domains or ()),
        )
    if request.hybrid_search is not None:
        defaults = HybridSearchOptions()
        options["hybrid_search"] = HybridSearchOptions(
            enabled=request.hybrid_search.enabled,
            vector_weight=_weight(request.hybrid_search.vector_weight, defaults.vector_weight),
            keyword_weight=_weight(request.hybrid_search.keyword_weight, defaults.keyword_weight),
        )
    threshold = settings.default_score_threshold
    ranker = None
    if request.ranking_options is not None:
        ranker = request.ranking_options.ranker
        if request.ranking_options.score_threshold is not None:
            threshold = request.ranking_options.score_threshold
    options["ranking_options"] = RankingOptions(ranker=ranker, score_threshold=threshold)
    return options


def _weight(value: float | None, default: float) -> float:
    return default if value is None else value


def _to_results(results: list[SearchResult]) -> list[SearchResultResponse]:
    return [SearchResultResponse(**result.to_dict()) for result in results]


__all__ = ["router", "retrieval_options"]
