"""Grounded answers: retrieve context, then ask the completion provider."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Mapping, Sequence

from vector_agent.core.errors import ValidationError
from vector_agent.core.logging import get_logger
from vector_agent.core.metrics import REQUEST_COUNT, REQUEST_LATENCY
from vector_agent.models.entities import SearchResult
from vector_agent.retrieval.completion import CONTEXT_MARKER, CompletionProvider
from vector_agent.retrieval.hybrid import MetadataFilter
from vector_agent.retrieval.search import HybridSearchOptions, RankingOptions, SearchService, WebSearchOptions
from vector_agent.stores.lifecycle import VectorStoreService

logger = get_logger(__name__)

SYSTEM_PROMPT = (
    "You are an AI assistant that answers questions based on the provided context. "
    "Use the following information to answer the user's question. "
    "If you don't know the answer, say so - don't make up information that's not in the context."
)


@dataclass(slots=True)
class ChatReply:
    response: str
    context: list[SearchResult]


@dataclass(slots=True)
class QueryAnswer:
    answer: str
    context: list[SearchResult]


def build_context(results: Sequence[SearchResult]) -> str:
    return "\n\n".join(
        f"[Source: {result.source}, Score: {result.score:.2f}]\n{result.content}" for result in results
    )


def build_system_message(results: Sequence[SearchResult]) -> dict[str, str]:
    return {"role": "system", "content": f"{SYSTEM_PROMPT}\n\n{CONTEXT_MARKER}{build_context(results)}"}


class AnswerService:
    def __init__(
        self,
        search_service: SearchService,
        completion_model: CompletionProvider,
        stores: VectorStoreService,
    ) -> None:
        self.search_service = search_service
        self.completion_model = completion_model
        self.stores = stores

    def chat(
        self,
        vector_store_id: str,
        messages: Sequence[Mapping[str, str]],
        max_results: int | None = None,
        filters: MetadataFilter | None = None,
        web_search: WebSearchOptions | None = None,
        hybrid_search: HybridSearchOptions | None = None,
        ranking_options: RankingOptions | None = None,
    ) -> ChatReply:
        started = time.perf_counter()
        last_user = next((message for message in reversed(messages) if message.get("role") == "user"), None)
        if last_user is None:
            raise ValidationError("No user message found")

        results = self.search_service.search(
            vector_store_id,
            last_user["content"],
            max_results=max_results,
            filters=filters,
            web_search=web_search,
            hybrid_search=hybrid_search,
            ranking_options=ranking_options,
        )
        conversation = [build_system_message(results), *[dict(message) for message in messages]]
        response = self.completion_model.complete(conversation)
        self.stores.touch(vector_store_id)

        REQUEST_LATENCY.labels(endpoint="chat").observe(time.perf_counter() - started)
        REQUEST_COUNT.labels(endpoint="chat", status="ok").inc()
        return ChatReply(response=response, context=results)

    def query(
        self,
        vector_store_id: str,
        question: str,
        max_results: int | None = None,
        filters: MetadataFilter | None = None,
        web_search: WebSearchOptions | None = None,
        hybrid_search: HybridSearchOptions | None = None,
        ranking_options: RankingOptions | None = None,
    ) -> QueryAnswer:
        started = time.perf_counter()
        if not question or not question.strip():
            raise ValidationError("Question is required")
        results = self.search_service.search(
            vector_store_id,
            question,
            max_results=max_results,
            filters=filters,
            web_search=web_search,
            hybrid_search=hybrid_search,
            ranking_options=ranking_options,
        )
        answer = self.completion_model.complete(
            [build_system_message(results), {"role": "user", "content": question}]
        )
        self.stores.touch(vector_store_id)

        REQUEST_LATENCY.labels(endpoint="query").observe(time.perf_counter() - started)
        REQUEST_COUNT.labels(endpoint="query", status="ok").inc()
        return QueryAnswer(answer=answer, context=results)


__all__ = [
    "AnswerService",
    "ChatReply",
    "QueryAnswer",
    "SYSTEM_PROMPT",
    "build_context",
    "build_system_message",
]
