"""Pydantic DTOs exposed via API."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Accept and emit camelCase field names while keeping snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ExpiresAfterRequest(ApiModel):
    anchor: Literal["created_at", "last_active_at"] = "created_at"
    days: int = Field(gt=0)


class CreateStoreRequest(ApiModel):
    name: str = Field(min_length=1)
    expires_after: ExpiresAfterRequest | None = None


class CreateStoreResponse(ApiModel):
    id: str


class CheckStatusRequest(ApiModel):
    vector_store_id: str = Field(min_length=1)


class CheckStatusResponse(ApiModel):
    status: Literal["empty", "processing", "ready"]
    file_count: int
    processing_count: int


class VectorStoreResponse(ApiModel):
    id: str
    name: str
    created_at: datetime
    last_active_at: datetime
    expires_at: datetime | None = None
    expired: bool = False


class VectorStoreFileResponse(BaseModel):
    vector_store_id: str
    file_id: str
    status: Literal["processing", "completed", "error"]
    chunking_strategy: dict[str, int]
    chunk_count: int | None = None
    error_message: str | None = None
    created_at: datetime
    completed_at: datetime | None = None


class FileUploadUrlRequest(ApiModel):
    file_url: str = Field(min_length=1)


class FileUploadResponse(BaseModel):
    id: str
    filename: str
    content_type: str
    size: int
    created_at: datetime


class ChunkingStrategyRequest(BaseModel):
    max_chunk_size_tokens: int = Field(gt=0)
    chunk_overlap_tokens: int = Field(gt=0)


class AddFileRequest(ApiModel):
    vector_store_id: str = Field(min_length=1)
    file_id: str = Field(min_length=1)
    chunking_strategy: ChunkingStrategyRequest | None = None


class AddFileResponse(BaseModel):
    success: bool = True


class FilterRequest(BaseModel):
    # Unknown types are accepted and leave results unfiltered.
    type: str
    key: str
    value: Any = None


class WebSearchRequest(ApiModel):
    enabled: bool = False
    max_results: int | None = Field(default=None, gt=0)
    recent_only: bool = False
    domains: list[str] | None = None


class HybridSearchRequest(ApiModel):
    enabled: bool = False
    vector_weight: float | None = None
    keyword_weight: float | None = None


class RankingOptionsRequest(BaseModel):
    ranker: str | None = None
    score_threshold: float | None = None


class RetrievalRequest(ApiModel):
    vector_store_id: str = Field(min_length=1)
    max_results: int | None = Field(default=None, gt=0)
    filters: FilterRequest | None = None
    web_search: WebSearchRequest | None = None
    hybrid_search: HybridSearchRequest | None = None
    ranking_options: RankingOptionsRequest | None = None


class SearchRequest(RetrievalRequest):
    query: str = Field(min_length=1)


class ChatMessage(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str


class ChatRequest(RetrievalRequest):
    messages: list[ChatMessage] = Field(min_length=1)


class QueryRequest(RetrievalRequest):
    question: str = Field(min_length=1)


class SearchResultResponse(BaseModel):
    id: str
    content: str
    metadata: dict[str, Any]
    score: float
    source: Literal["vector", "web"]


class SearchResponse(BaseModel):
    results: list[SearchResultResponse]


class ChatResponse(BaseModel):
    response: str
    context: list[SearchResultResponse]


class QueryResponse(BaseModel):
    answer: str
    context: list[SearchResultResponse]


class HealthResponse(BaseModel):
    status: Literal["ok", "degraded"]
    version: str
    services: dict[str, str]


__all__ = [
    "CreateStoreRequest",
    "CreateStoreResponse",
    "CheckStatusRequest",
    "CheckStatusResponse",
    "VectorStoreResponse",
    "VectorStoreFileResponse",
    "FileUploadUrlRequest",
    "FileUploadResponse",
    "AddFileRequest",
    "AddFileResponse",
    "SearchRequest",
    "SearchResponse",
    "ChatRequest",
    "ChatResponse",
    "QueryRequest",
    "QueryResponse",
    "HealthResponse",
]
