"""Retrieval orchestration components."""

from .vector_index import ChunkStore
from .search import SearchService
from .answer import AnswerService
from .hybrid import apply_filter, apply_hybrid_ranking, keyword_score

__all__ = [
    "ChunkStore",
    "SearchService",
    "AnswerService",
    "apply_filter",
    "apply_hybrid_ranking",
    "keyword_score",
]
