"""Metadata filters and hybrid (vector + keyword) scoring."""

from __future__ import annotations

import operator
from dataclasses import dataclass, replace
from typing import Any, Callable, Sequence

from vector_agent.core.logging import get_logger
from vector_agent.models.entities import SearchResult

logger = get_logger(__name__)

MIN_KEYWORD_LENGTH = 3

_MISSING = object()


@dataclass(frozen=True, slots=True)
class MetadataFilter:
    type: str
    key: str
    value: Any


def _compare(op: Callable[[Any, Any], bool]) -> Callable[[Any, Any], bool]:
    def check(actual: Any, expected: Any) -> bool:
        if actual is _MISSING or actual is None:
            return False
        try:
            return bool(op(actual, expected))
        except TypeError:
            return False

    return check


def _is_member(actual: Any, expected: Any) -> bool:
    if not isinstance(expected, (list, tuple, set, frozenset)):
        return False
    return actual is not _MISSING and actual in expected


def _contains(actual: Any, expected: Any) -> bool:
    return isinstance(actual, str) and isinstance(expected, str) and expected in actual


def _not_equal(actual: Any, expected: Any) -> bool:
    return actual is _MISSING or actual != expected


_PREDICATES: dict[str, Callable[[Any, Any], bool]] = {
    "eq": lambda actual, expected: actual is not _MISSING and actual == expected,
    "neq": _not_equal,
    "gt": _compare(operator.gt),
    "gte": _compare(operator.ge),
    "lt": _compare(operator.lt),
    "lte": _compare(operator.le),
    "in": _is_member,
    "contains": _contains,
}


def apply_filter(results: Sequence[SearchResult], metadata_filter: MetadataFilter) -> list[SearchResult]:
    """Keep results whose metadata satisfies the filter; unknown types keep everything."""
    predicate = _PREDICATES.get(metadata_filter.type)
    if predicate is None:
        logger.warning("Unknown filter type %r; results left unfiltered", metadata_filter.type)
        return list(results)
    return [
        result
        for result in results
        if predicate(result.metadata.get(metadata_filter.key, _MISSING), metadata_filter.value)
    ]


def keyword_score(query: str, content: str) -> float:
    """Fraction of query words (split on whitespace) that appear in content.

    Only words longer than two characters can match, but every word counts
    toward the denominator.
    """
    keywords = query.lower().split()
    if not keywords:
        return 0.0
    haystack = content.lower()
    matches = sum(1 for keyword in keywords if len(keyword) >= MIN_KEYWORD_LENGTH and keyword in haystack)
    return matches / len(keywords)


def apply_hybrid_ranking(
    results: Sequence[SearchResult],
    query: str,
    vector_weight: float = 0.7,
    keyword_weight: float = 0.3,
) -> list[SearchResult]:
    return [
        replace(result, score=result.score * vector_weight + keyword_score(query, result.content) * keyword_weight)
        for result in results
    ]


def rank(results: Sequence[SearchResult], limit: int) -> list[SearchResult]:
    """Stable sort by score descending, then truncate."""
    return sorted(results, key=lambda result: result.score, reverse=True)[: max(limit, 0)]


__all__ = [
    "MetadataFilter",
    "apply_filter",
    "keyword_score",
    "apply_hybrid_ranking",
    "rank",
    "MIN_KEYWORD_LENGTH",
]
