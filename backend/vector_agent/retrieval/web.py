"""Web search providers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, Sequence

from vector_agent.utils.ids import new_id


@dataclass(slots=True)
class WebHit:
    id: str
    content: str
    score: float
    metadata: dict[str, Any] = field(default_factory=dict)


class WebSearchProvider(Protocol):
    def search(
        self,
        query: str,
        limit: int,
        recent_only: bool = False,
        domains: Sequence[str] | None = None,
    ) -> list[WebHit]: ...


def build_web_query(query: str, recent_only: bool = False, domains: Sequence[str] | None = None) -> str:
    """Apply ``site:`` and recency modifiers the way a search engine expects them."""
    effective = query
    if domains:
        effective = f"{query} site:" + " OR site:".join(domains)
    if recent_only:
        effective = f"{effective} time:month"
    return effective.strip()


class SimulatedWebSearch:
    """Placeholder provider that returns two synthetic, deterministic hits."""

    def search(
        self,
        query: str,
        limit: int,
        recent_only: bool = False,
        domains: Sequence[str] | None = None,
    ) -> list[WebHit]:
        effective = build_web_query(query, recent_only, domains)
        hits = [
            WebHit(
                id=new_id("web"),
                content=(
                    f'This is a simulated web search result for query: "{query}". '
                    "In a real implementation, this would be content from a web page."
                ),
                score=0.95,
                metadata={
                    "url": "https://example.com/page1",
                    "title": "Example Web Result 1",
                    "source": "web",
                    "query": effective,
                },
            ),
            WebHit(
                id=new_id("web"),
                content=f'Another simulated web search result for: "{query}". This demonstrates multiple web results.',
                score=0.88,
                metadata={
                    "url": "https://example.com/page2",
                    "title": "Example Web Result 2",
                    "source": "web",
                    "query": effective,
                },
            ),
        ]
        return hits[: max(limit, 0)]


__all__ = ["WebHit", "WebSearchProvider", "SimulatedWebSearch", "build_web_query"]
