"""Prometheus metrics instrumentation."""

from __future__ import annotations

from fastapi import Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

REGISTRY = CollectorRegistry()

REQUEST_COUNT = Counter(
    "vagent_requests_total",
    "Total service operations",
    labelnames=("endpoint", "status"),
    registry=REGISTRY,
)

REQUEST_LATENCY = Histogram(
    "vagent_request_latency_seconds",
    "Latency of service operations",
    labelnames=("endpoint",),
    registry=REGISTRY,
)

INGEST_DURATION = Histogram(
    "vagent_ingest_duration_seconds",
    "Ingest pipeline duration per file",
    labelnames=("outcome",),
    registry=REGISTRY,
)

CHUNKS_WRITTEN = Counter(
    "vagent_chunks_written_total",
    "Number of chunks persisted by ingestion",
    registry=REGISTRY,
)

SEARCH_SOURCE_FAILURES = Counter(
    "vagent_search_source_failures_total",
    "Sub-search failures degraded to empty results",
    labelnames=("source",),
    registry=REGISTRY,
)


def metrics_response() -> Response:
    """Return Prometheus metrics as an HTTP response."""
    payload = generate_latest(REGISTRY)
    return Response(content=payload, media_type=CONTENT_TYPE_LATEST)


__all__ = [
    "REGISTRY",
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "INGEST_DURATION",
    "CHUNKS_WRITTEN",
    "SEARCH_SOURCE_FAILURES",
    "metrics_response",
]
