"""Structured logging for Vector Agent.

Records are emitted as one JSON object per line. Ingestion and retrieval code
attach the store, file and chunk they are working on through ``extra``; those
keys become top-level fields so a single file's ingestion can be followed
across worker threads.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any

import orjson

_DEFAULT_LEVEL = os.environ.get("VAGENT_LOG_LEVEL", "INFO")
_DEFAULT_FORMAT = os.environ.get("VAGENT_LOG_FORMAT", "json")

CONTEXT_FIELDS = ("vector_store_id", "file_id", "chunk_index", "failed_sources")


class JsonFormatter(logging.Formatter):
    """Render records as JSON with the ingestion/retrieval context fields."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "thread": record.threadName,
            "message": record.getMessage(),
        }
        for key in CONTEXT_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                payload[key] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return orjson.dumps(payload, default=str).decode("utf-8")


class ContextTextFormatter(logging.Formatter):
    """Plain-text variant that appends ``key=value`` context pairs."""

    def __init__(self) -> None:
        super().__init__("%(asctime)s %(levelname)s [%(threadName)s] %(name)s: %(message)s")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = " ".join(
            f"{key}={getattr(record, key)}" for key in CONTEXT_FIELDS if getattr(record, key, None) is not None
        )
        return f"{line} {context}" if context else line


def configure_logging(level: str | int = _DEFAULT_LEVEL, fmt: str = _DEFAULT_FORMAT) -> None:
    """Install a single stdout handler on the root logger."""
    logging.captureWarnings(True)
    root = logging.getLogger()
    root.setLevel(level)
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter() if fmt == "json" else ContextTextFormatter())
    root.handlers = [handler]


def get_logger(name: str = "vector_agent") -> logging.Logger:
    if not logging.getLogger().handlers:
        configure_logging()
    return logging.getLogger(name)


__all__ = ["CONTEXT_FIELDS", "ContextTextFormatter", "JsonFormatter", "configure_logging", "get_logger"]
