"""Administrative routes for Vector Agent."""

from __future__ import annotations

import sqlite3

from fastapi import APIRouter, Depends

from vector_agent.api.dependencies import get_app_settings, get_database
from vector_agent.core.config import APP_VERSION, Settings
from vector_agent.core.logging import get_logger
from vector_agent.core.metrics import metrics_response
from vector_agent.db.sqlite import SQLiteDatabase
from vector_agent.models.dto import HealthResponse

logger = get_logger(__name__)

router = APIRouter()


@router.get("/health", response_model=HealthResponse, summary="Liveness and backing service check")
async def health(
    db: SQLiteDatabase = Depends(get_database),
    settings: Settings = Depends(get_app_settings),
) -> HealthResponse:
    services = {
        "database": _database_status(db),
        "embeddings": settings.embedding_backend,
        "completion": settings.completion_backend,
    }
    status = "ok" if services["database"] == "ok" else "degraded"
    return HealthResponse(status=status, version=APP_VERSION, services=services)


@router.get("/metrics", summary="Prometheus metrics")
async def get_metrics():
    return metrics_response()


def _database_status(db: SQLiteDatabase) -> str:
    try:
        db.query_one("SELECT id FROM vector_stores LIMIT 1")
    except sqlite3.Error as exc:
        logger.warning("Database health check failed: %s", exc)
        return "error"
    return "ok"


__all__ = ["router"]
