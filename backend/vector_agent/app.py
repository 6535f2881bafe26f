"""FastAPI application setup for Vector Agent."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from vector_agent.api import dependencies
from vector_agent.api.routes_admin import router as admin_router
from vector_agent.api.routes_files import router as files_router
from vector_agent.api.routes_search import router as search_router
from vector_agent.api.routes_vector_store import router as vector_store_router
from vector_agent.core.config import APP_VERSION
from vector_agent.core.errors import VectorAgentError
from vector_agent.core.logging import configure_logging, get_logger
from vector_agent.core.metrics import REQUEST_COUNT

configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    """Warm up core singletons on startup; drain the ingest worker on shutdown."""
    dependencies.get_app_settings()
    dependencies.get_database()
    dependencies.get_embedding_model()
    dependencies.get_ingest_pipeline()
    dependencies.get_answer_service()
    yield
    dependencies.shutdown()


app = FastAPI(
    title="Vector Agent",
    version=APP_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=dependencies.get_app_settings().cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(vector_store_router, prefix="/api/vector-store", tags=["vector-store"])
app.include_router(files_router, prefix="/api/file", tags=["file"])
app.include_router(search_router, prefix="/api/search", tags=["search"])
app.include_router(admin_router, prefix="", tags=["admin"])


@app.exception_handler(VectorAgentError)
async def handle_service_error(request: Request, exc: VectorAgentError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc, exc_info=exc)
    else:
        logger.info("%s %s rejected: %s", request.method, request.url.path, exc)
    REQUEST_COUNT.labels(endpoint=request.url.path, status=str(exc.status_code)).inc()
    return JSONResponse(status_code=exc.status_code, content={"error": exc.public_message})


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    missing = [".".join(str(part) for part in error["loc"] if part != "body") for error in exc.errors()]
    REQUEST_COUNT.labels(endpoint=request.url.path, status="400").inc()
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request", "fields": [field for field in missing if field]},
    )


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error("%s %s crashed: %s", request.method, request.url.path, exc, exc_info=exc)
    REQUEST_COUNT.labels(endpoint=request.url.path, status="500").inc()
    return JSONResponse(status_code=500, content={"error": "Internal server error"})
