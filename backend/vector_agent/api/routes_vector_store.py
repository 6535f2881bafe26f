"""Vector store lifecycle routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from vector_agent.api.dependencies import get_vector_store_service
from vector_agent.models.dto import (
    CheckStatusRequest,
    CheckStatusResponse,
    CreateStoreRequest,
    CreateStoreResponse,
    VectorStoreFileResponse,
    VectorStoreResponse,
)
from vector_agent.stores.lifecycle import ExpiresAfter, VectorStoreService, is_expired
from vector_agent.utils.time import ms_to_datetime

router = APIRouter()


@router.post("/create-store", response_model=CreateStoreResponse, status_code=201, summary="Create a vector store")
async def create_store(
    request: CreateStoreRequest,
    service: VectorStoreService = Depends(get_vector_store_service),
) -> CreateStoreResponse:
    expires_after = None
    if request.expires_after is not None:
        expires_after = ExpiresAfter(anchor=request.expires_after.anchor, days=request.expires_after.days)
    store = service.create_vector_store(request.name, expires_after)
    return CreateStoreResponse(id=store.id)


@router.post("/check-status", response_model=CheckStatusResponse, summary="Aggregate ingestion status")
async def check_status(
    request: CheckStatusRequest,
    service: VectorStoreService = Depends(get_vector_store_service),
) -> CheckStatusResponse:
    status = service.check_status(request.vector_store_id)
    return CheckStatusResponse(
        status=status.status,
        file_count=status.file_count,
        processing_count=status.processing_count,
    )


@router.get("/{vector_store_id}", response_model=VectorStoreResponse, summary="Vector store details")
async def get_store(
    vector_store_id: str,
    service: VectorStoreService = Depends(get_vector_store_service),
) -> VectorStoreResponse:
    store = service.get_vector_store(vector_store_id)
    return VectorStoreResponse(
        id=store.id,
        name=store.name,
        created_at=ms_to_datetime(store.created_at),
        last_active_at=ms_to_datetime(store.last_active_at),
        expires_at=ms_to_datetime(store.expires_at),
        expired=is_expired(store),
    )


@router.get(
    "/{vector_store_id}/files",
    response_model=list[VectorStoreFileResponse],
    summary="Per-file ingestion state",
)
async def list_files(
    vector_store_id: str,
    service: VectorStoreService = Depends(get_vector_store_service),
) -> list[VectorStoreFileResponse]:
    return [
        VectorStoreFileResponse(
            vector_store_id=row.vector_store_id,
            file_id=row.file_id,
            status=row.status,
            chunking_strategy=row.chunking_strategy,
            chunk_count=row.chunk_count,
            error_message=row.error_message,
            created_at=ms_to_datetime(row.created_at),
            completed_at=ms_to_datetime(row.completed_at),
        )
        for row in service.list_vector_store_files(vector_store_id)
    ]


__all__ = ["router"]
