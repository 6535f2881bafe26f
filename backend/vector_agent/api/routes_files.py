"""File upload and attachment routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError as PydanticValidationError
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from vector_agent.api.dependencies import get_file_service, get_ingest_pipeline
from vector_agent.core.errors import ValidationError
from vector_agent.ingest.files import FileService
from vector_agent.ingest.pipeline import IngestPipeline
from vector_agent.ingest.types import ChunkingStrategy
from vector_agent.models.dto import AddFileRequest, AddFileResponse, FileUploadResponse, FileUploadUrlRequest
from vector_agent.models.entities import FileRecord
from vector_agent.utils.time import ms_to_datetime

router = APIRouter()

NO_FILE_MESSAGE = "No file provided. Please provide a file URL or upload a file."


@router.post("/upload-file", response_model=FileUploadResponse, status_code=201, summary="Upload a file")
async def upload_file(request: Request, files: FileService = Depends(get_file_service)) -> FileUploadResponse:
    """Accept a multipart ``file`` part, or a ``fileUrl`` as form field or JSON body."""
    if request.headers.get("content-type", "").startswith("application/json"):
        try:
            payload = FileUploadUrlRequest.model_validate(await request.json())
        except (PydanticValidationError, ValueError) as exc:
            raise ValidationError(NO_FILE_MESSAGE) from exc
        record = await run_in_threadpool(files.upload_from_url, payload.file_url)
        return _to_response(record)

    form = await request.form()
    upload = form.get("file")
    file_url = form.get("fileUrl")
    if isinstance(upload, UploadFile):
        data = await upload.read()
        record = files.upload_bytes(upload.filename or "upload", upload.content_type, data)
    elif isinstance(file_url, str) and file_url:
        record = await run_in_threadpool(files.upload_from_url, file_url)
    else:
        raise ValidationError(NO_FILE_MESSAGE)
    return _to_response(record)


@router.post("/add-file", response_model=AddFileResponse, summary="Attach a file to a vector store")
async def add_file(
    request: AddFileRequest,
    pipeline: IngestPipeline = Depends(get_ingest_pipeline),
) -> AddFileResponse:
    strategy = None
    if request.chunking_strategy is not None:
        strategy = ChunkingStrategy(
            max_chunk_size_tokens=request.chunking_strategy.max_chunk_size_tokens,
            chunk_overlap_tokens=request.chunking_strategy.chunk_overlap_tokens,
        )
    pipeline.add_file_to_vector_store(request.vector_store_id, request.file_id, strategy)
    return AddFileResponse(success=True)


def _to_response(record: FileRecord) -> FileUploadResponse:
    return FileUploadResponse(
        id=record.id,
        filename=record.filename,
        content_type=record.content_type,
        size=record.size,
        created_at=ms_to_datetime(record.created_at),
    )


__all__ = ["router"]
