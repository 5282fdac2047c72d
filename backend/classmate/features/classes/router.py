"""
Classes feature: API routes for classes and document ingestion.
"""

import logging

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.concurrency import run_in_threadpool
from supabase import Client

from classmate.config import get_settings
from classmate.core.dependencies import get_current_user_id, get_db
from classmate.core.exceptions import PayloadTooLargeError, UnsupportedFormatError
from classmate.core.result import Result, result_to_response
from classmate.features.classes.schemas import ClassResponse
from classmate.features.classes.service import ClassRepository
from classmate.features.documents.extractor import UPLOAD_MEDIA_TYPES
from classmate.features.documents.pipeline import IngestionPipeline, UploadedFile

logger = logging.getLogger(__name__)

router = APIRouter()


async def read_uploads(files: list[UploadFile]) -> Result[list[UploadedFile]]:
    """Read multipart uploads into memory.

    Rejects any file whose content type the upload form does not accept, or
    whose size exceeds MAX_UPLOAD_BYTES, before anything is processed.
    """
    limit = get_settings().MAX_UPLOAD_BYTES
    uploads = []
    for file in files:
        filename = file.filename or "upload"
        content_type = file.content_type or ""
        if content_type not in UPLOAD_MEDIA_TYPES:
            return Result.failure(UnsupportedFormatError(content_type))
        data = await file.read()
        if len(data) > limit:
            return Result.failure(PayloadTooLargeError(filename, limit))
        uploads.append(UploadedFile(filename=filename, content_type=content_type, data=data))
    return Result.success(uploads)


@router.get("")
async def list_classes(
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    """List the user's classes with their documents."""
    result = await run_in_threadpool(ClassRepository(db).list_classes, user_id)
    data = None
    if result.ok:
        data = [ClassResponse(**c).model_dump() for c in result.value]
    return result_to_response(result, "Failed to fetch classes", {"data": data})


@router.post("")
async def create_class(
    name: str = Form(...),
    description: str | None = Form(None),
    files: list[UploadFile] | None = File(None),
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    """Create a class, then ingest any files uploaded with it.

    If ingestion fails the class stays; the response reports the error.
    """
    uploads = await read_uploads(files or [])
    if not uploads.ok:
        return result_to_response(uploads, "Failed to create class")

    created = await run_in_threadpool(ClassRepository(db).create_class, name, user_id, description)
    if not created.ok:
        return result_to_response(created, "Failed to create class")

    class_id = created.value["id"]
    if uploads.value:
        # Parsing, embedding and storage calls block; keep them off the event loop
        ingested = await run_in_threadpool(
            IngestionPipeline(db).ingest, class_id, user_id, uploads.value
        )
        if not ingested.ok:
            return result_to_response(ingested, "Failed to create class")

    return result_to_response(
        created,
        "Failed to create class",
        {"classId": class_id, "data": ClassResponse(**created.value).model_dump()},
        success_status=201,
    )


@router.delete("/{class_id}")
async def delete_class(
    class_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    """Delete a class with all its documents and stored files."""
    result = await run_in_threadpool(ClassRepository(db).delete_class, class_id, user_id)
    return result_to_response(result, "Failed to delete class")


@router.post("/{class_id}/documents")
async def add_documents(
    class_id: str,
    files: list[UploadFile] = File(...),
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    """Upload documents into an existing class."""
    uploads = await read_uploads(files)
    if not uploads.ok:
        return result_to_response(uploads, "Failed to add documents")

    result = await run_in_threadpool(IngestionPipeline(db).ingest, class_id, user_id, uploads.value)
    return result_to_response(result, "Failed to add documents", {"classId": result.value})
