"""
Documents feature: API routes for single documents.
"""

from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool
from supabase import Client

from classmate.core.dependencies import get_current_user_id, get_db
from classmate.core.result import result_to_response
from classmate.features.classes.service import ClassRepository

router = APIRouter()


@router.delete("/{document_id}")
async def delete_document(
    document_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    """Delete a document: stored file first, then its record."""
    result = await run_in_threadpool(ClassRepository(db).delete_document, document_id, user_id)
    return result_to_response(result, "Failed to delete document")


@router.get("/{document_id}/download")
async def download_document(
    document_id: str,
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    """Signed download URL for the original file (valid 60 minutes)."""
    result = await run_in_threadpool(ClassRepository(db).get_document_download_url, document_id, user_id)
    return result_to_response(result, "Failed to get download link", {"data": {"url": result.value}})
