"""
Chat feature: Chat API route.
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from supabase import Client

from classmate.core.dependencies import get_current_user_id, get_db
from classmate.features.chat.schemas import ChatRequest, ChatResponse
from classmate.features.chat.service import ChatService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=ChatResponse)
async def chat(
    data: ChatRequest,
    user_id: str = Depends(get_current_user_id),
    db: Client = Depends(get_db),
):
    """Answer a question from the documents of one class."""
    result = await ChatService(db).answer(data.message, data.class_id, user_id)
    if not result.ok:
        logger.error(f"Chat error: {result.error}")
        return JSONResponse(status_code=500, content={"error": result.error.message})
    return result.value
