"""
Chat feature: retrieval-augmented answers over one class's documents.
"""

import logging

from fastapi.concurrency import run_in_threadpool
from langchain_core.documents import Document
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage
from supabase import Client

from classmate.config import get_settings
from classmate.core.exceptions import RequestFailedError
from classmate.core.llm_provider import create_llm
from classmate.core.result import Result
from classmate.features.chat.prompts import build_system_prompt
from classmate.features.chat.schemas import ChatResponse, Source
from classmate.features.knowledge.service import ClassVectorStore

logger = logging.getLogger(__name__)


def build_context(documents: list[Document]) -> str:
    return "\n\n".join(doc.page_content for doc in documents)


def build_source(doc: Document, excerpt_length: int = 200) -> Source:
    return Source(
        document=doc.metadata.get("filename"),
        excerpt=doc.page_content[:excerpt_length] + "...",
        page=doc.metadata.get("page"),
    )


def _message_text(content) -> str:
    """Chat model content may be a string or a list of content blocks (Gemini)."""
    if isinstance(content, str):
        return content
    parts = []
    for block in content:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)


class ChatService:
    """One question in, one grounded answer out. Nothing is kept between calls."""

    def __init__(
        self,
        db: Client,
        llm: BaseChatModel | None = None,
        vector_store: ClassVectorStore | None = None,
    ):
        self.llm = llm
        self.vector_store = vector_store or ClassVectorStore(db)

    async def answer(self, question: str, class_id: str, user_id: str) -> Result[ChatResponse]:
        settings = get_settings()
        try:
            documents = await run_in_threadpool(
                self.vector_store.similarity_search,
                question, class_id, user_id, k=settings.RETRIEVAL_TOP_K,
            )
            messages = [
                SystemMessage(content=build_system_prompt(build_context(documents))),
                HumanMessage(content=question),
            ]
            llm = self.llm or create_llm()
            reply = await llm.ainvoke(messages)
        except Exception as e:
            logger.error(f"❌ Chat request failed for class {class_id}: {e}")
            return Result.failure(RequestFailedError(f"{type(e).__name__}: {e}"))

        return Result.success(ChatResponse(
            response=_message_text(reply.content),
            sources=[build_source(doc, settings.EXCERPT_LENGTH) for doc in documents],
        ))
