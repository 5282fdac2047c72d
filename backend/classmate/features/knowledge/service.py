"""
Knowledge feature: Vector store over class documents.
Similarity search is delegated to the `match_documents` pgvector function.
"""

import logging
from typing import Callable

from langchain_core.documents import Document
from supabase import Client

from classmate.features.knowledge.embedding import embed_text

logger = logging.getLogger(__name__)

MATCH_FUNCTION = "match_documents"


class ClassVectorStore:
    """Semantic search restricted to the documents of one class."""

    def __init__(self, db: Client, embed: Callable[[str], list[float]] | None = None):
        self.db = db
        self.embed = embed or embed_text

    def similarity_search(
        self,
        query: str,
        class_id: str,
        user_id: str,
        k: int = 3,
    ) -> list[Document]:
        """Return the k documents of a class closest to the query.

        Args:
            query: Natural language question.
            class_id: Class whose documents are searched.
            user_id: Owner of the class.
            k: Number of results to return.

        Returns:
            LangChain Documents sorted by similarity, metadata carries
            filename, file_path, page and similarity.
        """
        query_vector = self.embed(query)

        result = self.db.rpc(
            MATCH_FUNCTION,
            {
                "query_embedding": query_vector,
                "match_class_id": class_id,
                "match_user_id": user_id,
                "match_count": k,
            },
        ).execute()

        rows = result.data if result.data else []
        logger.info(f"🔎 Vector search in class {class_id}: {len(rows)} match(es)")
        return [_row_to_document(row) for row in rows[:k]]


def _row_to_document(row: dict) -> Document:
    return Document(
        page_content=row.get("content") or "",
        metadata={
            "id": row.get("id"),
            "filename": row.get("name"),
            "file_path": row.get("file_path"),
            "page": row.get("page"),
            "similarity": row.get("similarity"),
        },
    )
