"""
Knowledge feature: Embedding utility functions.
Wraps the provider's embedding model for use across the app.
"""

import logging

from langchain_core.embeddings import Embeddings

from classmate.config import get_settings
from classmate.core.llm_provider import create_embeddings

logger = logging.getLogger(__name__)

# Singleton embedding model (lazy init)
_embeddings_model: Embeddings | None = None


def get_embeddings_model() -> Embeddings:
    """Get or create the shared embeddings model instance."""
    global _embeddings_model
    if _embeddings_model is None:
        _embeddings_model = create_embeddings()
    return _embeddings_model


def embed_text(text: str) -> list[float]:
    """Generate embedding vector for a single text string.

    Args:
        text: The text to embed (a whole document or a chat question).

    Returns:
        A list of floats, truncated to EMBEDDING_DIMENSIONS.
    """
    settings = get_settings()
    model = get_embeddings_model()
    vector = model.embed_query(text)
    # Truncate to the column dimensionality (Gemini returns 3072)
    return vector[:settings.EMBEDDING_DIMENSIONS]
