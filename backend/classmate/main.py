"""
Classmate RAG - FastAPI Application Entry Point.

Feature-based modular architecture:
  Each feature in classmate/features/ has its own router, service, and schemas.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from classmate.config import get_settings

# ── Feature Routers ──────────────────────────────────────
from classmate.features.chat.router import router as chat_router
from classmate.features.classes.router import router as classes_router
from classmate.features.documents.router import router as documents_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle: startup & shutdown."""
    settings = get_settings()
    logger.info(f"🚀 {settings.APP_NAME} v{settings.APP_VERSION} starting...")
    logger.info(f"🤖 LLM Provider: {settings.LLM_PROVIDER} ({settings.LLM_MODEL})")
    logger.info(f"🧮 Embeddings: {settings.EMBEDDING_PROVIDER} ({settings.EMBEDDING_MODEL})")
    logger.info(f"🔗 Supabase: {settings.SUPABASE_URL[:40]}...")
    yield
    logger.info("👋 Shutting down...")


def configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app() -> FastAPI:
    """Application factory."""
    settings = get_settings()
    configure_logging(settings.DEBUG)

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Course materials organized into classes, with retrieval-augmented chat",
        lifespan=lifespan,
    )

    # ── CORS ─────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Register Feature Routers ─────────────────────────
    app.include_router(classes_router, prefix="/api/classes", tags=["Classes"])
    app.include_router(documents_router, prefix="/api/documents", tags=["Documents"])
    app.include_router(chat_router, prefix="/api/chat", tags=["Chat"])

    # ── Health Check ─────────────────────────────────────
    @app.get("/health", tags=["System"])
    async def health_check():
        return {
            "status": "healthy",
            "app": settings.APP_NAME,
            "version": settings.APP_VERSION,
        }

    return app


app = create_app()
