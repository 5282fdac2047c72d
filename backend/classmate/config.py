"""
Application configuration using Pydantic Settings.
All config is loaded from environment variables / .env file.
"""

from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    # ── App ──────────────────────────────────────────────
    APP_NAME: str = "classmate-rag"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    CORS_ORIGINS: str = "http://localhost:3000"  # comma-separated

    # ── Supabase ─────────────────────────────────────────
    SUPABASE_URL: str
    SUPABASE_KEY: str  # anon/public key
    SUPABASE_SERVICE_KEY: str = ""  # service_role key (server-side ops)
    STORAGE_BUCKET: str = "documents"

    # ── Auth (tokens issued by Supabase Auth) ────────────
    SUPABASE_JWT_SECRET: str
    JWT_ALGORITHM: str = "HS256"
    JWT_AUDIENCE: str = "authenticated"

    # ── Uploads ──────────────────────────────────────────
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024  # 10MB per file

    # ── LLM (Provider-Agnostic) ──────────────────────────
    LLM_PROVIDER: str = "openai"  # openai | gemini | groq
    LLM_MODEL: str = "gpt-4-turbo-preview"
    LLM_API_KEY: str = ""
    LLM_TEMPERATURE: float = 0.7

    # ── Embedding ────────────────────────────────────────
    EMBEDDING_PROVIDER: str = "openai"  # openai | gemini
    EMBEDDING_MODEL: str = "text-embedding-3-small"
    EMBEDDING_DIMENSIONS: int = 1536  # must match documents.embedding column

    # ── Retrieval ────────────────────────────────────────
    RETRIEVAL_TOP_K: int = 3
    EXCERPT_LENGTH: int = 200

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
    }

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance (singleton)."""
    return Settings()
