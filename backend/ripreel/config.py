from __future__ import annotations
"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from urllib.parse import quote_plus

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """RipReel application settings.

    Loaded from environment variables or .env file.
    """

    # --- Application ---
    APP_NAME: str = "RipReel"
    DEBUG: bool = False
    APP_URL: str = "http://localhost:8000"

    # --- Database (MySQL 8.0+) ---
    DB_HOST: str = "localhost"
    DB_PORT: int = 3306
    DB_USER: str = "root"
    DB_PASSWORD: str = ""
    DB_NAME: str = "ripreel"
    DB_URL: str = ""  # full SQLAlchemy URL, overrides the DB_* parts when set

    @property
    def DATABASE_URL(self) -> str:
        """Async connection string (asyncmy driver unless DB_URL is set)."""
        if self.DB_URL:
            return self.DB_URL
        encoded_password = quote_plus(self.DB_PASSWORD)
        return (
            f"mysql+asyncmy://{self.DB_USER}:{encoded_password}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
            "?charset=utf8mb4"
        )

    # --- Redis (Celery broker) ---
    REDIS_URL: str = "redis://localhost:6379/0"

    # --- Durable media storage ---
    MEDIA_VOLUME: str = "media_volume"
    PUBLIC_MEDIA_URL: str = "http://localhost:8000/media"
    STORAGE_FETCH_TIMEOUT: float = 60.0

    # --- n8n workflows ---
    N8N_VIDEO_WEBHOOK_URL: str = ""
    N8N_IMAGE_WEBHOOK_URL: str = ""
    N8N_TIMEOUT: float = 30.0

    # --- Video generation ---
    MAX_CONCURRENT_VIDEO_JOBS: int = 3
    VIDEO_MODEL: str = "veo3_fast"
    VIDEO_ASPECT_RATIO: str = "16:9"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings singleton."""
    return Settings()
