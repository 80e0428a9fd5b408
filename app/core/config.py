# app/core/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings loaded from environment.

    Required env vars (.env):
      - DATABASE_URL (SQLAlchemy connection string)

    Optional:
      - DATABASE_SSLMODE (appended as sslmode=... for PostgreSQL URLs)
      - UPLOAD_DIR / UPLOADS_URL_PREFIX (where image blobs live and how
        they are addressed in responses)
    """

    PROJECT_NAME: str = "Goat Registry Backend"

    # DB config
    DATABASE_URL: str
    DATABASE_SSLMODE: str | None = None

    # Image blob storage
    UPLOAD_DIR: str = "uploads"
    UPLOADS_URL_PREFIX: str = "/uploads"
    MAX_IMAGE_BYTES: int = 5 * 1024 * 1024  # 5MB per image
    IMAGE_WRITE_WORKERS: int = 4

    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:8081",  # Expo dev server
        "http://localhost:19006",
    ]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader.
    Ensures we don't re-parse .env on every import / request.
    """
    return Settings()
