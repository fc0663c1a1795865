"""
Environment-based configuration using pydantic-settings.
Backend credentials come from environment variables, never hardcoded.
"""
from functools import lru_cache
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )

    # ── Core ────────────────────────────────────────────────────────────────
    ENV: str = "production"
    LOG_LEVEL: str = "INFO"
    BOT_TOKEN: str = ""

    # ── Firebase (identity + document data) ─────────────────────────────────
    FIREBASE_DATABASE_URL: str = "http://localhost:9000"
    FIREBASE_AUTH_TOKEN: Optional[str] = None
    FIREBASE_USER_ID: Optional[str] = None

    # ── Cloudinary (object storage) ─────────────────────────────────────────
    CLOUDINARY_BASE_URL: str = "https://api.cloudinary.com/v1_1"
    CLOUDINARY_CLOUD_NAME: str = ""
    CLOUDINARY_UPLOAD_PRESET: str = ""
    MAX_UPLOAD_SIZE_MB: int = 50

    # ── HTTP client ──────────────────────────────────────────────────────────
    HTTP_TIMEOUT_SECONDS: int = 30
    HTTP_UPLOAD_TIMEOUT_SECONDS: int = 300
    HTTP_MAX_REDIRECTS: int = 3

    # ── Dashboard views ──────────────────────────────────────────────────────
    RECENTLY_PLAYED_LIMIT: int = 15
    RECOMMENDED_LIMIT: int = 10
    LIBRARY_RECENT_LIMIT: int = 20

    # ── Rate limiting (uploads) ──────────────────────────────────────────────
    UPLOAD_RATE_LIMIT_REQUESTS: int = 3          # max uploads
    UPLOAD_RATE_LIMIT_WINDOW_SECONDS: int = 60   # per window (seconds)
    PENDING_COVER_MAX_ENTRIES: int = 100
    PENDING_COVER_TTL_SECONDS: int = 600

    @field_validator("FIREBASE_DATABASE_URL", "CLOUDINARY_BASE_URL", mode="before")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return str(v).rstrip("/")

    @property
    def max_upload_size_bytes(self) -> int:
        return self.MAX_UPLOAD_SIZE_MB * 1024 * 1024


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
