# sportshub/core/config.py
from __future__ import annotations

"""
# SportsHub — Centralized Configuration (Pydantic v2)

Single `settings` object with strongly-typed, environment-driven config.

## Goals
- Safe defaults for local/dev; storage credentials are optional so imports
  never crash (the S3 client degrades to a disabled variant instead).
- Retention windows, listing page size and sweep cadence are configuration,
  not constants buried in jobs.
- CSV → list helpers for multi-valued env vars.

## Usage
    from sportshub.core.config import settings
"""

import logging
from typing import List, Literal, Optional

from dotenv import load_dotenv
from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

log = logging.getLogger(__name__)
load_dotenv()  # harmless in prod; convenient in dev


# ─────────────────────────────────────────────────────────────
# Small helpers
# ─────────────────────────────────────────────────────────────
def _split_csv(v: str | None) -> list[str]:
    """Split a comma-separated string into a trimmed list (empty-safe)."""
    if not v:
        return []
    return [s.strip() for s in str(v).split(",") if s and s.strip()]


def _normalize_url_like(v: str | None, *, require_scheme: bool = True) -> str:
    """Normalize to a string URL without trailing slash."""
    s = (v or "").strip()
    if not s:
        return ""
    if require_scheme and not (s.startswith("http://") or s.startswith("https://")):
        s = "https://" + s
    return s.rstrip("/")


# ─────────────────────────────────────────────────────────────
# Settings
# ─────────────────────────────────────────────────────────────
class Settings(BaseSettings):
    """
    Global application settings sourced from environment.

    Storage:
        - Bucket + access keys are optional; without them the store client is
          the disabled variant (uploads fail loudly, reclamation reports zero).

    Lifecycle:
        - `MEDIA_RETENTION_DAYS` is the soft-delete → purge window.
        - `S3_LIST_PAGE_SIZE` bounds one LIST/DELETE batch (S3 caps both at 1000).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # don't crash on unknown keys
    )

    # ── App meta ──────────────────────────────────────────────
    PROJECT_NAME: str = "SportsHub Media Lifecycle"
    VERSION: str = "1.0.0"
    ENV: Literal["development", "staging", "production"] = "development"
    APP_DEBUG: bool = False

    # ── Logging ───────────────────────────────────────────────
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False
    LOG_FILE: Optional[str] = None  # e.g. logs/worker.log
    LOG_ROTATION: str = "10 MB"

    # ── Database (PostgreSQL) ─────────────────────────────────
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: SecretStr = SecretStr("postgres")
    POSTGRES_DB: str = "sportshub"

    # ── Redis (transcoding outbox) ────────────────────────────
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_CONNECT_ATTEMPTS: int = Field(5, ge=1, le=20)
    REDIS_SOCKET_TIMEOUT: float = 3.0
    TRANSCODE_QUEUE_KEY: str = "media:transcode:queue"
    TRANSCODE_DEDUPE_TTL_SECONDS: int = Field(24 * 60 * 60, ge=60)

    # ── Object store (S3) ─────────────────────────────────────
    AWS_ACCESS_KEY_ID: Optional[str] = None
    AWS_SECRET_ACCESS_KEY: Optional[SecretStr] = None
    AWS_SESSION_TOKEN: Optional[SecretStr] = None
    AWS_REGION: str = "ap-south-1"
    AWS_BUCKET_NAME: Optional[str] = None
    AWS_S3_ENDPOINT_URL: Optional[str] = None  # LocalStack / MinIO
    STORE_HOST_MARKER: str = ".amazonaws.com/"
    STORE_PUBLIC_BASE_URL: Optional[str] = None  # overrides https://{bucket}.s3.{region}.amazonaws.com

    # ── Media lifecycle ───────────────────────────────────────
    TEMP_SEGMENT: str = "temp"
    S3_LIST_PAGE_SIZE: int = Field(1000, ge=1, le=1000)
    MEDIA_RETENTION_DAYS: int = Field(365, ge=1)
    MEDIA_ITEM_RETENTION_DAYS: int = Field(180, ge=1)
    MEDIA_RECLAIM_CONCURRENCY: int = Field(4, ge=1, le=32)
    MEDIA_FOLDER_NAME_TEMPLATES: str = "{id}"  # CSV, e.g. "{id},playasport-{id}"
    STORE_RETRY_ATTEMPTS: int = Field(3, ge=1, le=10)
    STORE_RETRY_BASE_DELAY: float = 0.25
    STORE_RETRY_MAX_DELAY: float = 2.0

    # ── Schedulers ────────────────────────────────────────────
    RETENTION_SWEEP_SCHEDULER: bool = True
    RETENTION_SWEEP_CRON: str = "0 3 1 * *"  # monthly, 1st at 03:00 UTC
    MEDIA_ITEM_CLEANUP_SCHEDULER: bool = True
    MEDIA_ITEM_CLEANUP_CRON: str = "0 2 * * *"  # daily at 02:00 UTC

    # ── Validators / normalizers ──────────────────────────────
    @field_validator("STORE_PUBLIC_BASE_URL", mode="before")
    @classmethod
    def _normalize_public_base(cls, v: str | None) -> str | None:
        s = (v or "").strip()
        if not s:
            return None
        return _normalize_url_like(s)

    @field_validator("TEMP_SEGMENT", mode="before")
    @classmethod
    def _strip_temp_segment(cls, v: str | None) -> str:
        s = str(v or "").strip().strip("/")
        return s or "temp"

    # ── Derived / convenience properties ─────────────────────
    @property
    def is_production(self) -> bool:
        return self.ENV.lower() == "production"

    @property
    def DATABASE_URL(self) -> str:
        """Sync DSN."""
        return (
            f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD.get_secret_value()}"
            f"@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    @property
    def ASYNC_DATABASE_URL(self) -> str:
        """Async SQLAlchemy DSN."""
        return self.DATABASE_URL.replace("postgresql://", "postgresql+asyncpg://")

    @property
    def folder_name_templates(self) -> List[str]:
        """Catch-all folder naming conventions; always at least `{id}`."""
        return _split_csv(self.MEDIA_FOLDER_NAME_TEMPLATES) or ["{id}"]

    @property
    def store_configured(self) -> bool:
        """True when bucket and explicit credentials are all present."""
        return bool(self.AWS_BUCKET_NAME and self.AWS_ACCESS_KEY_ID and self.AWS_SECRET_ACCESS_KEY)

    @property
    def store_base_url(self) -> str:
        """
        Canonical public base URL for media (no trailing slash).
        Examples:
          bucket=media, region=ap-south-1 -> 'https://media.s3.ap-south-1.amazonaws.com'
          STORE_PUBLIC_BASE_URL=cdn.example.com -> 'https://cdn.example.com'
        """
        if self.STORE_PUBLIC_BASE_URL:
            return self.STORE_PUBLIC_BASE_URL
        return f"https://{self.AWS_BUCKET_NAME or 'unconfigured'}.s3.{self.AWS_REGION}.amazonaws.com"


# Singleton instance
settings = Settings()
