# medialytics/core/config.py
from __future__ import annotations

"""
# Medialytics: Centralized Configuration (Pydantic v2)

Single `settings` object with strongly-typed, environment-driven config.

## Goals
- Safe defaults for local/dev (SQLite file DB, in-memory rate limit storage).
- Explicit, **separate** secrets for session tokens and stream tokens so that a
  leak of one never grants the other's capability.
- Token TTLs are fixed policy constants (see `medialytics.core.tokens`), not settings.

## Usage
    from medialytics.core.config import settings
"""

from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import AnyHttpUrl, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()  # harmless in prod; convenient in dev


# ─────────────────────────────────────────────────────────────
# Small helpers
# ─────────────────────────────────────────────────────────────
def _normalize_url_like(v: str | None) -> str:
    """Normalize to a string URL without trailing slash."""
    s = (v or "").strip()
    if not s:
        return ""
    if not (s.startswith("http://") or s.startswith("https://")):
        s = "http://" + s
    return s.rstrip("/")


# ─────────────────────────────────────────────────────────────
# Settings
# ─────────────────────────────────────────────────────────────
class Settings(BaseSettings):
    """
    Global application settings sourced from environment.

    Security:
        - `JWT_SECRET_KEY` signs session tokens, `STREAM_TOKEN_SECRET` signs
          stream links. Both are required.

    Notes:
        - `PUBLIC_BASE_URL` is the prefix of issued `secure_stream_url`s.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # don't crash on unknown keys
    )

    # ── App meta ──────────────────────────────────────────────
    PROJECT_NAME: str = "Medialytics API"
    VERSION: str = "1.0.0"
    ENV: Literal["development", "staging", "production", "test"] = "development"
    ENABLE_DOCS: bool = True

    # ── Security / tokens ─────────────────────────────────────
    JWT_SECRET_KEY: SecretStr = Field(...)
    STREAM_TOKEN_SECRET: SecretStr = Field(...)
    JWT_ALGORITHM: Literal["HS256", "HS384", "HS512"] = "HS256"

    # ── Database ──────────────────────────────────────────────
    DATABASE_URL: str = "sqlite+aiosqlite:///./medialytics.db"
    DB_AUTO_CREATE: bool = True  # create tables on startup (no migrations)
    DB_ECHO: bool = False

    # ── Public URLs ───────────────────────────────────────────
    PUBLIC_BASE_URL: AnyHttpUrl = "http://localhost:8000"

    # ── Rate limiting (SlowAPI / limits) ──────────────────────
    RATE_LIMIT_ENABLED: bool = True
    RATELIMIT_STORAGE_URI: Optional[str] = None  # e.g. "redis://localhost:6379/1"
    RATELIMIT_STRATEGY: Literal["fixed-window", "moving-window"] = "moving-window"
    VIEW_RATE_LIMIT: str = "1/minute"
    TRUST_FORWARD_HEADERS: bool = False

    # ── Logging (loguru) ──────────────────────────────────────
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False
    LOG_TO_FILE: bool = False
    LOG_DIR: str = "logs"
    LOG_FILE: str = "medialytics.log"
    LOG_ROTATION: str = "10 MB"

    # ── Analytics ─────────────────────────────────────────────
    ANALYTICS_BACKEND: Literal["memory", "sql"] = "memory"
    ANALYTICS_CACHE_TTL_SECONDS: int = Field(0, ge=0, le=24 * 60 * 60)  # 0 → disabled

    # ── Validators / normalizers ──────────────────────────────
    @field_validator("VIEW_RATE_LIMIT", mode="before")
    @classmethod
    def _strip_limit(cls, v: str) -> str:
        return str(v or "1/minute").strip()

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def _upper_level(cls, v: str) -> str:
        return str(v or "INFO").strip().upper()

    # ── Derived / convenience properties ─────────────────────
    @property
    def ratelimit_storage(self) -> str:
        """Storage URI for SlowAPI/limits; in-memory when unset."""
        return (self.RATELIMIT_STORAGE_URI or "").strip() or "memory://"

    @property
    def public_base_url_str(self) -> str:
        """`PUBLIC_BASE_URL` as a plain string without trailing slash."""
        return _normalize_url_like(str(self.PUBLIC_BASE_URL))


# Singleton instance
settings = Settings()
