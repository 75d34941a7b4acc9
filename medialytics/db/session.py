# medialytics/db/session.py
from __future__ import annotations

"""
Medialytics: Database Engine & Session Dependencies

- Async engine/session for FastAPI & tests (SQLAlchemy 2.0 asyncio).
- SQLite (aiosqlite) by default; PostgreSQL (asyncpg) when `DATABASE_URL`
  points at it. Pool sizing only applies to server databases.
"""

from typing import AsyncGenerator

from loguru import logger
from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from medialytics.core.config import settings
from medialytics.db.models import Base


# Pool knobs (server databases only)
_POOL_PRE_PING = True
_POOL_RECYCLE = 1800
_POOL_TIMEOUT = 30
_POOL_SIZE = 10
_MAX_OVERFLOW = 20


def _derive_async_url(url: str) -> str:
    """Convert a sync URL to its async driver variant if needed."""
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("sqlite://") and "+aiosqlite" not in url:
        return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return url


def _enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, _record):  # pragma: no cover - driver hook
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def build_engine(url: str, **kwargs) -> AsyncEngine:
    """Create an async engine with sane defaults for the target backend."""
    async_url = _derive_async_url(url)
    options = {"echo": settings.DB_ECHO, "future": True}
    if not async_url.startswith("sqlite"):
        options.update(
            pool_pre_ping=_POOL_PRE_PING,
            pool_recycle=_POOL_RECYCLE,
            pool_size=_POOL_SIZE,
            max_overflow=_MAX_OVERFLOW,
            pool_timeout=_POOL_TIMEOUT,
        )
    options.update(kwargs)
    engine = create_async_engine(async_url, **options)
    if async_url.startswith("sqlite"):
        _enable_sqlite_foreign_keys(engine)
    return engine


def build_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


# ─────────────────────────────────────────────────────────────
# ⚡ ASYNC ENGINE: used by the app
# ─────────────────────────────────────────────────────────────
async_engine: AsyncEngine = build_engine(settings.DATABASE_URL)
async_session_maker = build_session_maker(async_engine)


async def get_async_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency that yields an async SQLAlchemy session."""
    async with async_session_maker() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def init_models(engine: AsyncEngine = async_engine) -> None:
    """Create all tables (idempotent). Used at startup and by tests."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def db_healthcheck(engine: AsyncEngine = async_engine) -> bool:
    """Quick SELECT 1 to verify DB connectivity (used by /readyz)."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except Exception:
        logger.exception("DB healthcheck failed")
        return False


__all__ = [
    "async_engine",
    "async_session_maker",
    "build_engine",
    "build_session_maker",
    "get_async_db",
    "init_models",
    "db_healthcheck",
]
