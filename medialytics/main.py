# medialytics/main.py
from __future__ import annotations

"""
# Medialytics API: Application Entrypoint (FastAPI)

ASGI application factory and lifecycle.

## Wiring
- Middleware: request id (correlation + loguru context).
- Exception handlers: one JSON error shape, 429 with rate-limit headers.
- Rate limiter: SlowAPI instance on `app.state.limiter`.
- Token services: `app.state.session_tokens` / `app.state.stream_tokens`,
  built once from the settings' two independent secrets.
- Analytics: backend (`memory` | `sql`) and cache TTL on `app.state`.

## Probes
- `/healthz`: liveness (process up).
- `/readyz`: readiness (quick DB check).
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional
import os

from fastapi import FastAPI
from loguru import logger
from starlette.responses import JSONResponse

from medialytics.api.routers import router as api_router
from medialytics.core.config import Settings, settings
from medialytics.core.exception_handlers import install_exception_handlers
from medialytics.core.limiter import install_rate_limiter
from medialytics.core.logger import configure_logging
from medialytics.core.tokens import build_session_token_service, build_stream_token_service
from medialytics.db.session import async_engine, db_healthcheck, init_models
from medialytics.middleware.request_id import RequestIDMiddleware


# ─────────────────────────────────────────────────────────────────────────────
# 🔄 Lifespan: startup & shutdown
# ─────────────────────────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Startup:
        - Create tables when `DB_AUTO_CREATE` is on (no migrations).

    Shutdown:
        - Dispose the DB async engine.
    """
    cfg: Settings = app.state.settings
    logger.info("✅ {} starting up | env={}", cfg.PROJECT_NAME, cfg.ENV)
    if cfg.DB_AUTO_CREATE:
        await init_models(async_engine)
        logger.info("🗄️ Database tables ensured")

    try:
        yield
    finally:
        try:
            await async_engine.dispose()
            logger.info("🛑 Database engine disposed")
        except Exception:
            logger.exception("Error disposing DB engine")
        logger.info("🛑 {} shutting down", cfg.PROJECT_NAME)


# ─────────────────────────────────────────────────────────────────────────────
# 🏗️ App factory
# ─────────────────────────────────────────────────────────────────────────────
def create_app(cfg: Optional[Settings] = None) -> FastAPI:
    """
    Build and configure the FastAPI app instance.

    Args:
        cfg: settings to wire from; defaults to the module-level `settings`.
            Tests pass their own to use per-test secrets. Rate-limit fields
            (`RATE_LIMIT_ENABLED`, `RATELIMIT_*`, `VIEW_RATE_LIMIT`) are
            process-wide and only reported when they differ.
    """
    cfg = cfg or settings
    configure_logging(cfg)
    docs_url = "/docs" if cfg.ENABLE_DOCS else None
    redoc_url = "/redoc" if cfg.ENABLE_DOCS else None
    openapi_url = "/openapi.json" if cfg.ENABLE_DOCS else None

    app = FastAPI(
        title=cfg.PROJECT_NAME,
        version=cfg.VERSION,
        docs_url=docs_url,
        redoc_url=redoc_url,
        openapi_url=openapi_url,
        lifespan=lifespan,
    )

    # ── Immutable startup state ─────────────────────────────────────────────
    app.state.settings = cfg
    app.state.session_tokens = build_session_token_service(cfg)
    app.state.stream_tokens = build_stream_token_service(cfg)
    app.state.public_base_url = cfg.public_base_url_str
    app.state.analytics_backend = cfg.ANALYTICS_BACKEND
    app.state.analytics_cache_ttl = cfg.ANALYTICS_CACHE_TTL_SECONDS

    # ── Middleware / handlers / limiter ─────────────────────────────────────
    app.add_middleware(RequestIDMiddleware)
    install_exception_handlers(app)
    install_rate_limiter(app, cfg=cfg)

    # ── Routers ─────────────────────────────────────────────────────────────
    app.include_router(api_router)

    # ── Meta endpoints ──────────────────────────────────────────────────────
    @app.get("/healthz", tags=["meta"])
    async def healthz() -> dict[str, bool]:
        """Liveness probe: `{"ok": true}` while the process is responsive."""
        return {"ok": True}

    @app.get("/readyz", tags=["meta"])
    async def readyz() -> dict[str, object]:
        """Readiness probe with a quick `SELECT 1`."""
        db_ok = await db_healthcheck(async_engine)
        return {"ready": db_ok, "checks": {"db": db_ok}}

    @app.get("/", include_in_schema=False)
    async def root() -> JSONResponse:
        return JSONResponse({"name": cfg.PROJECT_NAME, "docs": app.docs_url or "", "version": cfg.VERSION})

    return app


# ─────────────────────────────────────────────────────────────────────────────
# 🚀 Module-level ASGI app for Uvicorn
# ─────────────────────────────────────────────────────────────────────────────
app = create_app()
__all__ = ["create_app", "app"]


# Local dev runner (prefer: `uvicorn medialytics.main:app --reload`)
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "medialytics.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8000")),
        reload=os.getenv("RELOAD", "1") == "1",
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )
