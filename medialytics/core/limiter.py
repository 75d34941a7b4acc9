from __future__ import annotations

"""
Medialytics: HTTP Rate Limiting (SlowAPI)
==========================================

Highlights
----------
- **Per-client-IP** keying (`ip:<addr>`); the caller's identity is not part
  of the key, so one operator behind two IPs gets two budgets.
- **Backends**: Redis via `RATELIMIT_STORAGE_URI` or in-memory fallback. The
  `limits` storages increment atomically per hit, so two concurrent requests
  cannot both pass a `1/minute` budget.
- **429 contract**: `RateLimitExceeded` is rendered by
  `medialytics.core.exception_handlers.rate_limit_exceeded_handler` with
  `Retry-After` and `X-RateLimit-*` headers.

Settings (process-wide, read once at import)
----------------------------------------
RATE_LIMIT_ENABLED       default: true
RATELIMIT_STORAGE_URI    default: "" (falls back to "memory://")
RATELIMIT_STRATEGY       default: "moving-window"
VIEW_RATE_LIMIT          default: "1/minute"

Usage
-----
    from medialytics.core.limiter import install_rate_limiter, rate_limit

    app = FastAPI()
    install_rate_limiter(app)

    @router.post("/{media_id}/view")
    @rate_limit(settings.VIEW_RATE_LIMIT)
    async def log_view(request: Request, response: Response): ...
"""

from typing import Callable, List, Optional

from fastapi import FastAPI
from loguru import logger
from slowapi import Limiter
from starlette.requests import Request

from medialytics.api.http_utils import get_client_ip
from medialytics.core.config import Settings, settings


# ──────────────────────────────────────────────────────────────
# 🧠 Keying
# ──────────────────────────────────────────────────────────────
def get_client_ip_key(request: Request) -> str:
    """Limiter key for a request: `ip:<addr>`."""
    return f"ip:{get_client_ip(request)}"


# ──────────────────────────────────────────────────────────────
# 🧰 Limiter instance (Redis / memory)
# ──────────────────────────────────────────────────────────────
def _make_limiter() -> Limiter:
    storage_uri = settings.ratelimit_storage
    limiter = Limiter(
        key_func=get_client_ip_key,
        default_limits=[],
        headers_enabled=True,
        storage_uri=storage_uri,
        strategy=settings.RATELIMIT_STRATEGY,
        key_prefix="medialytics",
        enabled=settings.RATE_LIMIT_ENABLED,
    )
    logger.info(
        "RateLimiter ready | enabled={} | view={} | storage={} | strategy={}",
        settings.RATE_LIMIT_ENABLED,
        settings.VIEW_RATE_LIMIT,
        storage_uri,
        settings.RATELIMIT_STRATEGY,
    )
    return limiter


limiter: Limiter = _make_limiter()


# ──────────────────────────────────────────────────────────────
# 🎛 Decorators
# ──────────────────────────────────────────────────────────────
def _chain(decorators: List[Callable]) -> Callable:
    def _apply(fn: Callable) -> Callable:
        for deco in reversed(decorators):
            fn = deco(fn)
        return fn
    return _apply


def rate_limit(*limits: str) -> Callable:
    """
    Apply per-route limits.

    The decorated endpoint must accept `request: Request` and
    `response: Response` (SlowAPI injects the `X-RateLimit-*` headers there).

    Examples
    --------
    @rate_limit("1/minute")
    @rate_limit("5/second", "100/minute")
    """
    return _chain([limiter.limit(limit_value) for limit_value in limits])


def reset_rate_limits() -> None:
    """Drop every counter in the limiter storage (tests, admin tooling)."""
    try:
        limiter.reset()
    except Exception as e:
        logger.warning("[RateLimit] reset failed | err={}", e)


# ──────────────────────────────────────────────────────────────
# 🔧 Installer
# ──────────────────────────────────────────────────────────────
_PROCESS_WIDE_FIELDS = (
    "RATE_LIMIT_ENABLED",
    "RATELIMIT_STORAGE_URI",
    "RATELIMIT_STRATEGY",
    "VIEW_RATE_LIMIT",
)


def ignored_limiter_settings(cfg: Settings) -> List[str]:
    """Fields of `cfg` that differ from the process settings the limiter was built with."""
    return [name for name in _PROCESS_WIDE_FIELDS if getattr(cfg, name) != getattr(settings, name)]


def install_rate_limiter(
    app: FastAPI,
    *,
    cfg: Optional[Settings] = None,
    instance: Optional[Limiter] = None,
) -> List[str]:
    """
    Expose the limiter on `app.state` (SlowAPI looks it up there when
    injecting headers). Limits are applied by the route decorators.

    The limiter and its route limits are built once per process from the
    environment. Per-app values of those fields are not applied; they are
    reported (and returned) instead.
    """
    app.state.limiter = instance or limiter
    ignored = ignored_limiter_settings(cfg) if cfg is not None else []
    if ignored:
        logger.warning("[RateLimit] per-app settings ignored (process-wide) | fields={}", ",".join(ignored))
    if not settings.RATE_LIMIT_ENABLED:
        logger.info("RateLimiter disabled by settings; routes are not limited")
    return ignored


__all__ = [
    "limiter",
    "get_client_ip_key",
    "rate_limit",
    "reset_rate_limits",
    "install_rate_limiter",
    "ignored_limiter_settings",
]
