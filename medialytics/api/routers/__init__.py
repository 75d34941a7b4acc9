"""
Medialytics router aggregator.

    from medialytics.api.routers import router
    app.include_router(router)

Auth and rate limits live in the child routers.
"""

from fastapi import APIRouter

from .auth import router as auth_router
from .media import router as media_router
from .stream import router as stream_router


def build_router() -> APIRouter:
    """Compose auth, media and stream routes at the root path."""
    root = APIRouter()
    root.include_router(auth_router)
    root.include_router(media_router)
    root.include_router(stream_router)
    return root


router = build_router()

__all__ = ["router", "build_router", "auth_router", "media_router", "stream_router"]
