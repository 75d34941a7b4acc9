# medialytics/api/deps.py
"""
Service factories for route dependencies.

Each request gets services bound to its own `AsyncSession`. Anything fixed at
startup (token services, analytics backend, cache TTL, public base URL) is
read from `request.app.state`, populated by `create_app`.
"""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from medialytics.core.security import get_stream_tokens
from medialytics.core.tokens import TokenService
from medialytics.db.session import get_async_db
from medialytics.services.analytics_service import AnalyticsService, build_aggregator
from medialytics.services.media_service import MediaService
from medialytics.services.stream_service import StreamLinkService
from medialytics.services.view_service import ViewIngestionService


def get_media_service(db: AsyncSession = Depends(get_async_db)) -> MediaService:
    return MediaService(db)


def get_view_ingestion_service(db: AsyncSession = Depends(get_async_db)) -> ViewIngestionService:
    return ViewIngestionService(db)


def get_analytics_service(request: Request, db: AsyncSession = Depends(get_async_db)) -> AnalyticsService:
    state = request.app.state
    return AnalyticsService(
        db,
        aggregator=build_aggregator(state.analytics_backend, db),
        cache_ttl_seconds=state.analytics_cache_ttl,
    )


def get_stream_link_service(
    request: Request,
    tokens: TokenService = Depends(get_stream_tokens),
    db: AsyncSession = Depends(get_async_db),
) -> StreamLinkService:
    return StreamLinkService(tokens, base_url=request.app.state.public_base_url, db=db)


def get_stream_redeemer(request: Request, tokens: TokenService = Depends(get_stream_tokens)) -> StreamLinkService:
    """Redemption needs no database session."""
    return StreamLinkService(tokens, base_url=request.app.state.public_base_url)


__all__ = [
    "get_media_service",
    "get_view_ingestion_service",
    "get_analytics_service",
    "get_stream_link_service",
    "get_stream_redeemer",
]
