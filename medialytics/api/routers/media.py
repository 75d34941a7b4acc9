# medialytics/api/routers/media.py
"""
Media API
=========

POST /media                      create an asset                 (session)
GET  /media/{media_id}           fetch an asset                  (session)
GET  /media/{media_id}/stream-url issue a 10-minute stream link   (public)
POST /media/{media_id}/view      log a view, 1/min per client IP (session)
GET  /media/{media_id}/analytics view statistics                 (session)

Issuing a stream link also appends a view log entry for the caller's IP.
"""

from fastapi import APIRouter, Body, Depends, Request, Response, status

from medialytics.api.deps import (
    get_analytics_service,
    get_media_service,
    get_stream_link_service,
    get_view_ingestion_service,
)
from medialytics.api.http_utils import get_client_ip, set_sensitive_cache
from medialytics.core.config import settings
from medialytics.core.limiter import rate_limit
from medialytics.core.security import get_current_operator
from medialytics.schemas.analytics import AnalyticsSummary
from medialytics.schemas.auth import SessionClaims
from medialytics.schemas.media import MediaCreate, MediaOut, MessageResponse, StreamUrlResponse
from medialytics.services.analytics_service import AnalyticsService
from medialytics.services.media_service import MediaService
from medialytics.services.stream_service import StreamLinkService
from medialytics.services.view_service import ViewIngestionService

router = APIRouter(prefix="/media", tags=["Media"])


# ──────────────────────────────────────────────────────────────
# 🎞️ Assets
# ──────────────────────────────────────────────────────────────
@router.post("", response_model=MediaOut, status_code=status.HTTP_201_CREATED, summary="Create media asset")
async def create_media(
    payload: MediaCreate = Body(...),
    operator: SessionClaims = Depends(get_current_operator),
    media: MediaService = Depends(get_media_service),
) -> MediaOut:
    created = await media.create(payload)
    return MediaOut.model_validate(created)


@router.get("/{media_id}", response_model=MediaOut, summary="Get media asset")
async def get_media(
    media_id: str,
    operator: SessionClaims = Depends(get_current_operator),
    media: MediaService = Depends(get_media_service),
) -> MediaOut:
    return MediaOut.model_validate(await media.require(media_id))


# ──────────────────────────────────────────────────────────────
# 🔗 Stream link
# ──────────────────────────────────────────────────────────────
@router.get("/{media_id}/stream-url", response_model=StreamUrlResponse, summary="Issue a secure stream URL")
async def get_stream_url(
    media_id: str,
    request: Request,
    response: Response,
    streams: StreamLinkService = Depends(get_stream_link_service),
) -> StreamUrlResponse:
    set_sensitive_cache(response)
    url = await streams.issue_link(media_id, get_client_ip(request))
    return StreamUrlResponse(secure_stream_url=url)


# ──────────────────────────────────────────────────────────────
# 👁️ Views & analytics
# ──────────────────────────────────────────────────────────────
@router.post(
    "/{media_id}/view",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Log a view",
)
@rate_limit(settings.VIEW_RATE_LIMIT)
async def log_view(
    media_id: str,
    request: Request,
    response: Response,
    operator: SessionClaims = Depends(get_current_operator),
    views: ViewIngestionService = Depends(get_view_ingestion_service),
) -> MessageResponse:
    """Record one view from the caller's IP.

    Rate limited per client IP (`VIEW_RATE_LIMIT`); the 429 carries
    `Retry-After` and `X-RateLimit-*` headers.
    """
    await views.ingest(media_id, get_client_ip(request))
    return MessageResponse(message="View logged")


@router.get("/{media_id}/analytics", response_model=AnalyticsSummary, summary="View analytics")
async def get_analytics(
    media_id: str,
    operator: SessionClaims = Depends(get_current_operator),
    analytics: AnalyticsService = Depends(get_analytics_service),
) -> AnalyticsSummary:
    return await analytics.summarize(media_id)


__all__ = ["router", "create_media", "get_media", "get_stream_url", "log_view", "get_analytics"]
