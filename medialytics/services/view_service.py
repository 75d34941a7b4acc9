from __future__ import annotations

"""
View ingestion
==============
Records one view event for an existing asset.

Order of checks: id format (400) → asset exists (404) → append + commit.
Nothing is written on any failure path. Per-client rate limiting is applied
by the HTTP route (SlowAPI), before this service runs.
"""

from datetime import datetime, timezone
from typing import Callable, Optional, Union
from uuid import UUID

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from medialytics.core.exceptions import InternalErrorException
from medialytics.repositories.view_log import ViewLogRepositoryProtocol, get_view_log_repository
from medialytics.schemas.analytics import ViewLogEntry
from medialytics.services.analytics_service import invalidate_cached_summary
from medialytics.services.media_service import MediaService


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


async def append_view(
    db: AsyncSession,
    repo: ViewLogRepositoryProtocol,
    *,
    media_id: UUID,
    client_ip: str,
    now: Callable[[], datetime] = _utcnow,
) -> ViewLogEntry:
    """Append and commit a single view log entry (own transaction)."""
    try:
        entry = await repo.append(media_id=media_id, viewed_by_ip=client_ip, timestamp=now())
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        logger.exception("[Views] append failed | media_id={} | ip={}", media_id, client_ip)
        raise InternalErrorException()
    invalidate_cached_summary(media_id)
    return entry


class ViewIngestionService:
    def __init__(
        self,
        db: AsyncSession,
        *,
        media: Optional[MediaService] = None,
        view_logs: Optional[ViewLogRepositoryProtocol] = None,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.db = db
        self.media = media or MediaService(db)
        self.view_logs = view_logs or get_view_log_repository(db)
        self._now = now

    async def ingest(self, asset_id: Union[str, UUID], client_ip: str) -> ViewLogEntry:
        """Validate `asset_id` and record a view from `client_ip`.

        Raises
        ------
        ValidationException   400, malformed id
        NotFoundException     404, unknown asset
        InternalErrorException 500, store failure
        """
        media = await self.media.require(asset_id)
        entry = await append_view(self.db, self.view_logs, media_id=media.id, client_ip=client_ip, now=self._now)
        logger.info("[Views] logged | media_id={} | ip={}", media.id, client_ip)
        return entry
