from __future__ import annotations

"""
Media asset service
===================
Thin orchestration over the media repository:

- `parse_media_id` turns a path segment into a UUID (**400** when malformed),
  checked before any store access.
- `MediaService.require` resolves an asset or raises **404**; every
  view/analytics/stream operation goes through it first.
- Store failures surface as `InternalErrorException` (generic **500**).
"""

from typing import Union
from uuid import UUID

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from medialytics.core.exceptions import InternalErrorException, NotFoundException, ValidationException
from medialytics.db.models import MediaAsset
from medialytics.repositories.media import MediaRepositoryProtocol, get_media_repository
from medialytics.schemas.media import MediaCreate


def parse_media_id(value: Union[str, UUID]) -> UUID:
    """Parse a media id or raise **400 Invalid media ID**."""
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value).strip())
    except (ValueError, TypeError, AttributeError):
        raise ValidationException("Invalid media ID")


class MediaService:
    def __init__(self, db: AsyncSession, repo: MediaRepositoryProtocol | None = None) -> None:
        self.db = db
        self.repo = repo or get_media_repository(db)

    async def create(self, payload: MediaCreate) -> MediaAsset:
        try:
            media = await self.repo.create(title=payload.title, type=payload.type, file_url=payload.file_url)
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            logger.exception("[Media] create failed | title={}", payload.title)
            raise InternalErrorException()
        logger.info("[Media] created | media_id={} | type={}", media.id, payload.type.value)
        return media

    async def require(self, media_id: Union[str, UUID]) -> MediaAsset:
        """Return the asset for `media_id`; 400 on a bad id, 404 when absent."""
        mid = parse_media_id(media_id)
        try:
            media = await self.repo.get(mid)
        except SQLAlchemyError:
            logger.exception("[Media] lookup failed | media_id={}", mid)
            raise InternalErrorException()
        if media is None:
            raise NotFoundException("Media not found")
        return media
