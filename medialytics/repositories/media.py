from __future__ import annotations

"""Media asset store.

CRUD-only access to `media_assets`. The analytics core relies on `get` and
`exists`; `create` backs `POST /media`.
"""

from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from medialytics.db.models import MediaAsset
from medialytics.schemas.enums import MediaType


class MediaRepositoryProtocol:
    async def create(self, *, title: str, type: MediaType, file_url: str) -> MediaAsset:
        raise NotImplementedError

    async def get(self, media_id: UUID) -> Optional[MediaAsset]:
        raise NotImplementedError

    async def exists(self, media_id: UUID) -> bool:
        raise NotImplementedError


class SqlMediaRepository(MediaRepositoryProtocol):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create(self, *, title: str, type: MediaType, file_url: str) -> MediaAsset:
        media = MediaAsset(title=title, type=type, file_url=file_url)
        self.session.add(media)
        await self.session.flush()
        return media

    async def get(self, media_id: UUID) -> Optional[MediaAsset]:
        return await self.session.get(MediaAsset, media_id)

    async def exists(self, media_id: UUID) -> bool:
        stmt = select(MediaAsset.id).where(MediaAsset.id == media_id).limit(1)
        return (await self.session.execute(stmt)).scalar_one_or_none() is not None


def get_media_repository(session: AsyncSession) -> MediaRepositoryProtocol:
    return SqlMediaRepository(session)
