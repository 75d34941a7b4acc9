from __future__ import annotations

"""View log store (append-only).

`media_view_logs` rows are inserted by `append` and read back by the
analytics layer. There is no update or delete operation.

`list_for_media` materializes every entry for an asset (no pagination); the
grouped-count helpers serve the database-side aggregator and return the same
numbers computed in SQL.
"""

from datetime import datetime, timezone
from typing import Dict, List
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from medialytics.db.models import MediaViewLog
from medialytics.schemas.analytics import ViewLogEntry


def to_utc(ts: datetime) -> datetime:
    """Normalize to an aware UTC datetime; naive values are taken as UTC."""
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


class ViewLogRepositoryProtocol:
    async def append(self, *, media_id: UUID, viewed_by_ip: str, timestamp: datetime) -> ViewLogEntry:
        raise NotImplementedError

    async def list_for_media(self, media_id: UUID) -> List[ViewLogEntry]:
        raise NotImplementedError

    async def count_for_media(self, media_id: UUID) -> int:
        raise NotImplementedError

    async def count_distinct_ips(self, media_id: UUID) -> int:
        raise NotImplementedError

    async def count_per_day(self, media_id: UUID) -> Dict[str, int]:
        raise NotImplementedError


class SqlViewLogRepository(ViewLogRepositoryProtocol):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def append(self, *, media_id: UUID, viewed_by_ip: str, timestamp: datetime) -> ViewLogEntry:
        timestamp = to_utc(timestamp)
        row = MediaViewLog(media_id=media_id, viewed_by_ip=viewed_by_ip, timestamp=timestamp)
        self.session.add(row)
        await self.session.flush()
        return ViewLogEntry(media_id=media_id, viewed_by_ip=viewed_by_ip, timestamp=timestamp)

    async def list_for_media(self, media_id: UUID) -> List[ViewLogEntry]:
        stmt = (
            select(MediaViewLog.media_id, MediaViewLog.viewed_by_ip, MediaViewLog.timestamp)
            .where(MediaViewLog.media_id == media_id)
            .order_by(MediaViewLog.id)
        )
        rows = (await self.session.execute(stmt)).all()
        return [
            ViewLogEntry(media_id=r.media_id, viewed_by_ip=r.viewed_by_ip, timestamp=r.timestamp)
            for r in rows
        ]

    async def count_for_media(self, media_id: UUID) -> int:
        stmt = select(func.count(MediaViewLog.id)).where(MediaViewLog.media_id == media_id)
        return int((await self.session.execute(stmt)).scalar_one())

    async def count_distinct_ips(self, media_id: UUID) -> int:
        stmt = select(func.count(func.distinct(MediaViewLog.viewed_by_ip))).where(
            MediaViewLog.media_id == media_id
        )
        return int((await self.session.execute(stmt)).scalar_one())

    async def count_per_day(self, media_id: UUID) -> Dict[str, int]:
        day = self._utc_day_expr()
        stmt = (
            select(day.label("day"), func.count(MediaViewLog.id))
            .where(MediaViewLog.media_id == media_id)
            .group_by(day)
        )
        rows = (await self.session.execute(stmt)).all()
        return {str(d)[:10]: int(n) for d, n in rows}

    def _utc_day_expr(self):
        # SQLite stores UTC wall time already; Postgres needs an explicit zone.
        dialect = self.session.get_bind().dialect.name
        if dialect == "postgresql":
            return func.date(func.timezone("UTC", MediaViewLog.timestamp))
        return func.date(MediaViewLog.timestamp)


def get_view_log_repository(session: AsyncSession) -> ViewLogRepositoryProtocol:
    return SqlViewLogRepository(session)
