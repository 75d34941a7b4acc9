from __future__ import annotations

"""
Medialytics: Analytics aggregation
===================================
Derives per-asset statistics from the view log:

- `total_views`   number of entries
- `unique_ips`    distinct `viewed_by_ip` values
- `views_per_day` entries grouped by UTC calendar day (`YYYY-MM-DD`), sparse

Aggregators
-----------
`InMemoryAnalyticsAggregator` (default) loads **all** entries for the asset
and folds them with `summarize_entries`. `SqlAnalyticsAggregator` returns the
same numbers from grouped `COUNT` queries. Select with `ANALYTICS_BACKEND`.

Caching
-------
Optional process-local TTL cache keyed `media:{id}:analytics`
(`ANALYTICS_CACHE_TTL_SECONDS`, 0 disables). Appending a view for an asset
drops its cached summary via `invalidate_cached_summary`.
"""

from collections import Counter
from datetime import datetime
from typing import Iterable, Optional, Union
from uuid import UUID

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from medialytics.core.cache import TTLMap
from medialytics.core.exceptions import InternalErrorException
from medialytics.repositories.view_log import ViewLogRepositoryProtocol, get_view_log_repository, to_utc
from medialytics.schemas.analytics import AnalyticsSummary, ViewLogEntry
from medialytics.services.media_service import MediaService

_summary_cache = TTLMap(maxsize=4096)


def _cache_key(media_id: UUID) -> str:
    return f"media:{media_id}:analytics"


def invalidate_cached_summary(media_id: UUID, cache: Optional[TTLMap] = None) -> None:
    (cache if cache is not None else _summary_cache).pop(_cache_key(media_id))


def clear_analytics_cache() -> None:
    _summary_cache.clear()


# ─────────────────────────────────────────────────────────────
# 🧮 Pure fold
# ─────────────────────────────────────────────────────────────
def utc_day(ts: datetime) -> str:
    """UTC calendar day of `ts`; naive timestamps are taken as UTC."""
    return to_utc(ts).strftime("%Y-%m-%d")


def summarize_entries(entries: Iterable[ViewLogEntry]) -> AnalyticsSummary:
    total = 0
    ips = set()
    per_day: Counter = Counter()
    for entry in entries:
        total += 1
        ips.add(entry.viewed_by_ip)
        per_day[utc_day(entry.timestamp)] += 1
    return AnalyticsSummary(total_views=total, unique_ips=len(ips), views_per_day=dict(per_day))


# ─────────────────────────────────────────────────────────────
# 🔌 Aggregators
# ─────────────────────────────────────────────────────────────
class AnalyticsAggregator:
    async def summarize(self, media_id: UUID) -> AnalyticsSummary:
        raise NotImplementedError


class InMemoryAnalyticsAggregator(AnalyticsAggregator):
    def __init__(self, view_logs: ViewLogRepositoryProtocol) -> None:
        self.view_logs = view_logs

    async def summarize(self, media_id: UUID) -> AnalyticsSummary:
        entries = await self.view_logs.list_for_media(media_id)
        return summarize_entries(entries)


class SqlAnalyticsAggregator(AnalyticsAggregator):
    def __init__(self, view_logs: ViewLogRepositoryProtocol) -> None:
        self.view_logs = view_logs

    async def summarize(self, media_id: UUID) -> AnalyticsSummary:
        total = await self.view_logs.count_for_media(media_id)
        if total == 0:
            return AnalyticsSummary()
        unique = await self.view_logs.count_distinct_ips(media_id)
        per_day = await self.view_logs.count_per_day(media_id)
        return AnalyticsSummary(total_views=total, unique_ips=unique, views_per_day=per_day)


def build_aggregator(backend: str, db: AsyncSession) -> AnalyticsAggregator:
    view_logs = get_view_log_repository(db)
    if backend == "sql":
        return SqlAnalyticsAggregator(view_logs)
    return InMemoryAnalyticsAggregator(view_logs)


# ─────────────────────────────────────────────────────────────
# 📊 Service
# ─────────────────────────────────────────────────────────────
class AnalyticsService:
    def __init__(
        self,
        db: AsyncSession,
        *,
        aggregator: Optional[AnalyticsAggregator] = None,
        media: Optional[MediaService] = None,
        cache_ttl_seconds: int = 0,
        cache: Optional[TTLMap] = None,
    ) -> None:
        self.db = db
        self.aggregator = aggregator or InMemoryAnalyticsAggregator(get_view_log_repository(db))
        self.media = media or MediaService(db)
        self.cache_ttl_seconds = int(cache_ttl_seconds or 0)
        self.cache = cache if cache is not None else _summary_cache

    async def summarize(self, asset_id: Union[str, UUID]) -> AnalyticsSummary:
        """Summary for one asset. 400 on a bad id, 404 when the asset is absent."""
        media = await self.media.require(asset_id)
        key = _cache_key(media.id)

        if self.cache_ttl_seconds > 0:
            cached = self.cache.get(key)
            if cached is not None:
                logger.debug("[Analytics] cache hit | media_id={}", media.id)
                return cached

        try:
            summary = await self.aggregator.summarize(media.id)
        except SQLAlchemyError:
            logger.exception("[Analytics] aggregation failed | media_id={}", media.id)
            raise InternalErrorException()

        if self.cache_ttl_seconds > 0:
            self.cache.set(key, summary, self.cache_ttl_seconds)
        logger.debug(
            "[Analytics] summary | media_id={} | total={} | unique={}",
            media.id,
            summary.total_views,
            summary.unique_ips,
        )
        return summary
