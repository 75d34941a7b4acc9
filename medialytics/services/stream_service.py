from __future__ import annotations

"""
Stream link issuance & redemption
=================================
`issue_link` mints a 10-minute stream token bound to an asset's `file_url`,
appends a view log entry for the requesting IP, and returns
`{PUBLIC_BASE_URL}/stream/{token}`.

`redeem` is stateless: any holder may present the token any number of times
until it expires. It never raises; an invalid or expired token yields `None`.
"""

from datetime import datetime, timezone
from typing import Callable, Optional, Union
from uuid import UUID

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from medialytics.core.tokens import TokenService, Valid
from medialytics.repositories.view_log import ViewLogRepositoryProtocol, get_view_log_repository
from medialytics.services.media_service import MediaService
from medialytics.services.view_service import append_view


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def build_stream_url(base_url: str, token: str) -> str:
    return f"{base_url.rstrip('/')}/stream/{token}"


class StreamLinkService:
    def __init__(
        self,
        tokens: TokenService,
        *,
        base_url: str,
        db: Optional[AsyncSession] = None,
        media: Optional[MediaService] = None,
        view_logs: Optional[ViewLogRepositoryProtocol] = None,
        now: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.tokens = tokens
        self.base_url = base_url
        self.db = db
        self.media = media or (MediaService(db) if db is not None else None)
        self.view_logs = view_logs or (get_view_log_repository(db) if db is not None else None)
        self._now = now

    async def issue_link(self, asset_id: Union[str, UUID], client_ip: str) -> str:
        """Mint a stream URL for `asset_id`. 400 on a bad id, 404 when absent."""
        if self.db is None or self.media is None or self.view_logs is None:
            raise RuntimeError("StreamLinkService.issue_link requires a database session")

        media = await self.media.require(asset_id)
        token = self.tokens.issue({"media_id": str(media.id), "file_url": media.file_url})
        await append_view(self.db, self.view_logs, media_id=media.id, client_ip=client_ip, now=self._now)
        logger.info("[Stream] link issued | media_id={} | ip={}", media.id, client_ip)
        return build_stream_url(self.base_url, token)

    def redeem(self, token: str) -> Optional[str]:
        """Return the bound `file_url` while `token` verifies, else `None`."""
        result = self.tokens.verify(token)
        if not isinstance(result, Valid):
            logger.info("[Stream] redemption rejected | reason={}", result.reason)
            return None
        file_url = result.payload.get("file_url")
        if not isinstance(file_url, str) or not file_url:
            logger.info("[Stream] redemption rejected | reason=missing_file_url")
            return None
        logger.debug("[Stream] redeemed | media_id={}", result.payload.get("media_id"))
        return file_url
