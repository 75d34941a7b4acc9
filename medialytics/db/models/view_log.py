from __future__ import annotations

"""
👁️ Medialytics: MediaViewLog (append-only view events)
=======================================================

One row per accepted view ingestion and per issued stream link. Rows are
**never updated or deleted**; the repository exposes append and read only.

• `timestamp` is written by the application in UTC.
• Composite index `(media_id, timestamp)` serves the per-asset scan used by
  analytics.
"""

from datetime import datetime, timezone

from sqlalchemy import BigInteger, Column, DateTime, ForeignKey, Index, Integer, String, Uuid
from sqlalchemy.orm import relationship

from medialytics.db.base_class import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MediaViewLog(Base):
    __tablename__ = "media_view_logs"

    # BIGINT on Postgres, INTEGER on SQLite (so rowid autoincrement still applies)
    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    media_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("media_assets.id", ondelete="CASCADE"),
        nullable=False,
    )
    viewed_by_ip = Column(String(64), nullable=False)
    timestamp = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    media = relationship("MediaAsset", back_populates="view_logs", lazy="noload")

    __table_args__ = (
        Index("ix_media_view_logs_media_id_timestamp", "media_id", "timestamp"),
    )
