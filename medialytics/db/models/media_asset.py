from __future__ import annotations

"""
🗂️ Medialytics: MediaAsset
===========================

A registered media item: identifying metadata plus a playable location
(`file_url`). Rows are written once by `POST /media` and only read afterwards;
the analytics core depends on "fetch by id" / "exists by id".

Relationships
-------------
• `MediaAsset.view_logs`  ↔  `MediaViewLog.media`
"""

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import CheckConstraint, Column, DateTime, Enum as SAEnum, String, Text, Uuid
from sqlalchemy.orm import relationship

from medialytics.db.base_class import Base
from medialytics.schemas.enums import MediaType


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MediaAsset(Base):
    """Media metadata; immutable from the analytics core's point of view."""

    __tablename__ = "media_assets"

    # ── Identity ──────────────────────────────────────────────
    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)

    # ── Metadata ──────────────────────────────────────────────
    title = Column(String(255), nullable=False)
    type = Column(
        SAEnum(MediaType, name="media_type", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    file_url = Column(Text, nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    # ── Relationships ─────────────────────────────────────────
    view_logs = relationship(
        "MediaViewLog",
        back_populates="media",
        lazy="noload",
        passive_deletes=True,
    )

    __table_args__ = (
        CheckConstraint("length(trim(title)) > 0", name="title_not_blank"),
        CheckConstraint("length(trim(file_url)) > 0", name="file_url_not_blank"),
    )
