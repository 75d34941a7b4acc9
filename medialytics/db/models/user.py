from __future__ import annotations

"""
👤 Medialytics: User (operator accounts)
=========================================

Minimal credential record for operators who manage assets and read analytics.

• **Case-insensitive uniqueness** for email: emails are normalized to
  lowercase before insert, and a UNIQUE constraint backs the duplicate check.
• Only the bcrypt hash is stored, never the plaintext password.
"""

from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy import CheckConstraint, Column, DateTime, String, Uuid

from medialytics.db.base_class import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid4)
    email = Column(String(320), nullable=False, unique=True, index=True)
    hashed_password = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    __table_args__ = (
        CheckConstraint("length(trim(email)) > 0", name="email_not_blank"),
    )
