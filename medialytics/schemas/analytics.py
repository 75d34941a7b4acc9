# medialytics/schemas/analytics.py

from datetime import datetime
from typing import Dict
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ViewLogEntry(BaseModel):
    """Read model of one stored view event."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    media_id: UUID
    viewed_by_ip: str
    timestamp: datetime


class AnalyticsSummary(BaseModel):
    """Derived per-asset statistics; recomputed from the view log."""

    total_views: int = Field(0, ge=0)
    unique_ips: int = Field(0, ge=0)
    views_per_day: Dict[str, int] = Field(default_factory=dict)
