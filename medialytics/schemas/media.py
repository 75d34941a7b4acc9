# medialytics/schemas/media.py

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from medialytics.schemas.enums import MediaType


class MediaCreate(BaseModel):
    """Body of `POST /media`. Unknown fields are rejected."""

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    title: str = Field(..., min_length=1, max_length=255)
    type: MediaType
    file_url: str = Field(..., min_length=1, max_length=2048)


class MediaOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    type: MediaType
    file_url: str
    created_at: datetime


class StreamUrlResponse(BaseModel):
    secure_stream_url: str


class MessageResponse(BaseModel):
    message: str
