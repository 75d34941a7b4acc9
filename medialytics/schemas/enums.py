# medialytics/schemas/enums.py
from enum import Enum


class MediaType(str, Enum):
    """Kinds of media an asset can point at."""

    video = "video"
    audio = "audio"
