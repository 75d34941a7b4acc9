# medialytics/db/models/__init__.py
"""
Medialytics: ORM model registry.

Importing this package registers every table on `Base.metadata`.
"""

from medialytics.db.base_class import Base

from .user import User
from .media_asset import MediaAsset
from .view_log import MediaViewLog

__all__ = ["Base", "User", "MediaAsset", "MediaViewLog"]
