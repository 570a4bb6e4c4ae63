"""SQLAlchemy models."""
from models.base import Base, TimestampMixin, UUIDv7Mixin
from models.tag import Tag, bookmark_tags  # Must be before bookmark due to import
from models.bookmark import Bookmark

__all__ = [
    "Base",
    "Bookmark",
    "Tag",
    "TimestampMixin",
    "UUIDv7Mixin",
    "bookmark_tags",
]
