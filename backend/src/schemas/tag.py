"""Pydantic schemas for tag payloads."""
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from schemas.pagination import PageMeta


class TagResponse(BaseModel):
    """Schema for a tag embedded in a bookmark response."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )

    id: UUID
    title: str
    created_at: datetime
    updated_at: datetime


class TagUsage(BaseModel):
    """Schema for a tag with the number of bookmarks carrying it."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    count: int


class TagUsageListResponse(BaseModel):
    """Schema for the paginated tag-filters response."""

    data: list[TagUsage]
    meta: PageMeta
