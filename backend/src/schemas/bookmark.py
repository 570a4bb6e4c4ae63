"""Pydantic schemas for bookmark endpoints."""
from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from schemas.pagination import PageMeta
from schemas.tag import TagResponse
from schemas.validators import (
    validate_description_length,
    validate_title_length,
    validate_website_url,
)

BookmarkSortBy = Literal["recently-added", "recently-visited", "most-visited"]


class _BookmarkPayload(BaseModel):
    """Fields shared by create and update requests."""

    model_config = ConfigDict(populate_by_name=True)

    title: str = Field(..., min_length=1)
    description: str | None = None
    website_url: str = Field(..., min_length=1, alias="websiteURL")
    tags: list[str] | None = None

    @field_validator("title")
    @classmethod
    def check_title_length(cls, v: str) -> str:
        """Validate title length."""
        return validate_title_length(v)

    @field_validator("description")
    @classmethod
    def check_description_length(cls, v: str | None) -> str | None:
        """Validate description length."""
        return validate_description_length(v)

    @field_validator("website_url")
    @classmethod
    def check_website_url(cls, v: str) -> str:
        """Validate URL format and length."""
        return validate_website_url(v)


class BookmarkCreate(_BookmarkPayload):
    """Schema for creating a new bookmark."""


class BookmarkUpdate(_BookmarkPayload):
    """
    Schema for replacing a bookmark's fields.

    `tags` is tri-state: omitted (or null) leaves the current tags alone,
    `[]` removes every tag, and a non-empty list replaces them.
    """

    @property
    def tags_provided(self) -> bool:
        """True when the request carried a non-null `tags` field."""
        return "tags" in self.model_fields_set and self.tags is not None


class BookmarkResponse(BaseModel):
    """Schema for bookmark responses, with tags resolved."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )

    id: UUID
    title: str
    description: str | None
    website_url: str = Field(alias="websiteURL")
    archived: bool
    pinned: bool
    visited_at: datetime | None
    visited_count: int
    tags: list[TagResponse]
    created_at: datetime
    updated_at: datetime


class BookmarkListResponse(BaseModel):
    """Schema for paginated bookmark list responses."""

    data: list[BookmarkResponse]
    meta: PageMeta
