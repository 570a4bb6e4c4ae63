"""Pagination metadata shared by list responses."""
import math

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


def page_offset(page: int, limit: int) -> int:
    """Number of rows to skip for a 1-based page."""
    return (page - 1) * limit


def total_pages(total: int, limit: int) -> int:
    """Number of pages needed for `total` rows; zero rows means zero pages."""
    return math.ceil(total / limit)


class PageMeta(BaseModel):
    """Schema for the `meta` block of paginated responses."""

    model_config = ConfigDict(populate_by_name=True, alias_generator=to_camel)

    total: int  # Rows matching the filter (before pagination)
    page: int
    limit: int
    total_pages: int

    @classmethod
    def build(cls, total: int, page: int, limit: int) -> "PageMeta":
        """Build metadata for a page of `limit` rows out of `total`."""
        return cls(
            total=total,
            page=page,
            limit=limit,
            total_pages=total_pages(total, limit),
        )
