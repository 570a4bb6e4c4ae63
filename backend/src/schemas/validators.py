"""
Shared validation functions for Pydantic schemas.

Length limits come from settings so they can be tuned per deployment without
touching the schemas.
"""
from collections.abc import Iterable

from pydantic import HttpUrl, TypeAdapter, ValidationError

from core.config import get_settings

_http_url_adapter = TypeAdapter(HttpUrl)


def normalize_tag_titles(titles: Iterable[str] | None) -> list[str]:
    """
    Trim, drop blanks and deduplicate tag titles, keeping first-occurrence order.

    Comparison is case-sensitive: "JS" and "js" are different tags.

    Args:
        titles: Raw tag titles from the caller. None is treated as empty.

    Returns:
        Unique, trimmed, non-blank titles.
    """
    if not titles:
        return []
    # dict preserves insertion order, so it doubles as an ordered set
    return list(dict.fromkeys(t.strip() for t in titles if t.strip()))


def validate_title_length(title: str) -> str:
    """Validate that title doesn't exceed maximum length."""
    settings = get_settings()
    if len(title) > settings.max_title_length:
        raise ValueError(
            f"Title exceeds maximum length of {settings.max_title_length:,} characters "
            f"(got {len(title):,} characters).",
        )
    return title


def validate_description_length(description: str | None) -> str | None:
    """Validate that description doesn't exceed maximum length."""
    settings = get_settings()
    if description is not None and len(description) > settings.max_description_length:
        max_len = settings.max_description_length
        raise ValueError(
            f"Description exceeds maximum length of {max_len:,} characters "
            f"(got {len(description):,} characters).",
        )
    return description


def validate_website_url(url: str) -> str:
    """
    Validate that url is an http(s) URL within the configured length.

    The original string is returned unchanged; HttpUrl would otherwise append
    a trailing slash to bare domains.
    """
    settings = get_settings()
    if len(url) > settings.max_url_length:
        raise ValueError(
            f"URL exceeds maximum length of {settings.max_url_length:,} characters "
            f"(got {len(url):,} characters).",
        )
    try:
        _http_url_adapter.validate_python(url)
    except ValidationError as e:
        raise ValueError(f"Invalid URL: '{url}'") from e
    return url
