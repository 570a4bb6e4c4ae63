"""Service layer for bookmark CRUD operations."""
import logging
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.sql.elements import ColumnElement

from models.base import utcnow
from models.bookmark import Bookmark
from schemas.bookmark import BookmarkCreate, BookmarkSortBy, BookmarkUpdate
from schemas.pagination import page_offset
from services.exceptions import BookmarkNotFoundError, InvalidStateError
from services.tag_service import get_or_create_tags, set_bookmark_tags
from services.utils import escape_ilike

logger = logging.getLogger(__name__)


async def _refresh_with_tags(db: AsyncSession, bookmark: Bookmark) -> None:
    """Refresh bookmark and eagerly load the tags relationship."""
    await db.refresh(bookmark)
    await db.refresh(bookmark, attribute_names=["tags"])


async def _get_bookmark_or_raise(db: AsyncSession, bookmark_id: UUID) -> Bookmark:
    bookmark = await get_bookmark(db, bookmark_id)
    if bookmark is None:
        raise BookmarkNotFoundError(bookmark_id)
    return bookmark


async def create_bookmark(
    db: AsyncSession,
    data: BookmarkCreate,
) -> Bookmark:
    """
    Create a new bookmark and link its tags.

    Tags are normalized, missing ones created, existing ones reused.

    Args:
        db: Database session.
        data: Bookmark creation data.

    Returns:
        The created bookmark with tags loaded.

    Note:
        Does not commit. Caller (session generator) handles commit at request end,
        so the bookmark and its tag links are persisted together or not at all.
    """
    bookmark = Bookmark(
        title=data.title,
        description=data.description or None,
        website_url=data.website_url,
    )
    bookmark.tags = await get_or_create_tags(db, data.tags)
    db.add(bookmark)
    await db.flush()
    await _refresh_with_tags(db, bookmark)
    logger.info("Created bookmark %s with %d tag(s)", bookmark.id, len(bookmark.tags))
    return bookmark


async def get_bookmark(
    db: AsyncSession,
    bookmark_id: UUID,
) -> Bookmark | None:
    """
    Get a bookmark by ID with its tags loaded.

    Args:
        db: Database session.
        bookmark_id: ID of the bookmark to retrieve.

    Returns:
        The bookmark if found, None otherwise.
    """
    result = await db.execute(
        select(Bookmark)
        .options(selectinload(Bookmark.tags))
        .where(Bookmark.id == bookmark_id),
    )
    return result.scalar_one_or_none()


def _sort_columns(sort_by: BookmarkSortBy) -> list[ColumnElement]:
    """
    Build ORDER BY columns: pinned first, then the chosen sort, then tiebreakers.

    Never-visited bookmarks sort after visited ones for "recently-visited".
    """
    columns: list[ColumnElement] = [Bookmark.pinned.desc()]
    if sort_by == "recently-visited":
        columns.append(Bookmark.visited_at.desc().nulls_last())
    elif sort_by == "most-visited":
        columns.append(Bookmark.visited_count.desc())
    columns.extend([Bookmark.created_at.desc(), Bookmark.id.desc()])
    return columns


async def list_bookmarks(
    db: AsyncSession,
    page: int = 1,
    limit: int = 10,
    search: str | None = None,
    archived: bool | None = None,
    sort_by: BookmarkSortBy = "recently-added",
) -> tuple[list[Bookmark], int]:
    """
    List bookmarks with search, archived filter, sorting and pagination.

    Args:
        db: Database session.
        page: 1-based page number.
        limit: Page size.
        search: Case-insensitive substring match on title, used as sent
            (surrounding spaces included). Blank means no filter.
        archived: Archived state to show. None behaves as False.
        sort_by:
            Secondary ordering after pinned bookmarks:
            - "recently-added": newest first (default).
            - "recently-visited": latest visit first, never-visited last.
            - "most-visited": highest visit count first.

    Returns:
        Tuple of (bookmarks on this page, total count matching the filter).
    """
    base_query = (
        select(Bookmark)
        .options(selectinload(Bookmark.tags))
        .where(Bookmark.archived.is_(bool(archived)))
    )

    if search is not None and search.strip():
        search_pattern = f"%{escape_ilike(search)}%"
        base_query = base_query.where(Bookmark.title.ilike(search_pattern, escape="\\"))

    # Get total count before pagination
    count_query = select(func.count()).select_from(base_query.subquery())
    total_result = await db.execute(count_query)
    total = total_result.scalar() or 0

    base_query = (
        base_query
        .order_by(*_sort_columns(sort_by))
        .offset(page_offset(page, limit))
        .limit(limit)
    )

    result = await db.execute(base_query)
    bookmarks = list(result.scalars().all())

    return bookmarks, total


async def update_bookmark(
    db: AsyncSession,
    bookmark_id: UUID,
    data: BookmarkUpdate,
) -> Bookmark:
    """
    Replace a bookmark's title, description and URL, and optionally its tags.

    Tags are only touched when the request carried them: `[]` clears them,
    a non-empty list replaces them.

    Raises:
        BookmarkNotFoundError: If the bookmark doesn't exist.

    Note:
        Does not commit. Caller (session generator) handles commit at request end.
    """
    bookmark = await _get_bookmark_or_raise(db, bookmark_id)

    bookmark.title = data.title
    bookmark.description = data.description or None
    bookmark.website_url = data.website_url

    if data.tags_provided:
        await set_bookmark_tags(db, bookmark, data.tags)

    await db.flush()
    await _refresh_with_tags(db, bookmark)
    return bookmark


async def _set_flag(
    db: AsyncSession,
    bookmark_id: UUID,
    field: str,
    value: bool,
) -> Bookmark:
    bookmark = await _get_bookmark_or_raise(db, bookmark_id)
    if getattr(bookmark, field) != value:
        setattr(bookmark, field, value)
        await db.flush()
        await _refresh_with_tags(db, bookmark)
    return bookmark


async def archive_bookmark(db: AsyncSession, bookmark_id: UUID) -> Bookmark:
    """
    Archive a bookmark.

    This operation is idempotent - archiving an already-archived bookmark
    returns it unchanged.

    Raises:
        BookmarkNotFoundError: If the bookmark doesn't exist.
    """
    return await _set_flag(db, bookmark_id, "archived", True)


async def unarchive_bookmark(db: AsyncSession, bookmark_id: UUID) -> Bookmark:
    """
    Unarchive a bookmark. Idempotent.

    Raises:
        BookmarkNotFoundError: If the bookmark doesn't exist.
    """
    return await _set_flag(db, bookmark_id, "archived", False)


async def pin_bookmark(db: AsyncSession, bookmark_id: UUID) -> Bookmark:
    """
    Pin a bookmark so it lists ahead of unpinned ones. Idempotent.

    Raises:
        BookmarkNotFoundError: If the bookmark doesn't exist.
    """
    return await _set_flag(db, bookmark_id, "pinned", True)


async def unpin_bookmark(db: AsyncSession, bookmark_id: UUID) -> Bookmark:
    """
    Unpin a bookmark. Idempotent.

    Raises:
        BookmarkNotFoundError: If the bookmark doesn't exist.
    """
    return await _set_flag(db, bookmark_id, "pinned", False)


async def record_bookmark_visit(db: AsyncSession, bookmark_id: UUID) -> Bookmark:
    """
    Record a visit: set visited_at to now and bump visited_count by one.

    The counter is incremented in SQL so concurrent visits are not lost.

    Raises:
        BookmarkNotFoundError: If the bookmark doesn't exist.
    """
    bookmark = await _get_bookmark_or_raise(db, bookmark_id)
    bookmark.visited_at = utcnow()
    bookmark.visited_count = Bookmark.visited_count + 1
    await db.flush()
    await _refresh_with_tags(db, bookmark)
    return bookmark


async def delete_bookmark(db: AsyncSession, bookmark_id: UUID) -> None:
    """
    Permanently delete an archived bookmark.

    Its tag associations are removed with it; the Tag rows themselves stay.

    Raises:
        BookmarkNotFoundError: If the bookmark doesn't exist.
        InvalidStateError: If the bookmark is not archived.

    Note:
        Does not commit. Caller (session generator) handles commit at request end.
    """
    bookmark = await _get_bookmark_or_raise(db, bookmark_id)
    if not bookmark.archived:
        logger.warning("Refused to delete bookmark %s: not archived", bookmark_id)
        raise InvalidStateError(
            f"Bookmark with ID {bookmark_id} cannot be deleted because it is not archived",
        )

    await db.delete(bookmark)
    await db.flush()
    logger.info("Deleted bookmark %s", bookmark_id)
