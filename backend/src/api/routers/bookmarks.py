"""Bookmark CRUD endpoints."""
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.dependencies import get_async_session, get_settings
from schemas.bookmark import (
    BookmarkCreate,
    BookmarkListResponse,
    BookmarkResponse,
    BookmarkSortBy,
    BookmarkUpdate,
)
from schemas.pagination import PageMeta
from schemas.tag import TagUsageListResponse
from services import bookmark_service, tag_service
from services.exceptions import BookmarkNotFoundError, InvalidStateError

settings = get_settings()

router = APIRouter(prefix="/bookmarks", tags=["bookmarks"])


def _not_found(e: BookmarkNotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get("/", response_model=BookmarkListResponse)
async def list_bookmarks(
    page: int = Query(default=1, ge=1, description="Page number"),
    limit: int = Query(default=settings.default_page_size, ge=1, le=settings.max_page_size, description="Number of items per page"),  # noqa: E501
    search: str | None = Query(default=None, description="Search bookmarks by title (partial match, case-insensitive)"),  # noqa: E501
    archived: bool | None = Query(default=None, description="Filter by archived status (defaults to false)"),  # noqa: E501
    sort_by: BookmarkSortBy = Query(default="recently-added", alias="sortBy", description="Sort order after pinned bookmarks"),  # noqa: E501
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkListResponse:
    """
    List bookmarks with search, archived filtering, and sorting.

    - **search**: Case-insensitive substring match on title
    - **archived**: Show archived (true) or active (false, default) bookmarks
    - **sortBy**: recently-added (default), recently-visited, or most-visited;
      pinned bookmarks always come first
    """
    bookmarks, total = await bookmark_service.list_bookmarks(
        db=db,
        page=page,
        limit=limit,
        search=search,
        archived=archived,
        sort_by=sort_by,
    )
    return BookmarkListResponse(
        data=[BookmarkResponse.model_validate(b) for b in bookmarks],
        meta=PageMeta.build(total=total, page=page, limit=limit),
    )


@router.get("/tag-filters", response_model=TagUsageListResponse)
async def list_tag_filters(
    page: int = Query(default=1, ge=1, description="Page number"),
    limit: int = Query(default=settings.default_page_size, ge=1, le=settings.max_page_size, description="Number of items per page"),  # noqa: E501
    archived: bool | None = Query(default=None, description="Count archived (true) or active (false, default) bookmarks"),  # noqa: E501
    db: AsyncSession = Depends(get_async_session),
) -> TagUsageListResponse:
    """
    List tags used by bookmarks with their usage counts.

    Results are sorted by count DESC, then title ASC, and paginated over tags.
    """
    tags, total = await tag_service.get_tag_usage(
        db, page=page, limit=limit, archived=archived,
    )
    return TagUsageListResponse(
        data=tags,
        meta=PageMeta.build(total=total, page=page, limit=limit),
    )


@router.post("/", response_model=BookmarkResponse, status_code=201)
async def create_bookmark(
    data: BookmarkCreate,
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkResponse:
    """Create a new bookmark."""
    bookmark = await bookmark_service.create_bookmark(db, data)
    return BookmarkResponse.model_validate(bookmark)


@router.get("/{bookmark_id}", response_model=BookmarkResponse)
async def get_bookmark(
    bookmark_id: UUID,
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkResponse:
    """Get a single bookmark by ID."""
    bookmark = await bookmark_service.get_bookmark(db, bookmark_id)
    if bookmark is None:
        raise _not_found(BookmarkNotFoundError(bookmark_id))
    return BookmarkResponse.model_validate(bookmark)


@router.put("/{bookmark_id}", response_model=BookmarkResponse)
async def update_bookmark(
    bookmark_id: UUID,
    data: BookmarkUpdate,
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkResponse:
    """
    Update a bookmark.

    Omit `tags` to keep the current tags; send `[]` to remove them all.
    """
    try:
        bookmark = await bookmark_service.update_bookmark(db, bookmark_id, data)
    except BookmarkNotFoundError as e:
        raise _not_found(e) from e
    return BookmarkResponse.model_validate(bookmark)


@router.patch("/{bookmark_id}/archive", response_model=BookmarkResponse)
async def archive_bookmark(
    bookmark_id: UUID,
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkResponse:
    """Archive a bookmark. Idempotent."""
    try:
        bookmark = await bookmark_service.archive_bookmark(db, bookmark_id)
    except BookmarkNotFoundError as e:
        raise _not_found(e) from e
    return BookmarkResponse.model_validate(bookmark)


@router.patch("/{bookmark_id}/unarchive", response_model=BookmarkResponse)
async def unarchive_bookmark(
    bookmark_id: UUID,
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkResponse:
    """Unarchive a bookmark. Idempotent."""
    try:
        bookmark = await bookmark_service.unarchive_bookmark(db, bookmark_id)
    except BookmarkNotFoundError as e:
        raise _not_found(e) from e
    return BookmarkResponse.model_validate(bookmark)


@router.patch("/{bookmark_id}/pin", response_model=BookmarkResponse)
async def pin_bookmark(
    bookmark_id: UUID,
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkResponse:
    """Pin a bookmark so it is listed first."""
    try:
        bookmark = await bookmark_service.pin_bookmark(db, bookmark_id)
    except BookmarkNotFoundError as e:
        raise _not_found(e) from e
    return BookmarkResponse.model_validate(bookmark)


@router.patch("/{bookmark_id}/unpin", response_model=BookmarkResponse)
async def unpin_bookmark(
    bookmark_id: UUID,
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkResponse:
    """Unpin a bookmark."""
    try:
        bookmark = await bookmark_service.unpin_bookmark(db, bookmark_id)
    except BookmarkNotFoundError as e:
        raise _not_found(e) from e
    return BookmarkResponse.model_validate(bookmark)


@router.patch("/{bookmark_id}/visit", response_model=BookmarkResponse)
async def visit_bookmark(
    bookmark_id: UUID,
    db: AsyncSession = Depends(get_async_session),
) -> BookmarkResponse:
    """Record a visit to a bookmark (updates visitedAt and visitedCount)."""
    try:
        bookmark = await bookmark_service.record_bookmark_visit(db, bookmark_id)
    except BookmarkNotFoundError as e:
        raise _not_found(e) from e
    return BookmarkResponse.model_validate(bookmark)


@router.delete("/{bookmark_id}", status_code=204)
async def delete_bookmark(
    bookmark_id: UUID,
    db: AsyncSession = Depends(get_async_session),
) -> None:
    """
    Delete a bookmark permanently.

    Returns 400 if the bookmark is not archived, 404 if it doesn't exist.
    """
    try:
        await bookmark_service.delete_bookmark(db, bookmark_id)
    except BookmarkNotFoundError as e:
        raise _not_found(e) from e
    except InvalidStateError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
