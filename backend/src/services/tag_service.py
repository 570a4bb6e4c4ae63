"""Service layer for tag operations."""
import logging

from sqlalchemy import distinct, func, select
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement
from uuid6 import uuid7

from models.base import utcnow
from models.bookmark import Bookmark
from models.tag import Tag, bookmark_tags
from schemas.pagination import page_offset
from schemas.tag import TagUsage
from schemas.validators import normalize_tag_titles

logger = logging.getLogger(__name__)

# Dialect inserts that support ON CONFLICT DO NOTHING
_UPSERT_INSERTS = {
    "postgresql": postgresql_insert,
    "sqlite": sqlite_insert,
}


def _dialect_name(db: AsyncSession) -> str:
    return db.get_bind().dialect.name


def _title_sort_key(db: AsyncSession) -> ColumnElement:
    """Tag title in byte order: PostgreSQL needs COLLATE "C", SQLite compares BINARY already."""
    if _dialect_name(db) == "postgresql":
        return Tag.title.collate("C")
    return Tag.title


async def _get_tags_by_title(db: AsyncSession, titles: list[str]) -> dict[str, Tag]:
    result = await db.execute(select(Tag).where(Tag.title.in_(titles)))
    return {tag.title: tag for tag in result.scalars()}


async def get_or_create_tags(
    db: AsyncSession,
    tag_titles: list[str] | None,
) -> list[Tag]:
    """
    Get existing tags or create new ones.

    Titles are normalized first (trimmed, blanks dropped, deduplicated), so
    the result never holds the same tag twice. Missing titles are inserted
    with ON CONFLICT (title) DO NOTHING and then read back, so a tag created
    by a concurrent transaction in the meantime is reused instead of failing
    the unique constraint.

    Args:
        db: Database session.
        tag_titles: Raw tag titles to get or create.

    Returns:
        List of Tag objects (existing or newly created), in input order.
    """
    normalized = normalize_tag_titles(tag_titles)
    if not normalized:
        return []

    tags_by_title = await _get_tags_by_title(db, normalized)
    missing = [title for title in normalized if title not in tags_by_title]

    if missing:
        now = utcnow()
        insert = _UPSERT_INSERTS[_dialect_name(db)]
        await db.execute(
            insert(Tag)
            .values([
                {"id": uuid7(), "title": title, "created_at": now, "updated_at": now}
                for title in missing
            ])
            .on_conflict_do_nothing(index_elements=["title"]),
        )
        tags_by_title.update(await _get_tags_by_title(db, missing))
        logger.info("Ensured %d new tag(s): %s", len(missing), ", ".join(missing))

    return [tags_by_title[title] for title in normalized]


async def set_bookmark_tags(
    db: AsyncSession,
    bookmark: Bookmark,
    tag_titles: list[str] | None,
) -> None:
    """
    Replace a bookmark's tags using the junction table.

    Existing associations are dropped and the normalized titles linked in
    their place; an empty list leaves the bookmark untagged. Shared Tag rows
    are never deleted.

    Args:
        db: Database session.
        bookmark: The bookmark to update (its tags collection must be loaded).
        tag_titles: New list of tag titles.
    """
    bookmark.tags = await get_or_create_tags(db, tag_titles)
    await db.flush()


async def get_tag_usage(
    db: AsyncSession,
    page: int = 1,
    limit: int = 10,
    archived: bool | None = None,
) -> tuple[list[TagUsage], int]:
    """
    Count how many bookmarks carry each tag, paginated over tags.

    Only bookmarks whose archived flag matches `archived` are counted
    (None behaves as False). Tags no matching bookmark uses are left out.

    Args:
        db: Database session.
        page: 1-based page number over tags.
        limit: Tags per page.
        archived: Archived state of the bookmarks to count.

    Returns:
        Tuple of (tags with counts sorted by count desc, then title asc in
        byte order so "Go" sorts before "go" on every backend,
        total number of distinct tags in use).
    """
    matching_ids = select(Bookmark.id).where(Bookmark.archived.is_(bool(archived)))

    has_matches = await db.scalar(select(matching_ids.exists()))
    if not has_matches:
        return [], 0

    in_scope = bookmark_tags.c.bookmark_id.in_(matching_ids)

    total_result = await db.execute(
        select(func.count(distinct(bookmark_tags.c.tag_id))).where(in_scope),
    )
    total = total_result.scalar() or 0

    usage_count = func.count(bookmark_tags.c.bookmark_id).label("usage_count")
    result = await db.execute(
        select(Tag.id, Tag.title, usage_count)
        .join(bookmark_tags, Tag.id == bookmark_tags.c.tag_id)
        .where(in_scope)
        .group_by(Tag.id, Tag.title)
        .order_by(usage_count.desc(), _title_sort_key(db).asc())
        .offset(page_offset(page, limit))
        .limit(limit),
    )

    return [TagUsage(id=row.id, title=row.title, count=row.usage_count) for row in result], total
