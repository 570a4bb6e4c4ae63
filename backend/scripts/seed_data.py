"""Seed script to populate the local dev database with documentation bookmarks.

Usage:
    PYTHONPATH=backend/src python backend/scripts/seed_data.py populate
    PYTHONPATH=backend/src python backend/scripts/seed_data.py populate --force
    PYTHONPATH=backend/src python backend/scripts/seed_data.py clear
"""

import argparse
import asyncio
import logging

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from core.config import get_settings
from db.session import enable_sqlite_foreign_keys
from models import Bookmark, Tag
from schemas.bookmark import BookmarkCreate
from services.bookmark_service import create_bookmark

BOOKMARKS = [
    {
        "title": "NestJS Official Documentation",
        "description": (
            "A progressive Node.js framework for building efficient and scalable "
            "server-side applications."
        ),
        "website_url": "https://nestjs.com/",
        "tags": ["NestJS", "Node.js", "Framework", "TypeScript", "Documentation"],
    },
    {
        "title": "TypeScript Handbook",
        "description": "Comprehensive guide to TypeScript language features and best practices.",
        "website_url": "https://www.typescriptlang.org/docs/",
        "tags": ["TypeScript", "Documentation", "JavaScript"],
    },
    {
        "title": "PostgreSQL Documentation",
        "description": (
            "The official PostgreSQL documentation for developers and database administrators."
        ),
        "website_url": "https://www.postgresql.org/docs/",
        "tags": ["PostgreSQL", "Database", "Documentation"],
    },
    {
        "title": "Prisma Documentation",
        "description": "Next-generation ORM for Node.js and TypeScript with excellent type safety.",
        "website_url": "https://www.prisma.io/docs/",
        "tags": ["Prisma", "Database", "Node.js", "TypeScript", "Documentation"],
    },
    {
        "title": "Node.js Official Guide",
        "description": "Official Node.js documentation and API reference.",
        "website_url": "https://nodejs.org/en/docs/",
        "tags": ["Node.js", "JavaScript", "Documentation", "API"],
    },
    {
        "title": "Swagger API Documentation",
        "description": "OpenAPI Specification and Swagger tools for API development.",
        "website_url": "https://swagger.io/",
        "tags": ["API", "Documentation", "Swagger"],
    },
    {
        "title": "Docker Documentation",
        "description": "Containerization platform documentation and best practices.",
        "website_url": "https://docs.docker.com/",
        "tags": ["Docker", "Documentation", "DevOps", "Container"],
    },
    {
        "title": "Express.js Guide",
        "description": "Fast, unopinionated, minimalist web framework for Node.js.",
        "website_url": "https://expressjs.com/",
        "tags": ["Express", "Node.js", "Framework", "JavaScript"],
    },
    {
        "title": "Mozilla Developer Network",
        "description": "Web development resources for HTML, CSS, JavaScript, and web APIs.",
        "website_url": "https://developer.mozilla.org/",
        "tags": ["JavaScript", "Documentation", "Web Development", "API"],
    },
    {
        "title": "GitHub Documentation",
        "description": "Documentation for using GitHub for version control and collaboration.",
        "website_url": "https://docs.github.com/",
        "tags": ["GitHub", "Git", "Documentation", "Version Control"],
    },
]


async def create_bookmarks(session: AsyncSession) -> None:
    """Create the seed bookmarks; tags are shared through the tag service."""
    for data in BOOKMARKS:
        await create_bookmark(session, BookmarkCreate(**data))

    tag_count = (await session.execute(select(func.count()).select_from(Tag))).scalar()
    print(f"  Created {len(BOOKMARKS)} bookmarks with {tag_count} tags")


async def clear_data(session: AsyncSession) -> None:
    """Delete every bookmark and tag."""
    bm_count = (await session.execute(select(func.count()).select_from(Bookmark))).scalar()
    tag_count = (await session.execute(select(func.count()).select_from(Tag))).scalar()

    # CASCADE removes bookmark_tags rows.
    await session.execute(delete(Bookmark))
    await session.execute(delete(Tag))
    await session.flush()

    print(f"  Deleted {bm_count} bookmarks, {tag_count} tags")
    print("Clear complete.")


def _session_factory() -> tuple:
    settings = get_settings()
    engine = create_async_engine(settings.database_url, echo=False)
    enable_sqlite_foreign_keys(engine)
    return engine, async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def populate(force: bool = False) -> None:
    """Populate the database with seed data."""
    engine, session_factory = _session_factory()

    async with session_factory() as session:
        try:
            bm_count = (await session.execute(
                select(func.count()).select_from(Bookmark)
            )).scalar()

            if bm_count and bm_count > 0:
                if force:
                    print("Existing data found, clearing first (--force)...")
                    await clear_data(session)
                else:
                    print(
                        f"Data already exists ({bm_count} bookmarks). "
                        f"Use --force to clear and re-seed."
                    )
                    return

            print("Populating seed data...")
            await create_bookmarks(session)
            await session.commit()
            print("Seed data created successfully.")
        except Exception:
            await session.rollback()
            raise
        finally:
            await engine.dispose()


async def clear() -> None:
    """Clear all bookmarks and tags."""
    engine, session_factory = _session_factory()

    async with session_factory() as session:
        try:
            await clear_data(session)
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await engine.dispose()


def main() -> None:
    """CLI entry point."""
    logging.basicConfig(
        level=get_settings().log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    parser = argparse.ArgumentParser(description="Seed the dev database with documentation bookmarks.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    populate_parser = subparsers.add_parser("populate", help="Populate database with seed data")
    populate_parser.add_argument(
        "--force", action="store_true",
        help="Clear existing data before populating",
    )

    subparsers.add_parser("clear", help="Remove all bookmarks and tags")

    args = parser.parse_args()

    if args.command == "populate":
        asyncio.run(populate(force=args.force))
    elif args.command == "clear":
        asyncio.run(clear())


if __name__ == "__main__":
    main()
