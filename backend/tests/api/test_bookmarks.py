"""Tests for bookmark CRUD endpoints."""
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models.bookmark import Bookmark

FAKE_UUID = "00000000-0000-0000-0000-000000000000"


async def _create(client: AsyncClient, **overrides: Any) -> dict:
    payload = {
        "title": "Example Site",
        "websiteURL": "https://example.com",
        **overrides,
    }
    response = await client.post("/bookmarks/", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


# =============================================================================
# Create
# =============================================================================


async def test_create_bookmark(client: AsyncClient, db_session: AsyncSession) -> None:
    """Test creating a new bookmark."""
    response = await client.post(
        "/bookmarks/",
        json={
            "title": "Example Site",
            "description": "An example website",
            "websiteURL": "https://example.com",
            "tags": ["example", "test"],
        },
    )
    assert response.status_code == 201

    data = response.json()
    assert data["title"] == "Example Site"
    assert data["description"] == "An example website"
    assert data["websiteURL"] == "https://example.com"
    assert data["archived"] is False
    assert data["pinned"] is False
    assert data["visitedAt"] is None
    assert data["visitedCount"] == 0
    assert [t["title"] for t in data["tags"]] == ["example", "test"]
    assert set(data["tags"][0]) == {"id", "title", "createdAt", "updatedAt"}
    assert "id" in data
    assert "createdAt" in data
    assert "updatedAt" in data

    # Verify in database
    result = await db_session.execute(select(Bookmark).where(Bookmark.title == "Example Site"))
    bookmark = result.scalar_one()
    assert str(bookmark.id) == data["id"]


async def test_create_bookmark_minimal(client: AsyncClient) -> None:
    """Only title and websiteURL are required."""
    data = await _create(client)

    assert data["description"] is None
    assert data["tags"] == []


async def test_create_bookmark_normalizes_tags(client: AsyncClient) -> None:
    data = await _create(client, tags=["  python ", "python", "", "Python"])

    assert sorted(t["title"] for t in data["tags"]) == ["Python", "python"]


async def test_create_bookmark_shares_tags(client: AsyncClient) -> None:
    first = await _create(client, tags=["python"])
    second = await _create(client, title="Other", tags=["python"])

    assert first["tags"][0]["id"] == second["tags"][0]["id"]


@pytest.mark.parametrize(
    "payload",
    [
        {"websiteURL": "https://example.com"},
        {"title": "No URL"},
        {"title": "", "websiteURL": "https://example.com"},
        {"title": "x" * 281, "websiteURL": "https://example.com"},
        {"title": "Long", "description": "d" * 281, "websiteURL": "https://example.com"},
        {"title": "Bad URL", "websiteURL": "not-a-url"},
        {"title": "Bad scheme", "websiteURL": "ftp://example.com/file"},
        {"title": "Long URL", "websiteURL": "https://example.com/" + "a" * 1024},
        {"title": "Bad tags", "websiteURL": "https://example.com", "tags": "python"},
        {"title": "Bad tags", "websiteURL": "https://example.com", "tags": [1, 2]},
    ],
)
async def test_create_bookmark_validation_errors(client: AsyncClient, payload: dict) -> None:
    response = await client.post("/bookmarks/", json=payload)
    assert response.status_code == 422


async def test_create_bookmark_max_lengths_accepted(client: AsyncClient) -> None:
    data = await _create(client, title="t" * 280, description="d" * 280)

    assert len(data["title"]) == 280
    assert len(data["description"]) == 280


# =============================================================================
# Get
# =============================================================================


async def test_get_bookmark(client: AsyncClient) -> None:
    created = await _create(client, tags=["python"])

    response = await client.get(f"/bookmarks/{created['id']}")

    assert response.status_code == 200
    assert response.json() == created


async def test_get_bookmark_not_found(client: AsyncClient) -> None:
    response = await client.get(f"/bookmarks/{FAKE_UUID}")

    assert response.status_code == 404
    assert response.json()["detail"] == f"Bookmark with ID {FAKE_UUID} not found"


async def test_get_bookmark_invalid_id(client: AsyncClient) -> None:
    response = await client.get("/bookmarks/not-a-uuid")
    assert response.status_code == 422


# =============================================================================
# Update
# =============================================================================


async def test_update_bookmark(client: AsyncClient) -> None:
    created = await _create(client, description="Old", tags=["python"])

    response = await client.put(
        f"/bookmarks/{created['id']}",
        json={
            "title": "Updated",
            "description": "New description",
            "websiteURL": "https://updated.example.com",
        },
    )

    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "Updated"
    assert data["description"] == "New description"
    assert data["websiteURL"] == "https://updated.example.com"
    # tags omitted: unchanged
    assert [t["title"] for t in data["tags"]] == ["python"]


async def test_update_bookmark_replaces_tags(client: AsyncClient) -> None:
    created = await _create(client, tags=["python", "web"])

    response = await client.put(
        f"/bookmarks/{created['id']}",
        json={"title": "Updated", "websiteURL": "https://example.com", "tags": ["rust"]},
    )

    assert response.status_code == 200
    assert [t["title"] for t in response.json()["tags"]] == ["rust"]


async def test_update_bookmark_clears_tags(client: AsyncClient) -> None:
    created = await _create(client, tags=["python", "web"])

    response = await client.put(
        f"/bookmarks/{created['id']}",
        json={"title": "Updated", "websiteURL": "https://example.com", "tags": []},
    )

    assert response.status_code == 200
    assert response.json()["tags"] == []


async def test_update_bookmark_not_found(client: AsyncClient) -> None:
    response = await client.put(
        f"/bookmarks/{FAKE_UUID}",
        json={"title": "Updated", "websiteURL": "https://example.com"},
    )
    assert response.status_code == 404


async def test_update_bookmark_validation_error(client: AsyncClient) -> None:
    created = await _create(client)

    response = await client.put(
        f"/bookmarks/{created['id']}",
        json={"title": "Updated", "websiteURL": "nope"},
    )

    assert response.status_code == 422


# =============================================================================
# State transitions
# =============================================================================


async def test_archive_and_unarchive_bookmark(client: AsyncClient) -> None:
    created = await _create(client)

    archived = await client.patch(f"/bookmarks/{created['id']}/archive")
    assert archived.status_code == 200
    assert archived.json()["archived"] is True

    again = await client.patch(f"/bookmarks/{created['id']}/archive")
    assert again.status_code == 200
    assert again.json()["archived"] is True

    restored = await client.patch(f"/bookmarks/{created['id']}/unarchive")
    assert restored.status_code == 200
    assert restored.json()["archived"] is False


async def test_pin_and_unpin_bookmark(client: AsyncClient) -> None:
    created = await _create(client)

    pinned = await client.patch(f"/bookmarks/{created['id']}/pin")
    assert pinned.status_code == 200
    assert pinned.json()["pinned"] is True

    unpinned = await client.patch(f"/bookmarks/{created['id']}/unpin")
    assert unpinned.status_code == 200
    assert unpinned.json()["pinned"] is False


async def test_visit_bookmark(client: AsyncClient) -> None:
    created = await _create(client)

    first = await client.patch(f"/bookmarks/{created['id']}/visit")
    second = await client.patch(f"/bookmarks/{created['id']}/visit")

    assert first.status_code == 200
    assert first.json()["visitedCount"] == 1
    assert first.json()["visitedAt"] is not None
    assert second.json()["visitedCount"] == 2


@pytest.mark.parametrize("action", ["archive", "unarchive", "pin", "unpin", "visit"])
async def test_state_transition_not_found(client: AsyncClient, action: str) -> None:
    response = await client.patch(f"/bookmarks/{FAKE_UUID}/{action}")
    assert response.status_code == 404


# =============================================================================
# Delete
# =============================================================================


async def test_delete_bookmark_requires_archive(client: AsyncClient) -> None:
    created = await _create(client)

    response = await client.delete(f"/bookmarks/{created['id']}")

    assert response.status_code == 400
    assert "not archived" in response.json()["detail"]
    assert (await client.get(f"/bookmarks/{created['id']}")).status_code == 200


async def test_delete_archived_bookmark(client: AsyncClient) -> None:
    created = await _create(client, tags=["python"])
    await client.patch(f"/bookmarks/{created['id']}/archive")

    response = await client.delete(f"/bookmarks/{created['id']}")

    assert response.status_code == 204
    assert (await client.get(f"/bookmarks/{created['id']}")).status_code == 404


async def test_delete_bookmark_not_found(client: AsyncClient) -> None:
    response = await client.delete(f"/bookmarks/{FAKE_UUID}")
    assert response.status_code == 404


# =============================================================================
# List
# =============================================================================


async def test_list_bookmarks_empty(client: AsyncClient) -> None:
    response = await client.get("/bookmarks/")

    assert response.status_code == 200
    assert response.json() == {
        "data": [],
        "meta": {"total": 0, "page": 1, "limit": 10, "totalPages": 0},
    }


async def test_list_bookmarks_meta(client: AsyncClient) -> None:
    for i in range(17):
        await _create(client, title=f"Bookmark {i}")

    response = await client.get("/bookmarks/", params={"page": 4, "limit": 5})

    assert response.status_code == 200
    body = response.json()
    assert body["meta"] == {"total": 17, "page": 4, "limit": 5, "totalPages": 4}
    assert len(body["data"]) == 2


async def test_list_bookmarks_excludes_archived(client: AsyncClient) -> None:
    active = await _create(client, title="Active")
    old = await _create(client, title="Old")
    await client.patch(f"/bookmarks/{old['id']}/archive")

    default = (await client.get("/bookmarks/")).json()
    archived = (await client.get("/bookmarks/", params={"archived": "true"})).json()

    assert [b["id"] for b in default["data"]] == [active["id"]]
    assert [b["id"] for b in archived["data"]] == [old["id"]]


async def test_list_bookmarks_search(client: AsyncClient) -> None:
    await _create(client, title="FastAPI Tutorial")
    await _create(client, title="Django Guide")

    response = await client.get("/bookmarks/", params={"search": "fastapi"})

    body = response.json()
    assert [b["title"] for b in body["data"]] == ["FastAPI Tutorial"]
    assert body["meta"]["total"] == 1


async def test_list_bookmarks_sort_modes(
    client: AsyncClient,
    db_session: AsyncSession,
) -> None:
    """Pinned first in every mode, then the requested ordering."""
    ids = {}
    for title in ("Pinned", "Popular", "Recent visit", "Untouched"):
        ids[title] = (await _create(client, title=title))["id"]

    base = datetime(2024, 1, 1, tzinfo=UTC)
    rows = (await db_session.execute(select(Bookmark))).scalars().all()
    by_title = {b.title: b for b in rows}
    by_title["Pinned"].created_at = base
    by_title["Popular"].created_at = base + timedelta(minutes=1)
    by_title["Popular"].visited_count = 10
    by_title["Popular"].visited_at = base + timedelta(days=1)
    by_title["Recent visit"].created_at = base + timedelta(minutes=2)
    by_title["Recent visit"].visited_count = 1
    by_title["Recent visit"].visited_at = base + timedelta(days=2)
    by_title["Untouched"].created_at = base + timedelta(minutes=3)
    await db_session.flush()
    await client.patch(f"/bookmarks/{ids['Pinned']}/pin")

    async def titles(sort_by: str) -> list[str]:
        response = await client.get("/bookmarks/", params={"sortBy": sort_by})
        assert response.status_code == 200
        return [b["title"] for b in response.json()["data"]]

    assert await titles("recently-added") == ["Pinned", "Untouched", "Recent visit", "Popular"]
    assert await titles("recently-visited") == ["Pinned", "Recent visit", "Popular", "Untouched"]
    assert await titles("most-visited") == ["Pinned", "Popular", "Recent visit", "Untouched"]


@pytest.mark.parametrize(
    "params",
    [
        {"page": 0},
        {"limit": 0},
        {"limit": 101},
        {"sortBy": "alphabetical"},
        {"archived": "maybe"},
    ],
)
async def test_list_bookmarks_invalid_query(client: AsyncClient, params: dict) -> None:
    response = await client.get("/bookmarks/", params=params)
    assert response.status_code == 422
