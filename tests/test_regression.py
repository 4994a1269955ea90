"""
Regression tests for behaviour that existing clients rely on.

1. Create answers 200, not 201.
2. Update/delete on someone else's article answers exactly like a
   missing id (same status, same error code).
3. The serialized shape is identical across list, show, create and update.
4. X-Query-Count reflects the real number of statements.
5. CORS must not set allow_credentials=true with allow_origins=*.
6. Ids too large for the id column give 404, not a driver error.
7. updated_at is serialised with a UTC offset whatever the backend returns.
"""
from datetime import datetime, timedelta

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from blog_api.models import User
from tests.conftest import auth_headers, create_article


# ---------------------------------------------------------------------------
# 1. Create status
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_create_returns_200_not_201(async_client: AsyncClient, alice: User):
    resp = await async_client.post(
        "/api/v1/articles",
        json={"article": {"title": "Status", "body": "check"}},
        headers=auth_headers(alice),
    )
    assert resp.status_code == 200


# ---------------------------------------------------------------------------
# 2. "Not yours" is indistinguishable from "not there"
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
@pytest.mark.parametrize("method", ["patch", "delete"])
async def test_foreign_and_missing_articles_look_the_same(
    async_client: AsyncClient, db_session: AsyncSession, alice: User, bob: User, method: str
):
    article = await create_article(db_session, alice, "Alice only")
    kwargs = {"headers": auth_headers(bob)}
    if method == "patch":
        kwargs["json"] = {"article": {"title": "x"}}

    foreign = await getattr(async_client, method)(f"/api/v1/articles/{article.id}", **kwargs)
    missing = await getattr(async_client, method)("/api/v1/articles/10000", **kwargs)

    assert foreign.status_code == missing.status_code == 404
    assert foreign.json()["error"]["code"] == missing.json()["error"]["code"] == "NOT_FOUND"


# ---------------------------------------------------------------------------
# 3. One shape everywhere
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_shape_consistent_across_operations(async_client: AsyncClient, alice: User):
    headers = auth_headers(alice)
    created = (await async_client.post(
        "/api/v1/articles", json={"article": {"title": "S", "body": "B"}}, headers=headers,
    )).json()
    article_id = created["id"]
    updated = (await async_client.patch(
        f"/api/v1/articles/{article_id}", json={"article": {"body": "B2"}}, headers=headers,
    )).json()
    shown = (await async_client.get(f"/api/v1/articles/{article_id}")).json()
    listed = (await async_client.get("/api/v1/articles")).json()[0]

    for payload in (created, updated, shown, listed):
        assert list(payload.keys()) == ["id", "title", "body", "updated_at", "user"]
        assert list(payload["user"].keys()) == ["id", "name", "email"]


# ---------------------------------------------------------------------------
# 4. X-Query-Count
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_query_count_header_for_article_list(async_client: AsyncClient, db_session: AsyncSession, alice: User):
    """The list is a single SELECT with the owner joined in."""
    await create_article(db_session, alice, "One")
    await create_article(db_session, alice, "Two")

    resp = await async_client.get("/api/v1/articles")
    assert resp.status_code == 200
    assert int(resp.headers["x-query-count"]) == 1


@pytest.mark.asyncio
async def test_query_count_header_for_article_detail(async_client: AsyncClient, db_session: AsyncSession, alice: User):
    article = await create_article(db_session, alice, "Detail")

    resp = await async_client.get(f"/api/v1/articles/{article.id}")
    assert resp.status_code == 200
    assert int(resp.headers["x-query-count"]) == 1


# ---------------------------------------------------------------------------
# 5. CORS headers
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_cors_no_credentials_with_wildcard_origin(async_client: AsyncClient):
    resp = await async_client.options(
        "/api/v1/articles",
        headers={
            "Origin": "https://example.com",
            "Access-Control-Request-Method": "GET",
        },
    )
    cred_header = resp.headers.get("access-control-allow-credentials", "").lower()
    assert cred_header != "true"


# ---------------------------------------------------------------------------
# 6. Ids past the INTEGER column range are simply not found
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
@pytest.mark.parametrize("article_id", [2 ** 31, 99999999999999999999, -(2 ** 31) - 1])
@pytest.mark.parametrize("method", ["get", "patch", "delete"])
async def test_out_of_range_id_is_not_found(
    async_client: AsyncClient, alice: User, method: str, article_id: int
):
    kwargs = {"headers": auth_headers(alice)}
    if method == "patch":
        kwargs["json"] = {"article": {"title": "x"}}

    resp = await getattr(async_client, method)(f"/api/v1/articles/{article_id}", **kwargs)
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "NOT_FOUND"


# ---------------------------------------------------------------------------
# 7. updated_at carries a UTC offset on every operation
# ---------------------------------------------------------------------------

def _parse_timestamp(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


@pytest.mark.asyncio
async def test_updated_at_is_utc_everywhere(async_client: AsyncClient, db_session: AsyncSession, alice: User):
    headers = auth_headers(alice)
    seeded = await create_article(db_session, alice, "Seeded")
    created = (await async_client.post(
        "/api/v1/articles", json={"article": {"title": "New", "body": "B"}}, headers=headers,
    )).json()
    updated = (await async_client.patch(
        f"/api/v1/articles/{created['id']}", json={"article": {"body": "B2"}}, headers=headers,
    )).json()
    shown = (await async_client.get(f"/api/v1/articles/{seeded.id}")).json()
    listed = (await async_client.get("/api/v1/articles")).json()

    stamps = [created, updated, shown, *listed]
    for payload in stamps:
        parsed = _parse_timestamp(payload["updated_at"])
        assert parsed.utcoffset() == timedelta(0)
