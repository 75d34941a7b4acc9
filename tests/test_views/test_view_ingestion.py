# tests/test_views/test_view_ingestion.py

from uuid import uuid4

import pytest
from fastapi import status
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from medialytics.db.models import MediaViewLog
from medialytics.repositories.view_log import SqlViewLogRepository


async def _log_count(db: AsyncSession) -> int:
    return (await db.execute(select(func.count(MediaViewLog.id)))).scalar_one()


# ──────────────────────────────────────────────────────────────────────────────
# ✅ Happy path
# ──────────────────────────────────────────────────────────────────────────────
@pytest.mark.anyio
async def test_log_view_records_entry(async_client: AsyncClient, db_session: AsyncSession, create_media, make_auth_headers):
    media = await create_media()

    resp = await async_client.post(f"/media/{media.id}/view", headers=make_auth_headers(ip="203.0.113.7"))

    assert resp.status_code == status.HTTP_201_CREATED, resp.text
    assert resp.json() == {"message": "View logged"}
    assert resp.headers.get("X-RateLimit-Limit") == "1"

    row = (await db_session.execute(select(MediaViewLog))).scalar_one()
    assert row.media_id == media.id
    assert row.viewed_by_ip == "203.0.113.7"


# ──────────────────────────────────────────────────────────────────────────────
# 🚦 Rate limit: one view per client IP per minute
# ──────────────────────────────────────────────────────────────────────────────
@pytest.mark.anyio
async def test_second_view_from_same_ip_is_rate_limited(
    async_client: AsyncClient, db_session: AsyncSession, create_media, make_auth_headers
):
    media = await create_media()
    headers = make_auth_headers(ip="198.51.100.1")

    first = await async_client.post(f"/media/{media.id}/view", headers=headers)
    second = await async_client.post(f"/media/{media.id}/view", headers=headers)

    assert first.status_code == status.HTTP_201_CREATED
    assert second.status_code == status.HTTP_429_TOO_MANY_REQUESTS
    assert second.json()["message"] == "Too many views logged from this IP, please try again later."
    assert int(second.headers["Retry-After"]) > 0
    assert await _log_count(db_session) == 1


@pytest.mark.anyio
async def test_limit_is_per_ip_not_per_operator(
    async_client: AsyncClient, db_session: AsyncSession, create_media, make_auth_headers
):
    media = await create_media()

    a = await async_client.post(f"/media/{media.id}/view", headers=make_auth_headers(ip="198.51.100.2"))
    b = await async_client.post(f"/media/{media.id}/view", headers=make_auth_headers(ip="198.51.100.3"))
    # a different operator behind the first IP shares its budget
    c = await async_client.post(
        f"/media/{media.id}/view", headers=make_auth_headers(email="other@example.com", ip="198.51.100.2")
    )

    assert [a.status_code, b.status_code, c.status_code] == [201, 201, 429]
    assert await _log_count(db_session) == 2


@pytest.mark.anyio
async def test_unauthenticated_view_does_not_consume_budget(
    async_client: AsyncClient, create_media, make_auth_headers
):
    media = await create_media()

    anon = await async_client.post(f"/media/{media.id}/view", headers={"X-Forwarded-For": "198.51.100.9"})
    authed = await async_client.post(f"/media/{media.id}/view", headers=make_auth_headers(ip="198.51.100.9"))

    assert anon.status_code == status.HTTP_401_UNAUTHORIZED
    assert authed.status_code == status.HTTP_201_CREATED


# ──────────────────────────────────────────────────────────────────────────────
# ❌ Validation / existence
# ──────────────────────────────────────────────────────────────────────────────
@pytest.mark.anyio
async def test_view_with_malformed_id_is_400(async_client: AsyncClient, db_session: AsyncSession, make_auth_headers):
    resp = await async_client.post("/media/12345/view", headers=make_auth_headers(ip="192.0.2.10"))
    assert resp.status_code == status.HTTP_400_BAD_REQUEST
    assert await _log_count(db_session) == 0


@pytest.mark.anyio
async def test_view_for_unknown_media_is_404(async_client: AsyncClient, db_session: AsyncSession, make_auth_headers):
    resp = await async_client.post(f"/media/{uuid4()}/view", headers=make_auth_headers(ip="192.0.2.11"))
    assert resp.status_code == status.HTTP_404_NOT_FOUND
    assert await _log_count(db_session) == 0


@pytest.mark.anyio
async def test_store_failure_maps_to_generic_500(
    async_client: AsyncClient, db_session: AsyncSession, create_media, make_auth_headers, monkeypatch
):
    media = await create_media()

    async def _boom(self, **kwargs):
        raise SQLAlchemyError("disk full")

    monkeypatch.setattr(SqlViewLogRepository, "append", _boom)
    resp = await async_client.post(f"/media/{media.id}/view", headers=make_auth_headers(ip="192.0.2.12"))

    assert resp.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert resp.json()["message"] == "Server error"
    assert "disk full" not in resp.text
    assert await _log_count(db_session) == 0
