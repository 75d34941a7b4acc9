# tests/test_stream_links/test_stream_flow.py

from uuid import uuid4

import pytest
from fastapi import status
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from medialytics.core.tokens import STREAM_TOKEN_TTL_SECONDS, TokenService, Valid
from medialytics.db.models import MediaViewLog
from tests.fixtures.app import PUBLIC_BASE_URL, STREAM_SECRET

FORBIDDEN = "Forbidden: Invalid or expired stream link."


def _token_from(url: str) -> str:
    prefix = f"{PUBLIC_BASE_URL}/stream/"
    assert url.startswith(prefix), url
    return url[len(prefix):]


# ──────────────────────────────────────────────────────────────────────────────
# 🔗 End to end: create → stream-url → redeem
# ──────────────────────────────────────────────────────────────────────────────
@pytest.mark.anyio
async def test_create_issue_redeem(async_client: AsyncClient, db_session: AsyncSession, auth_headers):
    file_url = "https://cdn.example.com/podcast/ep42.mp3"
    created = await async_client.post(
        "/media", json={"title": "Ep 42", "type": "audio", "file_url": file_url}, headers=auth_headers
    )
    media_id = created.json()["id"]

    issued = await async_client.get(f"/media/{media_id}/stream-url", headers={"X-Forwarded-For": "203.0.113.50"})

    assert issued.status_code == status.HTTP_200_OK, issued.text
    assert issued.headers.get("Cache-Control") == "no-store"
    token = _token_from(issued.json()["secure_stream_url"])

    redeemed = await async_client.get(f"/stream/{token}")
    assert redeemed.status_code == status.HTTP_200_OK
    assert redeemed.headers["content-type"].startswith("text/plain")
    assert redeemed.text == f"Access granted to stream file: {file_url}"

    # issuing the link logs a view for the requester
    logs = (await db_session.execute(select(MediaViewLog))).scalars().all()
    assert [(str(log.media_id), log.viewed_by_ip) for log in logs] == [(media_id, "203.0.113.50")]


@pytest.mark.anyio
async def test_stream_token_claims(async_client: AsyncClient, app, create_media):
    media = await create_media(file_url="https://cdn.example.com/a.mp4")

    issued = await async_client.get(f"/media/{media.id}/stream-url")
    result = app.state.stream_tokens.verify(_token_from(issued.json()["secure_stream_url"]))

    assert isinstance(result, Valid)
    assert result.payload["media_id"] == str(media.id)
    assert result.payload["file_url"] == "https://cdn.example.com/a.mp4"
    assert result.expires_at - result.issued_at == STREAM_TOKEN_TTL_SECONDS


@pytest.mark.anyio
async def test_redemption_is_repeatable(async_client: AsyncClient, create_media):
    media = await create_media()
    issued = await async_client.get(f"/media/{media.id}/stream-url")
    token = _token_from(issued.json()["secure_stream_url"])

    for _ in range(3):
        resp = await async_client.get(f"/stream/{token}")
        assert resp.status_code == status.HTTP_200_OK
        assert media.file_url in resp.text


@pytest.mark.anyio
async def test_stream_url_is_public_and_not_rate_limited(async_client: AsyncClient, create_media):
    media = await create_media()
    statuses = [(await async_client.get(f"/media/{media.id}/stream-url")).status_code for _ in range(3)]
    assert statuses == [200, 200, 200]


@pytest.mark.anyio
async def test_stream_url_errors(async_client: AsyncClient, db_session: AsyncSession):
    bad = await async_client.get("/media/not-a-uuid/stream-url")
    missing = await async_client.get(f"/media/{uuid4()}/stream-url")

    assert bad.status_code == status.HTTP_400_BAD_REQUEST
    assert missing.status_code == status.HTTP_404_NOT_FOUND
    assert (await db_session.execute(select(MediaViewLog))).scalars().all() == []


# ──────────────────────────────────────────────────────────────────────────────
# ⛔ Rejections
# ──────────────────────────────────────────────────────────────────────────────
@pytest.mark.anyio
async def test_expired_stream_token_is_forbidden(async_client: AsyncClient, time_machine_clock):
    issuer = TokenService(
        STREAM_SECRET,
        ttl_seconds=STREAM_TOKEN_TTL_SECONDS,
        token_type="stream",
        clock=time_machine_clock(-STREAM_TOKEN_TTL_SECONDS),
    )
    token = issuer.issue({"media_id": str(uuid4()), "file_url": "https://cdn.example.com/old.mp4"})

    resp = await async_client.get(f"/stream/{token}")

    assert resp.status_code == status.HTTP_403_FORBIDDEN
    assert resp.text == FORBIDDEN


@pytest.mark.anyio
async def test_link_expires_after_ten_minutes(async_client: AsyncClient, app, create_media, time_machine_clock):
    media = await create_media()
    issued = await async_client.get(f"/media/{media.id}/stream-url")
    token = _token_from(issued.json()["secure_stream_url"])

    app.state.stream_tokens = TokenService(
        STREAM_SECRET,
        ttl_seconds=STREAM_TOKEN_TTL_SECONDS,
        token_type="stream",
        clock=time_machine_clock(STREAM_TOKEN_TTL_SECONDS + 1),
    )
    resp = await async_client.get(f"/stream/{token}")

    assert resp.status_code == status.HTTP_403_FORBIDDEN
    assert resp.text == FORBIDDEN


@pytest.mark.anyio
@pytest.mark.parametrize("token", ["garbage", "a.b.c"])
async def test_malformed_stream_token_is_forbidden(async_client: AsyncClient, token):
    resp = await async_client.get(f"/stream/{token}")
    assert resp.status_code == status.HTTP_403_FORBIDDEN
    assert resp.text == FORBIDDEN


@pytest.mark.anyio
async def test_session_token_cannot_redeem_stream(async_client: AsyncClient, app):
    token = app.state.session_tokens.issue({"user_id": "u", "email": "e@example.com", "file_url": "x"})
    resp = await async_client.get(f"/stream/{token}")
    assert resp.status_code == status.HTTP_403_FORBIDDEN
