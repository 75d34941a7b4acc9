# tests/fixtures/auth.py
import time
from typing import Callable, Dict
from uuid import uuid4

import pytest
from fastapi import FastAPI

from medialytics.db.models import MediaAsset
from medialytics.schemas.enums import MediaType

# ─────────────────────────────────────────────────────────────
# 🔐 Token + Auth Fixtures for Testing
# ─────────────────────────────────────────────────────────────
@pytest.fixture
def make_auth_headers(app: FastAPI) -> Callable[..., Dict[str, str]]:
    """Factory: Bearer headers for a session token signed by the app's service."""
    def _make(email: str = "operator@example.com", ip: str = "") -> Dict[str, str]:
        token = app.state.session_tokens.issue({"user_id": str(uuid4()), "email": email})
        headers = {"Authorization": f"Bearer {token}"}
        if ip:
            headers["X-Forwarded-For"] = ip
        return headers
    return _make


@pytest.fixture
def auth_headers(make_auth_headers) -> Dict[str, str]:
    return make_auth_headers()


# ─────────────────────────────────────────────────────────────
# 🎞️ Media fixtures
# ─────────────────────────────────────────────────────────────
@pytest.fixture
def create_media(db_session):
    """Factory: insert a media asset directly and return it."""
    async def _create(
        title: str = "Launch Trailer",
        type: MediaType = MediaType.video,
        file_url: str = "https://cdn.example.com/trailer.mp4",
    ) -> MediaAsset:
        media = MediaAsset(title=title, type=type, file_url=file_url)
        db_session.add(media)
        await db_session.commit()
        return media
    return _create


# ─────────────────────────────────────────────────────────────
# ⏱️ Clock helpers
# ─────────────────────────────────────────────────────────────
@pytest.fixture
def time_machine_clock():
    """Factory: a clock offset from real time by `delta` seconds."""
    def _make(delta: float) -> Callable[[], float]:
        return lambda: time.time() + delta
    return _make
