# tests/fixtures/app.py
"""
🧩 App Fixture:
- Builds the app through `create_app` with test-only secrets
- Injects the test DB session
- Returns an HTTP client fixture for integration tests
"""

from typing import AsyncGenerator

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from medialytics.core.config import Settings
from medialytics.db.session import get_async_db
from medialytics.main import create_app
from tests.fixtures.db import get_override_get_db

SESSION_SECRET = "pytest-session-secret"
STREAM_SECRET = "pytest-stream-secret"
PUBLIC_BASE_URL = "http://media.test"


@pytest.fixture()
def test_settings() -> Settings:
    return Settings(
        JWT_SECRET_KEY=SESSION_SECRET,
        STREAM_TOKEN_SECRET=STREAM_SECRET,
        PUBLIC_BASE_URL=PUBLIC_BASE_URL,
        DB_AUTO_CREATE=False,
        ENV="test",
    )


@pytest.fixture()
def app(db_session: AsyncSession, test_settings: Settings) -> FastAPI:
    """🧪 App wired from `test_settings`, bound to the per-test session."""
    app = create_app(test_settings)
    app.dependency_overrides[get_async_db] = get_override_get_db(db_session)
    return app


@pytest.fixture()
async def async_client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
