# tests/conftest.py
"""
Global test bootstrap
- Sets the environment BEFORE the package is imported (settings are read once)
- In-memory SQLite, forwarded headers trusted so tests can vary client IPs
- Pulls in the db / app / auth fixtures
"""

import os

# ──────────────────────────────────────────────────────────────────────────────
# 🌱 Test env (must precede any `medialytics` import)
# ──────────────────────────────────────────────────────────────────────────────
os.environ.setdefault("JWT_SECRET_KEY", "test-session-secret")
os.environ.setdefault("STREAM_TOKEN_SECRET", "test-stream-secret")
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["DB_AUTO_CREATE"] = "false"
os.environ["ENV"] = "test"
os.environ["TRUST_FORWARD_HEADERS"] = "true"
os.environ["RATELIMIT_STORAGE_URI"] = "memory://"
os.environ["RATE_LIMIT_ENABLED"] = "true"
os.environ.setdefault("LOG_TO_FILE", "0")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest  # noqa: E402

from medialytics.core.limiter import reset_rate_limits  # noqa: E402
from medialytics.services.analytics_service import clear_analytics_cache  # noqa: E402

# ──────────────────────────────────────────────────────────────────────────────
# 📦 Fixtures (db, app, auth)
# ──────────────────────────────────────────────────────────────────────────────
from tests.fixtures.db import *    # noqa: F401,F403,E402
from tests.fixtures.app import *   # noqa: F401,F403,E402
from tests.fixtures.auth import *  # noqa: F401,F403,E402


@pytest.fixture(autouse=True)
def _fresh_counters():
    """Every test starts with empty rate-limit counters and analytics cache."""
    reset_rate_limits()
    clear_analytics_cache()
    yield
    reset_rate_limits()
    clear_analytics_cache()
