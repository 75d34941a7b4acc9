# tests/test_core/test_logging.py

import logging
from typing import List
from uuid import uuid4

import pytest
from fastapi import status
from httpx import AsyncClient
from loguru import logger

from medialytics.core.logger import configure_logging


@pytest.fixture()
def log_lines():
    lines: List[str] = []
    handler_id = logger.add(lines.append, level="DEBUG", format="{extra[request_id]} | {message}")
    yield lines
    logger.remove(handler_id)


def test_reconfigure_swaps_only_own_sinks(test_settings, log_lines):
    first = configure_logging(test_settings)
    second = configure_logging(test_settings)

    assert len(first) == len(second) == 1
    assert set(first).isdisjoint(second)

    logger.warning("still here")
    assert any(line.startswith("- | still here") for line in log_lines)


def test_file_sink_follows_settings(test_settings, tmp_path, log_lines):
    cfg = test_settings.model_copy(
        update={"LOG_TO_FILE": True, "LOG_DIR": str(tmp_path), "LOG_FILE": "svc.log", "LOG_LEVEL": "INFO"}
    )
    try:
        assert len(configure_logging(cfg)) == 2
        logger.info("written to disk")
        logger.complete()
        assert "written to disk" in (tmp_path / "svc.log").read_text()
    finally:
        configure_logging(test_settings)


def test_stdlib_records_reach_loguru(test_settings, log_lines):
    configure_logging(test_settings)
    logging.getLogger("uvicorn.error").warning("worker %s booted", 3)

    assert any("worker 3 booted" in line for line in log_lines)


@pytest.mark.anyio
async def test_rate_limit_rejection_is_logged_with_request_id(
    async_client: AsyncClient, create_media, make_auth_headers, log_lines
):
    media = await create_media()
    rid = str(uuid4())
    headers = {**make_auth_headers(ip="198.51.100.77"), "X-Request-ID": rid}

    await async_client.post(f"/media/{media.id}/view", headers=headers)
    resp = await async_client.post(f"/media/{media.id}/view", headers=headers)

    assert resp.status_code == status.HTTP_429_TOO_MANY_REQUESTS
    assert any(
        line.startswith(f"{rid} | [RateLimit] exceeded") and f"/media/{media.id}/view" in line
        for line in log_lines
    )
