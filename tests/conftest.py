"""Shared test fixtures."""

from contextlib import asynccontextmanager
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from jobradar.config import Settings
from tests.fakes import FakeUpstream, InMemoryStore


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest.fixture
def test_settings():
    return Settings(
        openrouter_api_key="test-key",
        redis_url="redis://localhost:6379/0",
        openrouter_base_url="https://openrouter.test/api/v1",
        hh_base_url="https://hh.test",
        analyze_retries=0,
        _env_file=None,
    )


@pytest.fixture
def app_client(store, upstream, test_settings):
    """TestClient with a lifespan that wires in-memory store and mocked upstreams."""
    from jobradar.main import build_services, create_app
    from jobradar.rate_limit import limiter

    http_client = upstream.client()

    @asynccontextmanager
    async def _test_lifespan(app):
        build_services(app, store, http_client, test_settings)
        yield
        await http_client.aclose()

    limiter.enabled = False
    try:
        with patch("jobradar.main.lifespan", _test_lifespan):
            app = create_app()
            with TestClient(app, raise_server_exceptions=False) as client:
                yield client
    finally:
        limiter.enabled = True
