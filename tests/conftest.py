"""Test fixtures — an isolated hub and app per test.

Learn: create_app() takes the hub as an argument, so every test builds
its own. Nothing leaks between tests through a module-level registry.
Streaming settings are tightened so timeouts trip in milliseconds and
keepalives never interleave with the frames under test.
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from buzzhub.config import Settings
from buzzhub.main import create_app
from buzzhub.realtime.hub import BroadcastHub


@pytest.fixture()
def test_settings():
    return Settings(
        keepalive_seconds=0,
        send_timeout_seconds=0.05,
        max_pending_frames=4,
    )


@pytest.fixture()
def hub():
    return BroadcastHub()


@pytest.fixture()
def app(test_settings, hub):
    return create_app(settings=test_settings, hub=hub)


@pytest_asyncio.fixture()
async def client(app):
    """HTTP client talking to the app in-process."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
