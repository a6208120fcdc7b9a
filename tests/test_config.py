"""Settings tests — env loading and validation."""

import pytest
from pydantic import ValidationError

from buzzhub.config import Settings


def test_defaults():
    s = Settings()
    assert s.port == 9090
    assert s.send_timeout_seconds > 0
    assert s.max_pending_frames >= 1


def test_env_prefix(monkeypatch):
    monkeypatch.setenv("BUZZHUB_PORT", "8123")
    monkeypatch.setenv("BUZZHUB_KEEPALIVE_SECONDS", "0")
    s = Settings()
    assert s.port == 8123
    assert s.keepalive_seconds == 0


@pytest.mark.parametrize(
    "overrides",
    [
        {"send_timeout_seconds": 0},
        {"max_pending_frames": 0},
        {"keepalive_seconds": -1},
        {"shutdown_grace_seconds": 0},
    ],
)
def test_rejects_bad_streaming_limits(overrides):
    with pytest.raises(ValidationError):
        Settings(**overrides)
