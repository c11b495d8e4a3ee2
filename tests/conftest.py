"""Pytest fixtures for statusfeed tests."""

from collections.abc import Callable
from typing import Any

import pytest

from statusfeed.config.settings import Settings
from statusfeed.timeline.schemas import Status

API_BASE = "https://api.example.com"
FRIENDS_URL = f"{API_BASE}/statuses/friends_timeline.json"
REPLIES_URL = f"{API_BASE}/statuses/replies.json"
UPDATE_URL = f"{API_BASE}/statuses/update.json"


def wire_time(hour: int, minute: int, second: int = 0, day: int = 27) -> str:
    """Wire timestamp on Aug <day> 2008 at the given UTC time."""
    return f"Wed Aug {day} {hour:02d}:{minute:02d}:{second:02d} +0000 2008"


def wire_status(
    status_id: int | str,
    created_at: str,
    text: str | None = None,
    screen_name: str = "alice",
    name: str = "Alice",
) -> dict[str, Any]:
    """Status object as the service returns it."""
    return {
        "id": status_id,
        "created_at": created_at,
        "text": text if text is not None else f"status {status_id}",
        "user": {"name": name, "screen_name": screen_name},
    }


@pytest.fixture
def test_settings() -> Settings:
    """Settings configured for testing."""
    return Settings(
        _env_file=None,
        environment="development",
        log_level="DEBUG",
        api_base_url=API_BASE,
        api_username="alice",
        api_password="secret",
        request_timeout_seconds=5.0,
    )


@pytest.fixture
def make_wire_status() -> Callable[..., dict[str, Any]]:
    return wire_status


@pytest.fixture
def at() -> Callable[..., str]:
    """Build wire timestamps: at(10, 2) -> 'Wed Aug 27 10:02:00 +0000 2008'."""
    return wire_time


@pytest.fixture
def make_status() -> Callable[..., Status]:
    """Build a Status with id and an (hour, minute) time on the test day."""

    def _make(status_id: int | str, hour: int, minute: int, second: int = 0, **kwargs) -> Status:
        return Status.from_wire(
            wire_status(status_id, wire_time(hour, minute, second), **kwargs)
        )

    return _make


@pytest.fixture
def urls() -> dict[str, str]:
    return {"friends": FRIENDS_URL, "replies": REPLIES_URL, "update": UPDATE_URL}
