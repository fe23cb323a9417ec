"""Shared fixtures for event-snap tests."""

from __future__ import annotations

import logging
from collections.abc import Generator
from datetime import datetime, timedelta, timezone

import pytest

from event_snap.config import Settings
from event_snap.models.context import ReferenceContext

_ENV_KEYS = (
    "GEMINI_API_KEY",
    "GEMINI_MODEL",
    "MAX_RETRIES",
    "TIMEOUT_SECONDS",
    "LOG_LEVEL",
    "TIMEZONE",
)


@pytest.fixture()
def monkeypatch_env(monkeypatch: pytest.MonkeyPatch) -> dict[str, str]:
    """Set all required environment variables to valid defaults.

    Also patches ``load_dotenv`` so that a real ``.env`` file on disk does not
    override the test values.  Optional variables are removed so their
    defaults apply.

    Returns the dict of variables so tests can inspect or override values.
    """
    monkeypatch.setattr("event_snap.config.load_dotenv", lambda *_a, **_kw: None)
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    env_vars = {
        "GEMINI_API_KEY": "test-gemini-key-12345",
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    return env_vars


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove all event-snap-related environment variables.

    Patches ``load_dotenv`` so a real ``.env`` file cannot re-inject values
    that the test explicitly removed.
    """
    monkeypatch.setattr("event_snap.config.load_dotenv", lambda *_a, **_kw: None)
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


@pytest.fixture()
def settings() -> Settings:
    """A valid settings snapshot with a fake API key."""
    return Settings(gemini_api_key="test-gemini-key-12345", timezone="Europe/Berlin")


@pytest.fixture()
def reference_context() -> ReferenceContext:
    """Tuesday 2025-05-27 09:00 at UTC+02:00 (Europe/Berlin, summer time)."""
    return ReferenceContext(
        now=datetime(2025, 5, 27, 9, 0, tzinfo=timezone(timedelta(hours=2))),
        timezone_name="Europe/Berlin",
    )


@pytest.fixture(autouse=True)
def _reset_root_logger() -> Generator[None, None, None]:
    """Reset the root logger after each test to prevent handler leaks."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
