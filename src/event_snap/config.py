"""Configuration loading for event-snap.

Reads settings from environment variables (with .env support via python-dotenv)
and validates them into an immutable :class:`Settings` snapshot.  The
extraction pipeline captures a snapshot when it builds its client, so a
settings change mid-call never affects an in-flight request.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, replace
from typing import Any

from dotenv import load_dotenv

from event_snap.exceptions import ConfigError

__all__ = ["ConfigError", "Settings", "load_settings"]

DEFAULT_MODEL = "gemini-2.0-flash"

_MIN_RETRIES, _MAX_RETRIES = 0, 10
_MIN_TIMEOUT, _MAX_TIMEOUT = 5, 300


@dataclass(frozen=True)
class Settings:
    """Application settings snapshot.

    Attributes:
        gemini_api_key: API key for Google Gemini.  Must be non-empty.
        model: Gemini model identifier.
        max_retries: Retries allowed for transient failures (0-10).
        timeout_seconds: Per-attempt response timeout (5-300).
        log_level: Standard logging level name (default ``"INFO"``).
        timezone: IANA timezone string used for the reference clock.

    Raises:
        ConfigError: On construction, if any value is out of range.
    """

    gemini_api_key: str
    model: str = DEFAULT_MODEL
    max_retries: int = 3
    timeout_seconds: int = 30
    log_level: str = "INFO"
    timezone: str = "America/Vancouver"

    def __post_init__(self) -> None:
        if not self.gemini_api_key or not self.gemini_api_key.strip():
            raise ConfigError("Gemini API key cannot be empty")
        if not self.model or not self.model.strip():
            raise ConfigError("Model name cannot be empty")
        if not _MIN_RETRIES <= self.max_retries <= _MAX_RETRIES:
            raise ConfigError(
                f"Max retries must be between {_MIN_RETRIES} and {_MAX_RETRIES}"
            )
        if not _MIN_TIMEOUT <= self.timeout_seconds <= _MAX_TIMEOUT:
            raise ConfigError(
                f"Timeout must be between {_MIN_TIMEOUT} and {_MAX_TIMEOUT} seconds"
            )
        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ConfigError(f"Unknown log level: {self.log_level!r}")

    @property
    def masked_api_key(self) -> str:
        """The API key with all but its first 3 and last 4 characters hidden."""
        key = self.gemini_api_key
        if len(key) <= 8:
            return "*" * len(key)
        return f"{key[:3]}*********{key[-4:]}"

    def with_changes(self, **changes: Any) -> Settings:
        """Return a new, re-validated snapshot with *changes* applied."""
        return replace(self, **changes)

    def __repr__(self) -> str:
        return (
            f"Settings(gemini_api_key='***', "
            f"model={self.model!r}, "
            f"max_retries={self.max_retries!r}, "
            f"timeout_seconds={self.timeout_seconds!r}, "
            f"log_level={self.log_level!r}, "
            f"timezone={self.timezone!r})"
        )


def _read_int(env_var: str) -> int | None:
    raw = os.environ.get(env_var, "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigError(f"{env_var} must be an integer, got {raw!r}") from exc


def load_settings() -> Settings:
    """Load and validate settings from environment variables.

    Calls :func:`dotenv.load_dotenv` so a ``.env`` file in the project root
    is picked up automatically.

    Returns:
        A validated :class:`Settings` instance.

    Raises:
        ConfigError: If ``GEMINI_API_KEY`` is missing, empty, or
            whitespace-only, or if any optional value is malformed or out
            of range.
    """
    load_dotenv()

    required = {
        "GEMINI_API_KEY": "gemini_api_key",
    }

    values: dict[str, Any] = {}
    missing: list[str] = []

    for env_var, field_name in required.items():
        raw = os.environ.get(env_var, "")
        if not raw.strip():
            missing.append(env_var)
        else:
            values[field_name] = raw.strip()

    if missing:
        names = ", ".join(missing)
        raise ConfigError(f"Missing required environment variables: {names}")

    # Optional settings with defaults handled by the dataclass.
    for env_var, field_name in (
        ("GEMINI_MODEL", "model"),
        ("LOG_LEVEL", "log_level"),
        ("TIMEZONE", "timezone"),
    ):
        raw = os.environ.get(env_var, "").strip()
        if raw:
            values[field_name] = raw

    for env_var, field_name in (
        ("MAX_RETRIES", "max_retries"),
        ("TIMEOUT_SECONDS", "timeout_seconds"),
    ):
        number = _read_int(env_var)
        if number is not None:
            values[field_name] = number

    return Settings(**values)
