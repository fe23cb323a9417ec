"""Structured logging setup for event-snap.

Provides a consistent log format across the application with ISO 8601
timestamps and pipe-separated fields.
"""

from __future__ import annotations

import logging
import sys

_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# Sentinel to detect handlers added by setup_logging so repeated calls
# are idempotent without interfering with handlers added externally.
_HANDLER_ATTR = "_event_snap_log_handler"

# Third-party loggers that log every HTTP request at INFO.
_NOISY_LOGGERS = ("httpx", "httpcore", "google_genai")


def setup_logging(level: str = "INFO") -> None:
    """Configure the root logger with a structured formatter.

    Sets the root logger level and attaches a :class:`logging.StreamHandler`
    that writes to *stderr* using the project log format.  Outside of
    ``DEBUG`` the HTTP client and SDK loggers are capped at ``WARNING`` so
    request chatter does not drown out extraction logs.

    Calling this function multiple times is safe -- it will not add
    duplicate handlers.

    Args:
        level: A standard logging level name (e.g. ``"DEBUG"``,
            ``"INFO"``, ``"WARNING"``).

    Raises:
        ValueError: If *level* is not a recognised logging level string.
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {level!r}")

    root = logging.getLogger()
    root.setLevel(numeric_level)

    third_party_level = numeric_level if numeric_level <= logging.DEBUG else logging.WARNING
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(third_party_level)

    for handler in root.handlers:
        if getattr(handler, _HANDLER_ATTR, False):
            handler.setLevel(numeric_level)
            return

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(numeric_level)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S"))

    setattr(handler, _HANDLER_ATTR, True)
    root.addHandler(handler)

