"""Reference clock: samples the current time and timezone once per call."""

from __future__ import annotations

import logging
from datetime import datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from event_snap.exceptions import ConfigError
from event_snap.models.context import ReferenceContext, format_utc_offset

logger = logging.getLogger(__name__)


def capture_reference_context(timezone_name: str | None = None) -> ReferenceContext:
    """Sample the current date, time and UTC offset.

    Args:
        timezone_name: IANA timezone string (e.g. ``"America/Vancouver"``).
            When ``None`` or empty, the system's local timezone is used.

    Returns:
        A :class:`ReferenceContext` for this moment.

    Raises:
        ConfigError: If *timezone_name* is not a known IANA timezone.
    """
    if timezone_name:
        try:
            tz = ZoneInfo(timezone_name)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ConfigError(f"Unknown timezone: {timezone_name!r}") from exc
        now = datetime.now(tz)
        display_name = timezone_name
    else:
        now = datetime.now().astimezone()
        display_name = now.tzname() or format_utc_offset(now.utcoffset())

    context = ReferenceContext(now=now.replace(microsecond=0), timezone_name=display_name)
    logger.debug(
        "Reference context: %s (%s %s)",
        context.now.isoformat(),
        context.timezone_name,
        context.timezone_offset,
    )
    return context
