"""iCalendar (RFC 5545) writer for validated event records.

Serializes :class:`~event_snap.models.event.EventRecord` values into a
``VCALENDAR`` document with one ``VEVENT`` per record:

- a globally unique ``UID`` per event
- ``DTSTAMP`` / ``DTSTART`` / ``DTEND`` in UTC (``YYYYMMDDTHHMMSSZ``)
- text values escaped and lines folded at 75 octets, CRLF line endings

The default 1-hour duration for candidates that lack an end time is applied
here, at the file boundary, by :func:`fill_default_end`.  The extraction
validator itself treats a missing end as a violation.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterable
from datetime import datetime, timedelta, timezone
from pathlib import Path

from event_snap.models.event import CandidateEventProperties, EventRecord, parse_timestamp

logger = logging.getLogger(__name__)

PRODUCT_ID = "-//event-snap//Text to Calendar//EN"
UID_DOMAIN = "event-snap"
DEFAULT_DURATION = timedelta(hours=1)

_MAX_LINE_OCTETS = 75
_CRLF = "\r\n"


def escape_text(text: str) -> str:
    """Escape a TEXT value (backslash, semicolon, comma, newline)."""
    return (
        text.replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\r\n", "\\n")
        .replace("\n", "\\n")
        .replace("\r", "")
    )


def fold_line(line: str) -> str:
    """Fold a content line so no physical line exceeds 75 octets.

    Continuation lines start with a single space.  Multi-byte UTF-8
    characters are never split.
    """
    if len(line.encode("utf-8")) <= _MAX_LINE_OCTETS:
        return line

    parts: list[str] = []
    current = ""
    for char in line:
        # The leading space of a continuation line counts toward the limit.
        if len((current + char).encode("utf-8")) > _MAX_LINE_OCTETS:
            parts.append(current)
            current = " "
        current += char
    parts.append(current)
    return _CRLF.join(parts)


def format_utc(dt: datetime) -> str:
    """Format an aware datetime as an RFC 5545 UTC date-time."""
    return dt.astimezone(timezone.utc).strftime("%Y%m%dT%H%M%SZ")


def generate_uid() -> str:
    return f"{uuid.uuid4()}@{UID_DOMAIN}"


def fill_default_end(candidate: CandidateEventProperties) -> CandidateEventProperties:
    """Return *candidate* with ``end = start + 1 hour`` if its end is missing.

    Candidates that already have an end, or whose start is missing or
    unparseable, are returned unchanged.
    """
    if candidate.end is not None or candidate.start is None:
        return candidate
    try:
        start = parse_timestamp(candidate.start)
    except ValueError:
        return candidate
    return candidate.model_copy(update={"end": (start + DEFAULT_DURATION).isoformat()})


def _event_lines(record: EventRecord, stamp: datetime) -> list[str]:
    lines = [
        "BEGIN:VEVENT",
        f"UID:{generate_uid()}",
        f"DTSTAMP:{format_utc(stamp)}",
        f"DTSTART:{format_utc(record.start_time)}",
        f"DTEND:{format_utc(record.end_time)}",
        f"SUMMARY:{escape_text(record.title)}",
    ]
    if record.description:
        lines.append(f"DESCRIPTION:{escape_text(record.description)}")
    if record.location:
        lines.append(f"LOCATION:{escape_text(record.location)}")
    lines.extend(["STATUS:CONFIRMED", "END:VEVENT"])
    return lines


def build_calendar(records: Iterable[EventRecord], now: datetime | None = None) -> str:
    """Serialize *records* into an iCalendar document.

    Args:
        records: Validated event records.
        now: Timestamp for ``DTSTAMP``; defaults to the current UTC time.

    Returns:
        The ``.ics`` document text with CRLF line endings.
    """
    stamp = now or datetime.now(timezone.utc)
    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:{PRODUCT_ID}",
        "CALSCALE:GREGORIAN",
        "METHOD:PUBLISH",
    ]
    for record in records:
        lines.extend(_event_lines(record, stamp))
    lines.append("END:VCALENDAR")
    return _CRLF.join(fold_line(line) for line in lines) + _CRLF


def write_ics_file(records: Iterable[EventRecord], path: str | Path) -> Path:
    """Write *records* to an ``.ics`` file at *path*.

    Parent directories are created as needed.

    Returns:
        The path written.

    Raises:
        ValueError: If *records* is empty.
    """
    records = list(records)
    if not records:
        raise ValueError("At least one event is required to write a calendar file")

    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(build_calendar(records), encoding="utf-8", newline="")

    logger.info("Wrote %d event(s) to %s", len(records), target)
    return target
