"""Reference context used to resolve relative date expressions.

A :class:`ReferenceContext` is sampled once at the start of each extraction
call (see :func:`event_snap.clock.capture_reference_context`) and is never
persisted.  It is plain data: everything else is derived from ``now``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone


def format_utc_offset(offset: timedelta) -> str:
    """Format a UTC offset as a signed ``+HH:MM`` / ``-HH:MM`` string."""
    total_minutes = int(offset.total_seconds() // 60)
    sign = "+" if total_minutes >= 0 else "-"
    hours, minutes = divmod(abs(total_minutes), 60)
    return f"{sign}{hours:02d}:{minutes:02d}"


@dataclass(frozen=True)
class ReferenceContext:
    """The "now" against which the model resolves relative phrases.

    Attributes:
        now: Timezone-aware current timestamp.
        timezone_name: Display name of the user's timezone
            (e.g. ``"Europe/Berlin"`` or ``"CEST"``).
    """

    now: datetime
    timezone_name: str

    def __post_init__(self) -> None:
        if self.now.tzinfo is None or self.now.utcoffset() is None:
            raise ValueError("ReferenceContext.now must be timezone-aware")

    @property
    def reference_date(self) -> date:
        return self.now.date()

    @property
    def reference_time(self) -> time:
        return self.now.timetz().replace(microsecond=0)

    @property
    def utc_offset(self) -> timedelta:
        offset = self.now.utcoffset()
        assert offset is not None  # guaranteed by __post_init__
        return offset

    @property
    def timezone_offset(self) -> str:
        """Signed ``±HH:MM`` offset, e.g. ``"+02:00"``."""
        return format_utc_offset(self.utc_offset)

    @property
    def fixed_offset(self) -> timezone:
        """A fixed-offset tzinfo matching :attr:`timezone_offset`."""
        return timezone(self.utc_offset)

    def at(self, day: date, hour: int, minute: int = 0) -> datetime:
        """Return *day* at ``hour:minute`` in the context's fixed offset."""
        return datetime.combine(day, time(hour, minute), tzinfo=self.fixed_offset)
