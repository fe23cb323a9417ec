"""Pydantic models for extracted calendar events.

Defines the two shapes an event takes on its way through the pipeline:

- :class:`CandidateEventProperties` -- raw model output for a single event
  (every field optional, datetimes as ISO 8601 **strings**).
- :class:`EventRecord` -- the validated, calendar-ready record with parsed,
  timezone-aware ``datetime`` objects.  Consumed by the ICS writer.

Both models are frozen.  Edits produce a new instance.
"""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timedelta
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

# (field name, capitalized JSON key).  The capitalized key wins when both
# spellings are present in the same object.
_FIELD_KEYS: tuple[tuple[str, str], ...] = (
    ("summary", "Summary"),
    ("description", "Description"),
    ("location", "Location"),
    ("start", "Start"),
    ("end", "End"),
)


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO 8601 timestamp that carries an explicit UTC offset.

    Args:
        value: Timestamp text such as ``"2025-05-28T14:00:00+02:00"``.
            A trailing ``Z`` is accepted as ``+00:00``.

    Returns:
        A timezone-aware ``datetime``.

    Raises:
        ValueError: If *value* is not ISO 8601 or has no UTC offset.
    """
    parsed = datetime.fromisoformat(value.strip())
    if parsed.tzinfo is None or parsed.utcoffset() is None:
        raise ValueError(f"timestamp {value!r} has no UTC offset")
    return parsed


def lookup_field(data: Mapping[str, Any], capitalized: str, lowercase: str) -> Any:
    """Return ``data[capitalized]``, falling back to ``data[lowercase]``.

    A capitalized key that is present but ``null`` falls through to the
    lowercase spelling.
    """
    value = data.get(capitalized)
    if value is None:
        value = data.get(lowercase)
    return value


# ---------------------------------------------------------------------------
# CandidateEventProperties -- unvalidated model output
# ---------------------------------------------------------------------------


class CandidateEventProperties(BaseModel):
    """A single event as emitted by the language model, before validation.

    Attributes:
        summary: Event title.
        description: Secondary details, or ``None``.
        location: Event location, or ``None``.
        start: ISO 8601 start timestamp text.
        end: ISO 8601 end timestamp text.
    """

    model_config = ConfigDict(frozen=True)

    summary: str | None = None
    description: str | None = None
    location: str | None = None
    start: str | None = None
    end: str | None = None

    @classmethod
    def from_json_object(cls, data: Mapping[str, Any]) -> CandidateEventProperties:
        """Build a candidate from one decoded JSON object.

        Keys are matched with :func:`lookup_field`: ``Summary`` before
        ``summary``, ``Start`` before ``start``, and so on.  Unknown keys
        are ignored.  Blank ``description`` / ``location`` values are
        normalised to ``None``.

        Raises:
            ValueError: If a recognised field holds a non-string value.
        """
        values: dict[str, str | None] = {}
        for field_name, capitalized in _FIELD_KEYS:
            value = lookup_field(data, capitalized, field_name)
            if value is not None and not isinstance(value, str):
                raise ValueError(
                    f"Field {capitalized!r} must be a string, got {type(value).__name__}"
                )
            values[field_name] = value

        for optional in ("description", "location"):
            text = values[optional]
            if text is not None and not text.strip():
                values[optional] = None

        return cls(**values)

    @classmethod
    def from_event_record(cls, record: EventRecord) -> CandidateEventProperties:
        """Convert a record back into candidate form (e.g. for editing)."""
        return cls(
            summary=record.title,
            description=record.description,
            location=record.location,
            start=record.start_time.isoformat(),
            end=record.end_time.isoformat(),
        )

    def to_json(self) -> dict[str, str]:
        """Serialize with capitalized keys, omitting ``None`` fields."""
        return {
            capitalized: getattr(self, field_name)
            for field_name, capitalized in _FIELD_KEYS
            if getattr(self, field_name) is not None
        }

    @property
    def is_complete(self) -> bool:
        """Whether the title, start and end are all present."""
        return self.summary is not None and self.start is not None and self.end is not None


# ---------------------------------------------------------------------------
# EventRecord -- validated, calendar-ready
# ---------------------------------------------------------------------------


class EventRecord(BaseModel):
    """A validated calendar event.

    Constructed only from a candidate that passed
    :func:`~event_snap.validation.validate_candidate`.  The model validators
    re-check the invariants so no instance can exist that violates them.

    Attributes:
        title: Non-blank event title.
        description: Secondary details, or ``None``.
        location: Event location, or ``None``.
        start_time: Timezone-aware event start.
        end_time: Timezone-aware event end, strictly after ``start_time``.
    """

    model_config = ConfigDict(frozen=True)

    title: str
    description: str | None = None
    location: str | None = None
    start_time: datetime
    end_time: datetime

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Title cannot be empty")
        return value

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def _parse_datetime_string(cls, value: datetime | str) -> datetime:
        """Accept ISO 8601 strings and convert them to ``datetime`` objects."""
        if isinstance(value, str):
            return parse_timestamp(value)
        return value

    @field_validator("start_time", "end_time")
    @classmethod
    def _require_offset(cls, value: datetime) -> datetime:
        if value.tzinfo is None or value.utcoffset() is None:
            raise ValueError("datetime must carry a UTC offset")
        return value

    @model_validator(mode="after")
    def _end_after_start(self) -> EventRecord:
        if self.end_time <= self.start_time:
            raise ValueError("End time must be after start time")
        return self

    @property
    def duration(self) -> timedelta:
        return self.end_time - self.start_time

    def with_changes(self, **changes: Any) -> EventRecord:
        """Return a new, re-validated record with *changes* applied."""
        return EventRecord(**{**self.model_dump(), **changes})
