"""Unit tests for the event models in ``event_snap.models.event``."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from event_snap.models.event import (
    CandidateEventProperties,
    EventRecord,
    lookup_field,
    parse_timestamp,
)

_PLUS_TWO = timezone(timedelta(hours=2))


def _record(**overrides: object) -> EventRecord:
    values: dict[str, object] = {
        "title": "Team meeting",
        "start_time": "2025-05-28T10:00:00+02:00",
        "end_time": "2025-05-28T12:00:00+02:00",
    }
    values.update(overrides)
    return EventRecord(**values)


# ---------------------------------------------------------------------------
# parse_timestamp / lookup_field
# ---------------------------------------------------------------------------


class TestParseTimestamp:
    """Tests for ISO 8601 timestamp parsing."""

    def test_offset_timestamp(self) -> None:
        parsed = parse_timestamp("2025-05-28T14:00:00+02:00")

        assert parsed == datetime(2025, 5, 28, 14, 0, tzinfo=_PLUS_TWO)

    def test_zulu_suffix_accepted(self) -> None:
        parsed = parse_timestamp("2025-05-28T12:00:00Z")

        assert parsed.utcoffset() == timedelta(0)

    def test_naive_timestamp_rejected(self) -> None:
        with pytest.raises(ValueError, match="no UTC offset"):
            parse_timestamp("2025-05-28T14:00:00")

    def test_garbage_rejected(self) -> None:
        with pytest.raises(ValueError):
            parse_timestamp("next tuesday")


class TestLookupField:
    """Capitalized keys take precedence over lowercase ones."""

    def test_capitalized_wins(self) -> None:
        assert lookup_field({"Summary": "A", "summary": "B"}, "Summary", "summary") == "A"

    def test_lowercase_fallback(self) -> None:
        assert lookup_field({"summary": "B"}, "Summary", "summary") == "B"

    def test_null_capitalized_falls_through(self) -> None:
        assert lookup_field({"Summary": None, "summary": "B"}, "Summary", "summary") == "B"


# ---------------------------------------------------------------------------
# CandidateEventProperties
# ---------------------------------------------------------------------------


class TestCandidateEventProperties:
    """Tests for the unvalidated candidate model."""

    def test_from_json_object_capitalized(self) -> None:
        candidate = CandidateEventProperties.from_json_object(
            {
                "Summary": "Dentist",
                "Description": "Checkup",
                "Location": "Main St",
                "Start": "2025-06-03T14:30:00+02:00",
                "End": "2025-06-03T15:30:00+02:00",
            }
        )

        assert candidate.summary == "Dentist"
        assert candidate.description == "Checkup"
        assert candidate.location == "Main St"
        assert candidate.start == "2025-06-03T14:30:00+02:00"
        assert candidate.end == "2025-06-03T15:30:00+02:00"

    def test_from_json_object_mixed_case_precedence(self) -> None:
        """Capitalized wins, lowercase fills the gaps."""
        candidate = CandidateEventProperties.from_json_object(
            {"Summary": "Upper", "summary": "lower", "start": "2025-06-03T14:30:00+02:00"}
        )

        assert candidate.summary == "Upper"
        assert candidate.start == "2025-06-03T14:30:00+02:00"
        assert candidate.end is None

    def test_unknown_keys_ignored(self) -> None:
        candidate = CandidateEventProperties.from_json_object(
            {"Summary": "Lunch", "confidence": "high"}
        )

        assert candidate.summary == "Lunch"

    def test_blank_optional_fields_become_none(self) -> None:
        candidate = CandidateEventProperties.from_json_object(
            {"Summary": "Lunch", "Description": "  ", "Location": ""}
        )

        assert candidate.description is None
        assert candidate.location is None

    def test_non_string_field_rejected(self) -> None:
        with pytest.raises(ValueError, match="'Start' must be a string"):
            CandidateEventProperties.from_json_object({"Summary": "Lunch", "Start": 12})

    def test_empty_object_gives_all_none(self) -> None:
        candidate = CandidateEventProperties.from_json_object({})

        assert candidate == CandidateEventProperties()
        assert not candidate.is_complete

    def test_to_json_omits_none_and_capitalizes(self) -> None:
        candidate = CandidateEventProperties(summary="Lunch", start="2025-06-03T12:00:00+02:00")

        assert candidate.to_json() == {"Summary": "Lunch", "Start": "2025-06-03T12:00:00+02:00"}

    def test_from_event_record(self) -> None:
        record = _record(location="Room A")

        candidate = CandidateEventProperties.from_event_record(record)

        assert candidate.summary == "Team meeting"
        assert candidate.location == "Room A"
        assert candidate.start == "2025-05-28T10:00:00+02:00"
        assert candidate.is_complete

    def test_candidate_is_frozen(self) -> None:
        candidate = CandidateEventProperties(summary="Lunch")

        with pytest.raises(ValidationError):
            candidate.summary = "Dinner"  # type: ignore[misc]


# ---------------------------------------------------------------------------
# EventRecord
# ---------------------------------------------------------------------------


class TestEventRecord:
    """Tests for the validated record model."""

    def test_strings_parsed_to_aware_datetimes(self) -> None:
        record = _record()

        assert record.start_time == datetime(2025, 5, 28, 10, 0, tzinfo=_PLUS_TWO)
        assert record.duration == timedelta(hours=2)

    def test_datetime_objects_accepted(self) -> None:
        start = datetime(2025, 5, 28, 10, 0, tzinfo=_PLUS_TWO)

        record = _record(start_time=start, end_time=start + timedelta(hours=1))

        assert record.end_time.hour == 11

    def test_blank_title_rejected(self) -> None:
        with pytest.raises(ValidationError, match="Title cannot be empty"):
            _record(title="   ")

    def test_naive_datetime_rejected(self) -> None:
        with pytest.raises(ValidationError, match="UTC offset"):
            _record(start_time=datetime(2025, 5, 28, 10, 0))

    @pytest.mark.parametrize(
        "end",
        ["2025-05-28T10:00:00+02:00", "2025-05-28T09:00:00+02:00"],
        ids=["equal", "before"],
    )
    def test_end_must_follow_start(self, end: str) -> None:
        with pytest.raises(ValidationError, match="End time must be after start time"):
            _record(end_time=end)

    def test_offsets_compared_as_instants(self) -> None:
        """11:00+02:00 is after 08:30Z even though 08:30 < 11:00 on the clock."""
        record = _record(
            start_time="2025-05-28T08:30:00Z",
            end_time="2025-05-28T11:00:00+02:00",
        )

        assert record.duration == timedelta(minutes=30)

    def test_with_changes_revalidates(self) -> None:
        record = _record()

        moved = record.with_changes(location="Room B")

        assert moved.location == "Room B"
        assert record.location is None
        with pytest.raises(ValidationError):
            record.with_changes(end_time="2025-05-28T09:00:00+02:00")
