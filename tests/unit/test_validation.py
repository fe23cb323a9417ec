"""Unit tests for candidate validation and promotion."""

from __future__ import annotations

import logging

import pytest

from event_snap.exceptions import InvalidEventError
from event_snap.models.event import CandidateEventProperties
from event_snap.validation import (
    MSG_END_BEFORE_START,
    MSG_END_EQUALS_START,
    MSG_END_REQUIRED,
    MSG_INVALID_DATE,
    MSG_START_REQUIRED,
    MSG_TITLE_REQUIRED,
    check_candidate,
    promote,
    validate_candidate,
)

_START = "2025-05-28T14:00:00+02:00"
_END = "2025-05-28T15:00:00+02:00"


def _candidate(**overrides: str | None) -> CandidateEventProperties:
    values: dict[str, str | None] = {"summary": "Project sync", "start": _START, "end": _END}
    values.update(overrides)
    return CandidateEventProperties(**values)


class TestValidateCandidate:
    """Every violation is collected, in rule order."""

    def test_complete_candidate_has_no_violations(self) -> None:
        assert validate_candidate(_candidate()) == []

    def test_missing_title(self) -> None:
        assert validate_candidate(_candidate(summary=None)) == [MSG_TITLE_REQUIRED]

    def test_blank_title(self) -> None:
        assert validate_candidate(_candidate(summary="   ")) == [MSG_TITLE_REQUIRED]

    def test_missing_end_is_a_violation(self) -> None:
        """No silent 1-hour default at validation time."""
        assert validate_candidate(_candidate(end=None)) == [MSG_END_REQUIRED]

    def test_everything_missing_reports_all_in_order(self) -> None:
        violations = validate_candidate(CandidateEventProperties())

        assert violations == [MSG_TITLE_REQUIRED, MSG_START_REQUIRED, MSG_END_REQUIRED]

    def test_invalid_date_names_the_field(self) -> None:
        violations = validate_candidate(_candidate(start="tomorrow at 2"))

        assert len(violations) == 1
        assert violations[0].startswith(f"{MSG_INVALID_DATE}: start")

    def test_both_dates_invalid(self) -> None:
        violations = validate_candidate(_candidate(start="soon", end="later"))

        assert [v.split(" ")[3] for v in violations] == ["start", "end"]

    def test_naive_timestamp_is_invalid(self) -> None:
        violations = validate_candidate(_candidate(end="2025-05-28T15:00:00"))

        assert violations[0].startswith(f"{MSG_INVALID_DATE}: end")

    def test_equal_times_report_only_different(self) -> None:
        assert validate_candidate(_candidate(end=_START)) == [MSG_END_EQUALS_START]

    def test_end_before_start_reports_only_after(self) -> None:
        violations = validate_candidate(_candidate(end="2025-05-28T13:00:00+02:00"))

        assert violations == [MSG_END_BEFORE_START]

    def test_same_instant_in_different_offsets_is_equal(self) -> None:
        violations = validate_candidate(_candidate(end="2025-05-28T12:00:00Z"))

        assert violations == [MSG_END_EQUALS_START]

    def test_title_and_order_violations_combined(self) -> None:
        violations = validate_candidate(
            _candidate(summary="", end="2025-05-28T13:00:00+02:00")
        )

        assert violations == [MSG_TITLE_REQUIRED, MSG_END_BEFORE_START]

    def test_validation_is_pure(self) -> None:
        candidate = _candidate(end=None)

        assert validate_candidate(candidate) == validate_candidate(candidate)
        assert candidate.end is None


class TestPromote:
    def test_promote_valid_candidate(self) -> None:
        record = promote(_candidate(location="Room 4"))

        assert record.title == "Project sync"
        assert record.location == "Room 4"
        assert record.start_time.isoformat() == _START
        assert record.end_time.isoformat() == _END

    def test_promote_invalid_raises_with_violations(self) -> None:
        with pytest.raises(InvalidEventError) as exc_info:
            promote(_candidate(summary=None, end=None))

        assert exc_info.value.violations == [MSG_TITLE_REQUIRED, MSG_END_REQUIRED]
        assert exc_info.value.kind == "validation"


class TestCheckCandidate:
    def test_valid_candidate_gets_record(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="event_snap.validation"):
            result = check_candidate(_candidate())

        assert result.is_valid
        assert result.record is not None
        assert result.violations == ()
        assert "Validated event 'Project sync'" in caplog.text

    def test_invalid_candidate_is_data_not_exception(
        self, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.INFO, logger="event_snap.validation"):
            result = check_candidate(_candidate(end=None))

        assert not result.is_valid
        assert result.record is None
        assert result.violations == (MSG_END_REQUIRED,)
        assert "Rejected event 'Project sync'" in caplog.text
