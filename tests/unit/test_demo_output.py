"""Unit tests for the console report formatter."""

from __future__ import annotations

from pathlib import Path

import pytest

from event_snap.demo_output import (
    ExtractionReport,
    format_extraction_report,
    format_time_range,
    print_extraction_report,
)
from event_snap.models.context import ReferenceContext
from event_snap.models.event import CandidateEventProperties, EventRecord
from event_snap.models.extraction import ValidatedCandidate


def _valid(title: str = "Dentist", **extra: str) -> ValidatedCandidate:
    candidate = CandidateEventProperties(
        summary=title,
        start="2025-05-28T14:00:00+02:00",
        end="2025-05-28T15:00:00+02:00",
        **extra,
    )
    record = EventRecord(
        title=title,
        start_time=candidate.start,
        end_time=candidate.end,
        **extra,
    )
    return ValidatedCandidate(candidate=candidate, record=record)


def _invalid() -> ValidatedCandidate:
    return ValidatedCandidate(
        candidate=CandidateEventProperties(start="2025-05-28T14:00:00+02:00"),
        violations=("Title/summary is required", "End time is required"),
    )


class TestFormatExtractionReport:
    def test_sections_present(self, reference_context: ReferenceContext) -> None:
        report = ExtractionReport(context=reference_context, results=[_valid()])

        output = format_extraction_report(report)

        assert "EVENT SNAP: TEXT TO CALENDAR" in output
        assert "--- Reference Context ---" in output
        assert "Now: Tuesday 2025-05-27, 09:00" in output
        assert "Timezone: Europe/Berlin (UTC+02:00)" in output
        assert "Mode: single event" in output
        assert "--- Events ---" in output
        assert "--- Summary ---" in output

    def test_valid_event_details(self, reference_context: ReferenceContext) -> None:
        report = ExtractionReport(
            context=reference_context,
            results=[_valid(location="Main St 4", description="Bring X-rays")],
        )

        output = format_extraction_report(report)

        assert "[OK] Event 1: Dentist" in output
        assert "When: Wed 2025-05-28 14:00 - 15:00 (+02:00)" in output
        assert "Where: Main St 4" in output
        assert "Notes: Bring X-rays" in output

    def test_invalid_event_lists_violations(self, reference_context: ReferenceContext) -> None:
        report = ExtractionReport(
            context=reference_context,
            results=[_valid(), _invalid()],
            multiple=True,
        )

        output = format_extraction_report(report)

        assert "[INVALID] Event 2: (untitled)" in output
        assert "! Title/summary is required" in output
        assert "End: -" in output
        assert "Valid: 1" in output
        assert "Rejected: 1" in output

    def test_strict_note(self, reference_context: ReferenceContext) -> None:
        report = ExtractionReport(
            context=reference_context,
            results=[_valid(), _invalid()],
            multiple=True,
            strict=True,
        )

        assert "Strict mode: no events exported" in format_extraction_report(report)

    def test_no_events(self, reference_context: ReferenceContext) -> None:
        report = ExtractionReport(context=reference_context, multiple=True)

        output = format_extraction_report(report)

        assert "No calendar events found in the text." in output
        assert "Events found: 0" in output

    def test_calendar_file_and_warnings(self, reference_context: ReferenceContext) -> None:
        report = ExtractionReport(
            context=reference_context,
            results=[_valid()],
            ics_path=Path("out/events.ics"),
            warnings=["something to note"],
            duration_seconds=1.234,
        )

        output = format_extraction_report(report)

        assert f"Calendar file: {Path('out/events.ics')}" in output
        assert "- something to note" in output
        assert "Duration: 1.2s" in output

    def test_print_writes_to_stdout(
        self, reference_context: ReferenceContext, capsys: pytest.CaptureFixture[str]
    ) -> None:
        print_extraction_report(ExtractionReport(context=reference_context))

        assert "EVENT SNAP" in capsys.readouterr().out


class TestFormatTimeRange:
    def test_multi_day_range_shows_both_dates(self) -> None:
        record = EventRecord(
            title="Conference",
            start_time="2025-05-28T09:00:00-07:00",
            end_time="2025-05-29T17:00:00-07:00",
        )

        assert format_time_range(record) == "Wed 2025-05-28 09:00 - Thu 2025-05-29 17:00 (-07:00)"

    def test_end_shown_in_start_offset(self) -> None:
        """A UTC end is converted so both times share the printed offset."""
        record = EventRecord(
            title="Standup",
            start_time="2025-05-28T10:00:00+02:00",
            end_time="2025-05-28T09:30:00Z",
        )

        assert format_time_range(record) == "Wed 2025-05-28 10:00 - 11:30 (+02:00)"
