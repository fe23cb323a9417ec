"""Console output formatter for extraction results.

Renders the outcome of an extraction call as structured console output:
the reference context, each extracted event (or its validation problems),
the calendar file written, and a summary.

The primary entry point is :func:`format_extraction_report`, which returns
the formatted string.  :func:`print_extraction_report` is a convenience
wrapper that writes directly to stdout.
"""

from __future__ import annotations

import sys
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from event_snap.models.context import ReferenceContext
from event_snap.models.event import EventRecord
from event_snap.models.extraction import ValidatedCandidate

_BANNER_WIDTH = 60
_SEPARATOR = "=" * _BANNER_WIDTH


@dataclass
class ExtractionReport:
    """Everything the CLI shows after one extraction call.

    Attributes:
        context: Reference context the text was resolved against.
        results: Validated candidates, in model output order.
        multiple: Whether the call ran in multi-event mode.
        strict: Whether the batch was all-or-nothing.
        ics_path: The calendar file written, if any.
        duration_seconds: Wall-clock time for the extraction call.
        warnings: Non-fatal notes gathered by the CLI.
    """

    context: ReferenceContext
    results: Sequence[ValidatedCandidate] = field(default_factory=list)
    multiple: bool = False
    strict: bool = False
    ics_path: Path | None = None
    duration_seconds: float = 0.0
    warnings: list[str] = field(default_factory=list)

    @property
    def valid_count(self) -> int:
        return sum(1 for result in self.results if result.is_valid)


def format_extraction_report(report: ExtractionReport) -> str:
    """Render an :class:`ExtractionReport` as a multi-line string."""
    lines: list[str] = [_SEPARATOR, "  EVENT SNAP: TEXT TO CALENDAR", _SEPARATOR]

    lines.append("")
    lines.append("--- Reference Context ---")
    lines.append(f"  Now: {report.context.now.strftime('%A %Y-%m-%d, %H:%M')}")
    lines.append(
        f"  Timezone: {report.context.timezone_name} (UTC{report.context.timezone_offset})"
    )
    lines.append(f"  Mode: {'multiple events' if report.multiple else 'single event'}")

    lines.append("")
    lines.append("--- Events ---")
    if not report.results:
        lines.append("  No calendar events found in the text.")
    for idx, result in enumerate(report.results, start=1):
        _append_result(lines, idx, result)

    lines.append("")
    lines.append("--- Summary ---")
    lines.append(f"  Events found: {len(report.results)}")
    lines.append(f"  Valid: {report.valid_count}")
    lines.append(f"  Rejected: {len(report.results) - report.valid_count}")
    if report.strict and report.valid_count < len(report.results):
        lines.append("  Strict mode: no events exported because at least one is invalid")
    if report.ics_path is not None:
        lines.append(f"  Calendar file: {report.ics_path}")
    for warning in report.warnings:
        lines.append(f"    - {warning}")
    lines.append(f"  Duration: {report.duration_seconds:.1f}s")
    lines.append(_SEPARATOR)

    return "\n".join(lines)


def print_extraction_report(report: ExtractionReport) -> None:
    """Format and print an :class:`ExtractionReport` to stdout."""
    sys.stdout.write(format_extraction_report(report) + "\n")


def _append_result(lines: list[str], idx: int, result: ValidatedCandidate) -> None:
    lines.append("")
    if result.record is not None:
        record = result.record
        lines.append(f"  [OK] Event {idx}: {record.title}")
        lines.append(f"    When: {format_time_range(record)}")
        if record.location:
            lines.append(f"    Where: {record.location}")
        if record.description:
            lines.append(f"    Notes: {record.description}")
        return

    candidate = result.candidate
    lines.append(f"  [INVALID] Event {idx}: {candidate.summary or '(untitled)'}")
    lines.append(f"    Start: {candidate.start or '-'}")
    lines.append(f"    End: {candidate.end or '-'}")
    for violation in result.violations:
        lines.append(f"    ! {violation}")


def format_time_range(record: EventRecord) -> str:
    """Format a record's time range in the start's offset, omitting a repeated date.

    Example: ``"Wed 2025-05-28 14:00 - 15:00 (+02:00)"``.
    """
    start = record.start_time
    end = record.end_time.astimezone(start.tzinfo)
    start_text = start.strftime("%a %Y-%m-%d %H:%M")
    if end.date() == start.date():
        end_text = end.strftime("%H:%M")
    else:
        end_text = end.strftime("%a %Y-%m-%d %H:%M")
    offset = start.strftime("%z")
    return f"{start_text} - {end_text} ({offset[:3]}:{offset[3:]})"
