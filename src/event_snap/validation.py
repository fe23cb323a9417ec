"""Validation of candidate events and promotion to :class:`EventRecord`.

The validator is a pure function of its input.  It collects every violation
rather than stopping at the first, in this order:

1. title/summary present and non-blank
2. start present
3. end present (a missing end is a violation here; the 1-hour default is
   applied only by the ICS writer)
4. start and end parse as ISO 8601 timestamps with a UTC offset
5. end strictly after start (equal times report "must be different",
   earlier times report "must be after", never both)
"""

from __future__ import annotations

import logging
from datetime import datetime

from pydantic import ValidationError

from event_snap.exceptions import InternalError, InvalidEventError
from event_snap.models.event import CandidateEventProperties, EventRecord, parse_timestamp
from event_snap.models.extraction import ValidatedCandidate

logger = logging.getLogger(__name__)

MSG_TITLE_REQUIRED = "Title/summary is required"
MSG_START_REQUIRED = "Start time is required"
MSG_END_REQUIRED = "End time is required"
MSG_INVALID_DATE = "Invalid date format"
MSG_END_BEFORE_START = "End time must be after start time"
MSG_END_EQUALS_START = "End time must be different from start time"


def validate_candidate(candidate: CandidateEventProperties) -> list[str]:
    """Check a candidate event and return all violations.

    Args:
        candidate: The candidate parsed from the model output.

    Returns:
        Human-readable violation messages, in rule order.  An empty list
        means the candidate may be promoted.
    """
    violations: list[str] = []

    if candidate.summary is None or not candidate.summary.strip():
        violations.append(MSG_TITLE_REQUIRED)
    if candidate.start is None:
        violations.append(MSG_START_REQUIRED)
    if candidate.end is None:
        violations.append(MSG_END_REQUIRED)

    start = _parse_or_report(candidate.start, "start", violations)
    end = _parse_or_report(candidate.end, "end", violations)

    if start is not None and end is not None:
        if end == start:
            violations.append(MSG_END_EQUALS_START)
        elif end < start:
            violations.append(MSG_END_BEFORE_START)

    return violations


def _parse_or_report(
    value: str | None,
    label: str,
    violations: list[str],
) -> datetime | None:
    if value is None:
        return None
    try:
        return parse_timestamp(value)
    except ValueError as exc:
        violations.append(f"{MSG_INVALID_DATE}: {label} {exc}")
        return None


def promote(candidate: CandidateEventProperties) -> EventRecord:
    """Convert a valid candidate into an :class:`EventRecord`.

    Args:
        candidate: A candidate for which :func:`validate_candidate` returns
            no violations.

    Returns:
        The calendar-ready record.

    Raises:
        InvalidEventError: If the candidate has validation violations.
        InternalError: If the record cannot be built even though validation
            passed.
    """
    violations = validate_candidate(candidate)
    if violations:
        raise InvalidEventError(violations)

    try:
        return EventRecord(
            title=candidate.summary,
            description=candidate.description,
            location=candidate.location,
            start_time=candidate.start,
            end_time=candidate.end,
        )
    except ValidationError as exc:
        raise InternalError(
            f"Validated candidate could not be converted to a record: {exc}"
        ) from exc


def check_candidate(candidate: CandidateEventProperties) -> ValidatedCandidate:
    """Validate *candidate* and promote it when it passes.

    Returns:
        A :class:`ValidatedCandidate` with the violations and, if valid,
        the promoted record.
    """
    violations = validate_candidate(candidate)
    if violations:
        logger.info(
            "Rejected event '%s': %s",
            candidate.summary,
            "; ".join(violations),
        )
        return ValidatedCandidate(candidate=candidate, violations=tuple(violations))

    record = promote(candidate)
    logger.info(
        "Validated event '%s' | %s -> %s",
        record.title,
        record.start_time.isoformat(),
        record.end_time.isoformat(),
    )
    return ValidatedCandidate(candidate=candidate, record=record)
