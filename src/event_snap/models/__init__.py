"""Data models for event-snap."""

from __future__ import annotations

from event_snap.models.context import ReferenceContext, format_utc_offset
from event_snap.models.event import CandidateEventProperties, EventRecord, parse_timestamp
from event_snap.models.extraction import BatchExtraction, ValidatedCandidate

__all__ = [
    "BatchExtraction",
    "CandidateEventProperties",
    "EventRecord",
    "ReferenceContext",
    "ValidatedCandidate",
    "format_utc_offset",
    "parse_timestamp",
]
