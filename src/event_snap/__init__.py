"""event-snap: natural-language text to calendar events.

Prompts Google Gemini to extract structured events from free-form text,
validates them, and writes them to iCalendar files.
"""

from __future__ import annotations

from event_snap.config import Settings, load_settings
from event_snap.exceptions import (
    ConfigError,
    ExtractionError,
    InvalidInputError,
    ParseError,
    ProviderRejectionError,
    ProviderUnexpectedResponseError,
    RetriesExhaustedError,
    TransientNetworkError,
)
from event_snap.models import (
    BatchExtraction,
    CandidateEventProperties,
    EventRecord,
    ReferenceContext,
    ValidatedCandidate,
)
from event_snap.parser import parse_multiple_events, parse_single_event
from event_snap.pipeline import (
    extract_event_batch,
    extract_multiple_events,
    extract_single_event,
)
from event_snap.prompts import ExtractionMode, build_messages
from event_snap.validation import check_candidate, promote, validate_candidate

__version__ = "0.1.0"

__all__ = [
    "BatchExtraction",
    "CandidateEventProperties",
    "ConfigError",
    "EventRecord",
    "ExtractionError",
    "ExtractionMode",
    "InvalidInputError",
    "ParseError",
    "ProviderRejectionError",
    "ProviderUnexpectedResponseError",
    "ReferenceContext",
    "RetriesExhaustedError",
    "Settings",
    "TransientNetworkError",
    "ValidatedCandidate",
    "build_messages",
    "check_candidate",
    "extract_event_batch",
    "extract_multiple_events",
    "extract_single_event",
    "load_settings",
    "parse_multiple_events",
    "parse_single_event",
    "promote",
    "validate_candidate",
]
