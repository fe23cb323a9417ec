"""Response parser for language-model event output.

Turns the raw JSON text returned by the model into
:class:`~event_snap.models.event.CandidateEventProperties`:

- :func:`parse_single_event` expects one JSON object holding the event
  fields directly.
- :func:`parse_multiple_events` expects an envelope object whose
  ``"events"`` key holds an array of event objects.  A malformed envelope
  falls back to single-event parsing of the whole text.

Parsing is pure: identical input always yields structurally identical output.
"""

from __future__ import annotations

import json
import re
from typing import Any

from event_snap.exceptions import ParseError
from event_snap.models.event import CandidateEventProperties

EVENTS_KEY = "events"

# Matches a response wrapped in a Markdown code fence: ```json ... ```
_CODE_FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL | re.IGNORECASE)


def _decode(raw_text: str, retryable: bool = False) -> Any:
    """Strip an optional code fence and decode *raw_text* as JSON.

    Raises:
        ParseError: If the text is empty or not valid JSON.
    """
    if not raw_text or not raw_text.strip():
        raise ParseError(
            "Empty response from language model",
            raw_response=raw_text or "",
            retryable=retryable,
        )

    text = raw_text.strip()
    fenced = _CODE_FENCE_RE.match(text)
    if fenced:
        text = fenced.group(1)

    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise ParseError(
            f"Invalid JSON: {exc}", raw_response=raw_text, retryable=retryable
        ) from exc


def _candidate_from_object(data: Any, raw_text: str, retryable: bool) -> CandidateEventProperties:
    if not isinstance(data, dict):
        raise ParseError(
            f"Expected a JSON object, got {type(data).__name__}",
            raw_response=raw_text,
            retryable=retryable,
        )
    try:
        return CandidateEventProperties.from_json_object(data)
    except ValueError as exc:
        raise ParseError(
            f"Invalid event object: {exc}", raw_response=raw_text, retryable=retryable
        ) from exc


def parse_single_event(raw_text: str) -> CandidateEventProperties:
    """Parse a single-event response.

    Recognised keys are matched case-insensitively with the capitalized
    spelling taking precedence (``Summary`` over ``summary``).

    Args:
        raw_text: The raw model output, expected to be one JSON object.

    Returns:
        Exactly one candidate.

    Raises:
        ParseError: If the text is not a JSON object or a field has the
            wrong type.  Never retryable.
    """
    data = _decode(raw_text)
    return _candidate_from_object(data, raw_text, retryable=False)


def _parse_fallback(raw_text: str) -> CandidateEventProperties:
    """Interpret a malformed envelope as one bare event object.

    Any JSON object is accepted, exactly as in single-event mode.  Missing
    fields are left for the validator to report.
    """
    data = _decode(raw_text, retryable=True)
    return _candidate_from_object(data, raw_text, retryable=True)


def parse_multiple_events(raw_text: str) -> list[CandidateEventProperties]:
    """Parse a multi-event response.

    Behaviour:

    - envelope with an empty ``"events"`` array -> ``[]`` (no events found)
    - envelope with a non-empty array -> one candidate per element, in order
    - missing/non-array ``"events"`` key, or text that is not JSON at all ->
      the whole text is parsed as a single event and returned as a
      one-element list

    Args:
        raw_text: The raw model output.

    Returns:
        Zero or more candidates.

    Raises:
        ParseError: With ``retryable=True`` when neither the envelope nor the
            single-event fallback can be parsed; with ``retryable=False``
            when an array element is not a JSON object.
    """
    try:
        data = _decode(raw_text, retryable=True)
    except ParseError:
        return [_parse_fallback(raw_text)]

    events = data.get(EVENTS_KEY) if isinstance(data, dict) else None
    if not isinstance(events, list):
        return [_parse_fallback(raw_text)]

    candidates: list[CandidateEventProperties] = []
    for index, element in enumerate(events):
        if not isinstance(element, dict):
            raise ParseError(
                f"Invalid event format at position {index}: expected a JSON object",
                raw_response=raw_text,
                retryable=False,
            )
        candidates.append(_candidate_from_object(element, raw_text, retryable=False))
    return candidates
