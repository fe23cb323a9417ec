"""Prompt builders for the Gemini event-extraction pipeline.

Constructs the ordered message sequence that steers the model toward one
strict JSON output shape:

1. a system instruction (:func:`build_system_prompt`)
2. two few-shot exchanges whose dates are computed from the reference date
   (:func:`build_few_shot_examples`)
3. the user's event text

Everything here is a pure data-to-message transformation with no I/O.
"""

from __future__ import annotations

import enum
import json
from dataclasses import dataclass
from datetime import date, timedelta

from event_snap.models.context import ReferenceContext
from event_snap.parser import EVENTS_KEY


class ExtractionMode(str, enum.Enum):
    """Whether the caller expects one event or several."""

    SINGLE = "single"
    MULTIPLE = "multiple"


@dataclass(frozen=True)
class PromptMessage:
    """One message in the prompt sequence.

    Attributes:
        role: ``"system"``, ``"user"`` or ``"assistant"``.
        content: The message text.
    """

    role: str
    content: str


# Phrase -> default interpretation table, rendered verbatim into the prompt.
EDGE_CASE_DEFAULTS: tuple[tuple[str, str], ...] = (
    ("around 4pm", "treat as 16:00"),
    ("by 3pm", "treat as a window ending at 15:00 (14:00 to 15:00)"),
    ("early morning", "default to 08:00"),
    ("in the afternoon", "default to 14:00"),
    ("evening", "default to 18:00"),
    ("this weekend", "the upcoming Saturday, 10:00 to 11:00"),
    ("end of the month", "the last calendar day of the month, 17:00 to 18:00"),
    ("early next week", "Monday or Tuesday of the upcoming week"),
    ("late next week", "Thursday or Friday of the upcoming week"),
)

DEFAULT_DURATION_HOURS = 1
DEFAULT_START_HOUR = 9

_EVENT_SHAPE = """\
{
  "Summary": "event title",
  "Description": "additional details (optional)",
  "Location": "event location (optional)",
  "Start": "ISO 8601 datetime string with timezone offset",
  "End": "ISO 8601 datetime string with timezone offset"
}"""


def _format_edge_cases() -> str:
    return "\n".join(f'- "{phrase}" -> {rule}' for phrase, rule in EDGE_CASE_DEFAULTS)


def _output_format_section(mode: ExtractionMode, offset: str) -> str:
    if mode is ExtractionMode.SINGLE:
        return f"""\
You MUST ALWAYS return ONE valid JSON object using this exact structure:

{_EVENT_SHAPE}

Never return a list. Always return a single JSON object per input."""

    envelope_example = json.dumps(
        {
            EVENTS_KEY: [
                {
                    "Summary": "Event 1 title",
                    "Description": "Details for event 1",
                    "Location": "Location 1",
                    "Start": f"2025-06-15T10:00:00{offset}",
                    "End": f"2025-06-15T11:00:00{offset}",
                },
                {
                    "Summary": "Event 2 title",
                    "Description": "Details for event 2",
                    "Location": "Location 2",
                    "Start": f"2025-06-16T14:00:00{offset}",
                    "End": f"2025-06-16T15:00:00{offset}",
                },
            ]
        },
        indent=2,
    )
    return f"""\
You MUST ALWAYS return ONE valid JSON object. This object MUST contain a
single key "{EVENTS_KEY}" whose value is an array of event objects. Each object
in the array MUST use this exact structure:

{_EVENT_SHAPE}

Example:

{envelope_example}

If no events are found, return an empty array: {{"{EVENTS_KEY}": []}}"""


def _steps_section(mode: ExtractionMode) -> str:
    if mode is ExtractionMode.SINGLE:
        return """\
1. Understand the input and identify every time-related phrase.
2. Resolve dates and times against the context above ("tomorrow",
   "next Tuesday", vague phrases from the defaults table).
3. Identify the core details: title, date/time, optional location and notes.
4. Build the JSON object, applying the fallback defaults where needed.
5. Verify every field is consistent and complete before answering."""
    return """\
1. Identify each distinct calendar event. Distinct times, dates or locations
   indicate distinct events.
2. For each event:
   a. identify its time-related phrases,
   b. resolve its date and time against the context above,
   c. identify its title, optional location and notes,
   d. build its JSON object, applying the fallback defaults where needed.
3. Collect every event object into the "events" array, in the order the
   events appear in the input.
4. Verify every field of every event before answering."""


def _prohibitions_section(mode: ExtractionMode) -> str:
    common = """\
- Do NOT return invalid or incomplete JSON.
- Do NOT omit the required fields (Summary, Start, End).
- Do NOT guess a location that is not mentioned.
- Do NOT use UTC ("Z") timestamps or omit the timezone offset.
- Do NOT leave relative phrases (e.g. "tomorrow", "next week") in the output;
  always resolve them to a concrete calendar date and time."""
    if mode is ExtractionMode.SINGLE:
        return common
    return (
        common
        + """
- Do NOT merge separate events into one object. Events that differ in time,
  date or location are separate events.
- Do NOT collapse the input into a one-element array. The input is expected
  to contain several events; return an empty array only when there are none."""
    )


def build_system_prompt(context: ReferenceContext, mode: ExtractionMode) -> str:
    """Build the system instruction for an extraction call.

    Args:
        context: Reference date, time and timezone for resolving relative
            phrases.
        mode: Single- or multi-event extraction.

    Returns:
        The complete system prompt string.
    """
    offset = context.timezone_offset
    today = context.reference_date.strftime("%A, %B %d, %Y")
    current_time = context.reference_time.strftime("%H:%M")

    return f"""\
You are a calendar event extraction agent. Your job is to parse natural
language text into structured JSON event data with extreme accuracy, using
smart defaults and the user's context.

## Context

- Today's date: {today}
- Current time: {current_time}
- User timezone: {context.timezone_name} (UTC{offset})

## Output Format

{_output_format_section(mode, offset)}

## Field Rules

1. Summary: MUST contain the main purpose or name of the event.
2. Description: optional. Include relevant secondary details (purpose,
   attendees, notes, links).
3. Location: optional. Only include it if a location is clearly mentioned.
4. Start / End:
   - Use ISO 8601 with the explicit offset {offset}
     (e.g. "2025-05-28T14:00:00{offset}").
   - If no end time is given, assume a duration of {DEFAULT_DURATION_HOURS} hour.
   - If only a date is given, start at {DEFAULT_START_HOUR:02d}:00 local time.
   - Always use the user's timezone ({context.timezone_name}).

## Steps

{_steps_section(mode)}

## Defaults for Vague Phrases

{_format_edge_cases()}

If the date or time of an event cannot be reasonably resolved, still return
the event: note the ambiguity in its Description and set it to today at
{DEFAULT_START_HOUR:02d}:00. Never omit an event because its time is unclear.

## What Not To Do

{_prohibitions_section(mode)}
"""


# ---------------------------------------------------------------------------
# Few-shot examples
# ---------------------------------------------------------------------------

_EXAMPLE_MEETING_TEXT = "Team meeting tomorrow at 10am for 2 hours in conference room A"
_EXAMPLE_DENTIST_TEXT = "Dentist appointment next Tuesday at 2:30pm"
_EXAMPLE_COMBINED_TEXT = (
    "Team meeting tomorrow at 10am for 2 hours in conference room A. "
    "Also, dentist appointment next Tuesday at 2:30pm."
)
_EXAMPLE_NO_EVENTS_TEXT = "Thanks again for the lovely dinner yesterday, it was great to see everyone!"


def next_weekday(after: date, weekday: int) -> date:
    """Return the first date strictly after *after* falling on *weekday* (Mon=0)."""
    days_ahead = (weekday - after.weekday()) % 7 or 7
    return after + timedelta(days=days_ahead)


def _meeting_example(context: ReferenceContext) -> dict[str, str | None]:
    tomorrow = context.reference_date + timedelta(days=1)
    start = context.at(tomorrow, 10)
    return {
        "Summary": "Team meeting",
        "Description": "Weekly team meeting to discuss project progress",
        "Location": "Conference room A",
        "Start": start.isoformat(),
        "End": (start + timedelta(hours=2)).isoformat(),
    }


def _dentist_example(context: ReferenceContext) -> dict[str, str | None]:
    tuesday = next_weekday(context.reference_date, 1)
    start = context.at(tuesday, 14, 30)
    return {
        "Summary": "Dentist appointment",
        "Description": None,
        "Location": None,
        "Start": start.isoformat(),
        "End": (start + timedelta(hours=DEFAULT_DURATION_HOURS)).isoformat(),
    }


def build_few_shot_examples(
    context: ReferenceContext,
    mode: ExtractionMode,
) -> list[PromptMessage]:
    """Build the two few-shot exchanges for *mode*.

    Example dates are a pure function of ``context.reference_date``:
    "tomorrow" is the reference date plus one day, "next Tuesday" is the
    first Tuesday strictly after it.

    Returns:
        Four messages: user, assistant, user, assistant.
    """
    meeting = _meeting_example(context)
    dentist = _dentist_example(context)

    if mode is ExtractionMode.SINGLE:
        exchanges = [
            (_EXAMPLE_MEETING_TEXT, meeting),
            (_EXAMPLE_DENTIST_TEXT, dentist),
        ]
    else:
        exchanges = [
            (_EXAMPLE_COMBINED_TEXT, {EVENTS_KEY: [meeting, dentist]}),
            (_EXAMPLE_NO_EVENTS_TEXT, {EVENTS_KEY: []}),
        ]

    messages: list[PromptMessage] = []
    for user_text, answer in exchanges:
        messages.append(PromptMessage(role="user", content=user_text))
        messages.append(PromptMessage(role="assistant", content=json.dumps(answer)))
    return messages


def build_messages(
    text: str,
    mode: ExtractionMode,
    context: ReferenceContext,
) -> list[PromptMessage]:
    """Build the full prompt sequence for one extraction call.

    Args:
        text: The user's event text (already checked to be non-blank).
        mode: Single- or multi-event extraction.
        context: Reference context for this call.

    Returns:
        System message, four few-shot messages, then the user text.
    """
    return [
        PromptMessage(role="system", content=build_system_prompt(context, mode)),
        *build_few_shot_examples(context, mode),
        PromptMessage(role="user", content=text),
    ]
