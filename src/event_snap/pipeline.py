"""Pipeline orchestrator for the text-to-calendar-event workflow.

Wires all components together for one extraction call:

1. check the input text (before any client is built or request is made)
2. sample the reference context (unless the caller supplies one)
3. build the prompt messages
4. call Gemini and parse the response (with retries)
5. validate each candidate and promote the valid ones to records

The public entry points are :func:`extract_single_event`,
:func:`extract_multiple_events` and :func:`extract_event_batch`.
"""

from __future__ import annotations

import logging

from event_snap.clock import capture_reference_context
from event_snap.config import Settings
from event_snap.exceptions import InvalidInputError
from event_snap.llm import GeminiClient
from event_snap.models.context import ReferenceContext
from event_snap.models.event import EventRecord
from event_snap.models.extraction import BatchExtraction, ValidatedCandidate
from event_snap.prompts import ExtractionMode, PromptMessage, build_messages
from event_snap.validation import check_candidate

logger = logging.getLogger(__name__)


def _require_text(text: str) -> str:
    """Return *text* stripped, or raise :class:`InvalidInputError` if blank."""
    if text is None or not text.strip():
        raise InvalidInputError("Event text cannot be empty")
    return text.strip()


def _prepare(
    text: str,
    mode: ExtractionMode,
    settings: Settings,
    context: ReferenceContext | None,
    client: GeminiClient | None,
) -> tuple[GeminiClient, list[PromptMessage]]:
    event_text = _require_text(text)
    if client is None:
        client = GeminiClient.from_settings(settings)
    if context is None:
        context = capture_reference_context(settings.timezone)

    logger.info(
        "Extracting %s event(s) from %d characters of text (reference %s %s)",
        mode.value,
        len(event_text),
        context.reference_date.isoformat(),
        context.timezone_offset,
    )
    return client, build_messages(event_text, mode, context)


async def extract_single_event(
    text: str,
    settings: Settings,
    context: ReferenceContext | None = None,
    client: GeminiClient | None = None,
) -> ValidatedCandidate:
    """Extract exactly one event from *text*.

    Args:
        text: Natural-language event description.
        settings: Settings snapshot captured at call start.
        context: Reference context; sampled from the clock when ``None``.
        client: Gemini client to use; built from *settings* when ``None``.

    Returns:
        A :class:`ValidatedCandidate`.  ``record`` holds the
        :class:`EventRecord` when the candidate is valid; otherwise
        ``violations`` lists what is wrong.

    Raises:
        InvalidInputError: If *text* is empty or whitespace-only.  Raised
            before any network call.
        ExtractionError: For configuration, provider, network (after
            retries) and parse failures.
    """
    client, messages = _prepare(text, ExtractionMode.SINGLE, settings, context, client)
    candidate = await client.extract_single(messages)
    return check_candidate(candidate)


async def extract_event_batch(
    text: str,
    settings: Settings,
    context: ReferenceContext | None = None,
    client: GeminiClient | None = None,
    strict: bool = False,
) -> BatchExtraction:
    """Extract zero or more events from *text*, keeping rejected candidates.

    Each candidate is validated independently.  By default one invalid
    candidate does not affect its siblings; with ``strict=True`` the batch
    yields no records unless every candidate is valid.

    Raises:
        InvalidInputError: If *text* is empty or whitespace-only.
        ExtractionError: For configuration, provider, network and parse
            failures (after retries where applicable).
    """
    client, messages = _prepare(text, ExtractionMode.MULTIPLE, settings, context, client)
    candidates = await client.extract_multiple(messages)

    batch = BatchExtraction(
        results=tuple(check_candidate(candidate) for candidate in candidates),
        strict=strict,
    )
    logger.info(
        "Extraction complete: %d candidate(s), %d valid, %d rejected",
        len(batch.results),
        len(batch.results) - len(batch.rejected),
        len(batch.rejected),
    )
    if strict and batch.rejected:
        logger.warning(
            "Strict mode: discarding the batch because %d event(s) are invalid",
            len(batch.rejected),
        )
    return batch


async def extract_multiple_events(
    text: str,
    settings: Settings,
    context: ReferenceContext | None = None,
    client: GeminiClient | None = None,
    strict: bool = False,
) -> list[EventRecord]:
    """Extract the valid events from *text*.

    Returns:
        Valid records in input order.  An empty list when the model found
        no events (not an error), or in strict mode when any candidate was
        invalid.  Use :func:`extract_event_batch` to see rejected candidates.

    Raises:
        InvalidInputError: If *text* is empty or whitespace-only.
        ExtractionError: For configuration, provider, network and parse
            failures.
    """
    batch = await extract_event_batch(text, settings, context, client, strict=strict)
    return batch.records
