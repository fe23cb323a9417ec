"""Gemini LLM client for calendar event extraction.

Wraps the Google ``google-genai`` SDK to turn a prompt message sequence into
candidate events.  Handles the API call with a per-attempt timeout, error
classification, response parsing, and retries with linear-step exponential
backoff (2s, 4s, 6s, ...).

Retry policy (switched on :attr:`ExtractionError.retryable`):

- **Connection / timeout / HTTP 5xx / unexpected exceptions**: retried up to
  ``max_retries`` times.
- **Multi-event parse failures** (envelope and single-event fallback both
  unusable): retried, consuming the same budget.
- **Invalid credentials, provider rejections (HTTP 4xx incl. 429), responses
  without candidates, single-event parse failures**: raised immediately.

Cancelling the calling task stops the loop: ``asyncio.CancelledError`` is
never caught, so no further attempts are scheduled.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any, TypeVar

from google import genai
from google.genai import errors as genai_errors
from google.genai import types as genai_types

from event_snap.config import DEFAULT_MODEL, Settings
from event_snap.exceptions import (
    ConfigError,
    ExtractionError,
    InternalError,
    InvalidCredentialsError,
    ProviderRejectionError,
    ProviderUnexpectedResponseError,
    RetriesExhaustedError,
    TransientNetworkError,
)
from event_snap.models.event import CandidateEventProperties
from event_snap.parser import parse_multiple_events, parse_single_event
from event_snap.prompts import ExtractionMode, PromptMessage

logger = logging.getLogger(__name__)

T = TypeVar("T")

_BACKOFF_STEP_SECONDS = 2
_AUTH_STATUS_CODES = frozenset({401, 403})


@dataclass(frozen=True)
class GenerationProfile:
    """Sampling parameters for one extraction mode."""

    temperature: float
    max_output_tokens: int


# Lower temperature for single-event precision, higher for multi-event recall.
GENERATION_PROFILES: dict[ExtractionMode, GenerationProfile] = {
    ExtractionMode.SINGLE: GenerationProfile(temperature=0.2, max_output_tokens=500),
    ExtractionMode.MULTIPLE: GenerationProfile(temperature=0.4, max_output_tokens=1500),
}


def backoff_delay(retry_number: int) -> int:
    """Seconds to wait before retry number *retry_number* (1-based)."""
    return retry_number * _BACKOFF_STEP_SECONDS


def classify_exception(exc: Exception) -> ExtractionError:
    """Map an exception raised during an API call to the error taxonomy.

    Args:
        exc: The exception raised by the SDK or the transport.

    Returns:
        An :class:`ExtractionError` whose ``retryable`` flag drives the
        retry loop.
    """
    if isinstance(exc, ExtractionError):
        return exc

    if isinstance(exc, genai_errors.ClientError):
        code = exc.code
        reason = exc.message or str(exc)
        if code in _AUTH_STATUS_CODES or (code == 400 and "api key" in reason.lower()):
            return InvalidCredentialsError(
                f"Gemini rejected the API key (HTTP {code}): {reason}"
            )
        return ProviderRejectionError(reason, status_code=code)

    if isinstance(exc, genai_errors.APIError):
        return TransientNetworkError(f"HTTP error (status {exc.code}): {exc.message or exc}")

    if isinstance(exc, TimeoutError):
        return TransientNetworkError(f"Request timed out: {exc or 'no response'}")

    if isinstance(exc, OSError):
        return TransientNetworkError(f"Network error: {exc}")

    return TransientNetworkError(f"Unexpected error: {exc!r}")


class GeminiClient:
    """Client for extracting candidate events via Google Gemini.

    Holds its own ``google.genai.Client`` instance built from the given
    credentials; nothing is configured globally, so clients with different
    keys can be used concurrently.

    Args:
        api_key: Google Gemini API key.  Must be non-empty.
        model: Model identifier.  Defaults to ``"gemini-2.0-flash"``.
        max_retries: Retries allowed for retryable failures.
        timeout_seconds: Timeout applied to each attempt separately.

    Raises:
        ConfigError: If *api_key* is empty.
    """

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        max_retries: int = 3,
        timeout_seconds: float = 30.0,
    ) -> None:
        if not api_key or not api_key.strip():
            raise ConfigError("Gemini API key cannot be empty")
        self._client = genai.Client(api_key=api_key)
        self._model = model
        self._max_retries = max_retries
        self._timeout_seconds = timeout_seconds

    @classmethod
    def from_settings(cls, settings: Settings) -> GeminiClient:
        """Build a client from a settings snapshot."""
        return cls(
            api_key=settings.gemini_api_key,
            model=settings.model,
            max_retries=settings.max_retries,
            timeout_seconds=settings.timeout_seconds,
        )

    @property
    def model(self) -> str:
        return self._model

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def extract_single(
        self, messages: Sequence[PromptMessage]
    ) -> CandidateEventProperties:
        """Run a single-event extraction and return exactly one candidate.

        Raises:
            ExtractionError: Any non-retryable error, or
                :class:`RetriesExhaustedError` once the budget is spent.
        """
        return await self._run(messages, ExtractionMode.SINGLE, parse_single_event)

    async def extract_multiple(
        self, messages: Sequence[PromptMessage]
    ) -> list[CandidateEventProperties]:
        """Run a multi-event extraction and return zero or more candidates.

        Raises:
            ExtractionError: Any non-retryable error, or
                :class:`RetriesExhaustedError` once the budget is spent.
        """
        return await self._run(messages, ExtractionMode.MULTIPLE, parse_multiple_events)

    # ------------------------------------------------------------------
    # Retry orchestration
    # ------------------------------------------------------------------

    async def _run(
        self,
        messages: Sequence[PromptMessage],
        mode: ExtractionMode,
        parse: Callable[[str], T],
    ) -> T:
        system_prompt, contents = _to_contents(messages)
        profile = GENERATION_PROFILES[mode]
        config = genai_types.GenerateContentConfig(
            system_instruction=system_prompt,
            temperature=profile.temperature,
            max_output_tokens=profile.max_output_tokens,
            response_mime_type="application/json",
        )

        logger.debug("System prompt sent to Gemini:\n%s", system_prompt)
        logger.debug("User text sent to Gemini:\n%s", messages[-1].content)

        attempts = self._max_retries + 1
        for attempt in range(1, attempts + 1):
            try:
                raw_text = await self._call_api(contents, config)
                logger.debug("Raw LLM response (attempt %d):\n%s", attempt, raw_text)
                return parse(raw_text)
            except ExtractionError as exc:
                if not exc.retryable:
                    logger.error("%s extraction failed (%s): %s", mode.value, exc.kind, exc)
                    raise
                if attempt >= attempts:
                    logger.error(
                        "%s extraction failed after %d retries: %s",
                        mode.value,
                        self._max_retries,
                        exc,
                    )
                    raise RetriesExhaustedError(attempts, exc) from exc

                delay = backoff_delay(attempt)
                logger.warning(
                    "%s, retrying in %ds (attempt %d/%d)",
                    exc,
                    delay,
                    attempt,
                    self._max_retries,
                )
                await asyncio.sleep(delay)

        raise InternalError("Retry loop exhausted unexpectedly")  # pragma: no cover

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _call_api(
        self,
        contents: list[genai_types.Content],
        config: genai_types.GenerateContentConfig,
    ) -> str:
        """Make one API call bounded by the per-attempt timeout.

        Returns:
            The raw response text (possibly empty).

        Raises:
            ExtractionError: The classified failure.
        """
        try:
            response = await asyncio.wait_for(
                self._client.aio.models.generate_content(
                    model=self._model,
                    contents=contents,
                    config=config,
                ),
                timeout=self._timeout_seconds,
            )
        except TimeoutError as exc:
            raise TransientNetworkError(
                f"No response within {self._timeout_seconds}s"
            ) from exc
        except Exception as exc:
            raise classify_exception(exc) from exc

        return _response_text(response)


def _to_contents(
    messages: Sequence[PromptMessage],
) -> tuple[str, list[genai_types.Content]]:
    """Split prompt messages into a system instruction and chat contents."""
    system_parts = [m.content for m in messages if m.role == "system"]
    contents = [
        genai_types.Content(
            role="model" if m.role == "assistant" else "user",
            parts=[genai_types.Part(text=m.content)],
        )
        for m in messages
        if m.role != "system"
    ]
    return "\n\n".join(system_parts), contents


def _response_text(response: Any) -> str:
    """Extract the text of a ``GenerateContentResponse``.

    Raises:
        ProviderUnexpectedResponseError: If the response has no candidates
            (e.g. the prompt was blocked).
    """
    if response is None or not getattr(response, "candidates", None):
        feedback = getattr(response, "prompt_feedback", None)
        raise ProviderUnexpectedResponseError(
            f"Gemini returned no candidates (prompt feedback: {feedback})"
        )
    return response.text or ""
