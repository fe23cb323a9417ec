"""Custom exceptions for the event-snap extraction pipeline.

Every error the pipeline can surface derives from :class:`ExtractionError`
and carries three pieces of metadata:

- ``kind`` -- a stable string tag (``"configuration"``, ``"parse"``, ...).
- ``retryable`` -- whether the retry loop in
  :class:`~event_snap.llm.GeminiClient` may spend retry budget on it.
- ``user_message`` -- a short, actionable message suitable for display.
  Raw provider strings are never the only thing shown to a user.

The retry loop switches on ``retryable`` rather than on exception types.

Exception hierarchy::

    ExtractionError
    +-- ConfigError
    |   +-- InvalidCredentialsError
    +-- InvalidInputError
    +-- TransientNetworkError
    +-- ProviderRejectionError
    +-- ProviderUnexpectedResponseError
    +-- ParseError
    +-- RetriesExhaustedError
    +-- InvalidEventError
    +-- InternalError
"""

from __future__ import annotations

from collections.abc import Sequence

# Phrases in a 429 reason that point at the account rather than the request
# rate.  Gemini's generic "Resource has been exhausted (e.g. check quota)"
# is a rate limit.
_QUOTA_MARKERS = ("billing", "current quota")


class ExtractionError(Exception):
    """Base class for all event-snap errors.

    Attributes:
        kind: Stable tag identifying the error category.
        retryable: Whether a retry may succeed.
    """

    kind: str = "extraction"
    retryable: bool = False

    @property
    def user_message(self) -> str:
        """Short, actionable message for display to an end user."""
        return "Something went wrong while reading your event. Please try again."


class ConfigError(ExtractionError):
    """Raised when required configuration is missing or invalid."""

    kind = "configuration"

    @property
    def user_message(self) -> str:
        return f"Configuration problem: {self}. Check your settings."


class InvalidCredentialsError(ConfigError):
    """Raised when the model provider rejects the configured API key."""

    @property
    def user_message(self) -> str:
        return "The language model rejected your credentials. Check your API key in the settings."


class InvalidInputError(ExtractionError):
    """Raised when the event text is empty or whitespace-only."""

    kind = "invalid_input"

    @property
    def user_message(self) -> str:
        return "Please enter some text describing your event."


class TransientNetworkError(ExtractionError):
    """Raised for connection, timeout, HTTP-layer and other transient failures."""

    kind = "transient_network"
    retryable = True

    @property
    def user_message(self) -> str:
        return "Could not reach the language model. Check your connection and try again."


class ProviderRejectionError(ExtractionError):
    """Raised when the model provider explicitly rejects a request.

    Covers quota exhaustion, rate limiting and malformed requests.
    Retrying would waste quota, so these are never retried.

    Attributes:
        reason: The provider's stated reason.
        status_code: HTTP status code from the provider, if known.
    """

    kind = "provider_rejection"

    def __init__(self, reason: str, status_code: int | None = None) -> None:
        super().__init__(f"Request rejected by the language model provider: {reason}")
        self.reason = reason
        self.status_code = status_code

    @property
    def is_quota_exhausted(self) -> bool:
        """Whether the rejection is about billing quota rather than request rate."""
        reason = self.reason.lower()
        return self.status_code == 429 and any(marker in reason for marker in _QUOTA_MARKERS)

    @property
    def is_rate_limited(self) -> bool:
        """Whether the provider asked us to slow down."""
        return self.status_code == 429 and not self.is_quota_exhausted

    @property
    def user_message(self) -> str:
        if self.is_quota_exhausted:
            return "Your language model quota is used up. Check your account billing and quota."
        if self.is_rate_limited:
            return "The language model is receiving too many requests. Please try again shortly."
        return "The language model rejected the request. Try rephrasing your event text."


class ProviderUnexpectedResponseError(ExtractionError):
    """Raised when the provider returns a response the client cannot interpret.

    This is a transport-level shape problem (for example no candidates at
    all), distinct from the model emitting text that is not valid JSON.
    """

    kind = "provider_unexpected_response"

    @property
    def user_message(self) -> str:
        return "The language model returned an unexpected response. Please try again later."


class ParseError(ExtractionError):
    """Raised when the model output cannot be decoded into event data.

    Whether a parse error may be retried depends on where it happens, so
    ``retryable`` is set per instance.

    Attributes:
        raw_response: The raw model output that failed to parse.
    """

    kind = "parse"

    def __init__(
        self,
        message: str,
        raw_response: str = "",
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.raw_response = raw_response
        self.retryable = retryable

    @property
    def user_message(self) -> str:
        return "Could not understand the language model's answer. Try rephrasing your event text."


class RetriesExhaustedError(ExtractionError):
    """Raised when a retryable error persists after the whole retry budget.

    Attributes:
        attempts: Number of attempts made.
        cause: The last retryable error encountered.
    """

    def __init__(self, attempts: int, cause: ExtractionError) -> None:
        retries = attempts - 1
        super().__init__(f"Failed after {retries} retries: {cause}")
        self.attempts = attempts
        self.cause = cause
        self.kind = cause.kind

    @property
    def user_message(self) -> str:
        return self.cause.user_message


class InvalidEventError(ExtractionError):
    """Raised when promoting a candidate that failed validation.

    Attributes:
        violations: The human-readable validation messages.
    """

    kind = "validation"

    def __init__(self, violations: Sequence[str]) -> None:
        super().__init__("Invalid calendar event: " + "; ".join(violations))
        self.violations = list(violations)

    @property
    def user_message(self) -> str:
        return "The event is incomplete: " + "; ".join(self.violations) + "."


class InternalError(ExtractionError):
    """Raised when an invariant established by validation does not hold."""

    kind = "internal"
