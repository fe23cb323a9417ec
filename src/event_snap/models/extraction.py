"""Result types returned by the extraction pipeline.

- :class:`ValidatedCandidate` -- one candidate together with its
  validation violations and, when valid, the promoted record.
- :class:`BatchExtraction` -- the outcome of a multi-event extraction call,
  keeping valid records and rejected candidates side by side.

Validation failures are data here, never exceptions, so a caller can offer
per-field correction or discard the candidate.
"""

from __future__ import annotations

from dataclasses import dataclass

from event_snap.models.event import CandidateEventProperties, EventRecord


@dataclass(frozen=True)
class ValidatedCandidate:
    """A candidate event and the result of validating it.

    Attributes:
        candidate: The raw candidate parsed from the model output.
        violations: Human-readable validation messages (empty when valid).
        record: The promoted record, or ``None`` if validation failed.
    """

    candidate: CandidateEventProperties
    violations: tuple[str, ...] = ()
    record: EventRecord | None = None

    @property
    def is_valid(self) -> bool:
        return not self.violations and self.record is not None


@dataclass(frozen=True)
class BatchExtraction:
    """Outcome of a multi-event extraction call.

    Attributes:
        results: One entry per candidate, in the order the model emitted them.
        strict: When ``True`` the batch is all-or-nothing: a single invalid
            candidate empties :attr:`records`.
    """

    results: tuple[ValidatedCandidate, ...] = ()
    strict: bool = False

    @property
    def all_valid(self) -> bool:
        return all(result.is_valid for result in self.results)

    @property
    def rejected(self) -> list[ValidatedCandidate]:
        """Candidates that failed validation."""
        return [result for result in self.results if not result.is_valid]

    @property
    def records(self) -> list[EventRecord]:
        """Valid records in input order (empty in strict mode if any failed)."""
        if self.strict and not self.all_valid:
            return []
        return [result.record for result in self.results if result.record is not None]
