"""Metrics port definition (interface and DTO)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from http_unit.ports.state import OutcomeKind

__all__ = ["CallAttemptDto", "MetricsPort"]


@dataclass(slots=True, frozen=True)
class CallAttemptDto:
    """Immutable snapshot of a single call attempt.

    Attributes:
        started_at_sec: Monotonic seconds when the request left the process.
        finished_at_sec: Monotonic seconds when the outcome was known.
        outcome: Classified result of the attempt.
        status_code: HTTP status code when a response arrived; None otherwise.
    """

    started_at_sec: float
    finished_at_sec: float
    outcome: OutcomeKind
    status_code: int | None = None


class MetricsPort(Protocol):
    """Interface for recording call attempt metrics.

    The engine calls update() after each step; hosts call __str__() to
    render summaries.
    """

    def update(self, attempt: CallAttemptDto, /) -> None:
        """Record a finished call attempt.

        Args:
            attempt: The attempt to record.
        """
        ...

    def __str__(self) -> str:
        """Return concise textual summary for humans.

        Returns:
            Formatted metrics string.
        """
        ...
