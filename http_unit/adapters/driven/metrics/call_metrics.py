"""In-memory sliding-window metrics for unit calls."""

from __future__ import annotations

import statistics
from collections import deque
from dataclasses import dataclass

from http_unit.ports.metrics import CallAttemptDto, MetricsPort
from http_unit.ports.state import OutcomeKind

__all__ = ["CallMetrics"]


@dataclass(slots=True, frozen=True)
class _Sample:
    """Internal record for one call attempt."""

    latency_ms: float
    outcome: OutcomeKind
    status_code: int


class CallMetrics(MetricsPort):
    """Lock-free metrics for one unit instance.

    Tracks:
    - Average call latency.
    - Failure and retry rate.
    - Last status code.
    - Total attempts seen.

    Not thread-safe; create one instance per unit.
    """

    def __init__(self, *, window_size: int = 100) -> None:
        """Initialize metrics collector.

        Args:
            window_size: Number of recent attempts to keep for statistics.
        """
        self._window: deque[_Sample] = deque(maxlen=window_size)
        self._total_seen: int = 0

    def update(self, attempt: CallAttemptDto) -> None:
        """Record a finished call attempt.

        Args:
            attempt: Call attempt with timing and outcome.
        """
        latency_ms = (attempt.finished_at_sec - attempt.started_at_sec) * 1_000.0
        self._window.append(
            _Sample(
                latency_ms=latency_ms,
                outcome=attempt.outcome,
                status_code=attempt.status_code or 0,
            )
        )
        self._total_seen += 1

    @property
    def total_seen(self) -> int:
        return self._total_seen

    def __str__(self) -> str:
        """Return human-readable one-line summary for logging.

        Returns:
            Formatted metrics string.
        """
        if not self._window:
            return "Metrics: waiting for data …"

        n_window = len(self._window)
        failures = sum(1 for s in self._window if s.outcome is OutcomeKind.FAILURE)
        retries = sum(1 for s in self._window if s.outcome is OutcomeKind.RETRY)
        fail_pct = (failures / n_window) * 100
        retry_pct = (retries / n_window) * 100
        avg_latency = statistics.fmean(s.latency_ms for s in self._window)
        last = self._window[-1]

        return (
            f"latency={avg_latency:7.1f} ms | "
            f"status={last.status_code:3d} | "
            f"fail={fail_pct:5.1f}% | "
            f"retry={retry_pct:5.1f}% | "
            f"win={n_window}/{self._window.maxlen} | "
            f"total={self._total_seen}"
        )
