"""Progress and lifecycle definitions shared between the engine and its host."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

__all__ = ["CallState", "OutcomeKind", "StepResult", "UnitSnapshot", "UnitState"]


class UnitState(str, Enum):
    """Lifecycle of one unit of work."""

    UNINITIALIZED = "UNINITIALIZED"
    READY = "READY"
    RUNNING = "RUNNING"
    SUSPENDED = "SUSPENDED"
    COMPLETED = "COMPLETED"
    RELEASED = "RELEASED"


class OutcomeKind(str, Enum):
    """Classified result of one call."""

    SUCCESS = "SUCCESS"
    RETRY = "RETRY"
    FAILURE = "FAILURE"


@dataclass(slots=True)
class CallState:
    """Mutable progress record of a unit.

    ``calls_completed`` is derived from the success and failure counters, so
    ``calls_completed == success_count + failure_count`` always holds.

    Attributes:
        calls_requested: Call budget, fixed when the total is estimated.
        success_count: Calls settled as successful.
        failure_count: Calls settled as failed.
        retry_count: Retry-delay steps taken over the whole run.
        pending_retries: Consecutive retry-delays of the call in flight.
    """

    calls_requested: int
    success_count: int = 0
    failure_count: int = 0
    retry_count: int = 0
    pending_retries: int = 0

    @property
    def calls_completed(self) -> int:
        return self.success_count + self.failure_count

    @property
    def has_more_work(self) -> bool:
        return self.calls_completed < self.calls_requested


@dataclass(slots=True, frozen=True)
class StepResult:
    """Continuation signal returned to the host after one step.

    Attributes:
        more_work: True while calls_completed < calls_requested.
        outcome: Classification of the call made in this step.
        status_code: Final HTTP status, None on transport errors.
        unexpected_status: Status differed from the expected response code.
        error: Transport error description, if any.
    """

    more_work: bool
    outcome: OutcomeKind
    status_code: int | None = None
    unexpected_status: bool = False
    error: str | None = None


@dataclass
class UnitSnapshot:
    """Serialisable image of a suspended unit (counters and queued bodies)."""

    calls_requested: int
    success_count: int = 0
    failure_count: int = 0
    retry_count: int = 0
    pending_retries: int = 0
    results: list[str] = field(default_factory=list)
