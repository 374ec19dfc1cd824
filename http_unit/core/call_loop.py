"""Resumable call loop: one HTTP call per step."""

import asyncio
import logging
from types import TracebackType

from pydantic import TypeAdapter

from http_unit.core.errors import ConfigurationError, TransportError, UnitStateError
from http_unit.core.request_spec import build_request_spec
from http_unit.core.result_queue import ResultQueue
from http_unit.core.retry import Classification, RetryPolicy
from http_unit.ports.http import ClientFactory, HttpResponseDto, RequestSpec, TransportPort
from http_unit.ports.metrics import CallAttemptDto, MetricsPort
from http_unit.ports.settings import SettingsPort
from http_unit.ports.state import CallState, OutcomeKind, StepResult, UnitSnapshot, UnitState
from http_unit.ports.tls import TlsPolicy

__all__ = ["CallLoopEngine", "get_now_time", "snapshot_from_json", "snapshot_to_json"]

logger = logging.getLogger(__name__)
_snapshot_adapter = TypeAdapter(UnitSnapshot)


def get_now_time() -> float:
    """Get current monotonic time in seconds from the running event loop."""
    return asyncio.get_running_loop().time()


def snapshot_to_json(snapshot: UnitSnapshot) -> bytes:
    return _snapshot_adapter.dump_json(snapshot)


def snapshot_from_json(data: str | bytes) -> UnitSnapshot:
    return _snapshot_adapter.validate_json(data)


class CallLoopEngine:
    """Drive one HTTP unit of work, one call per step.

    Lifecycle:
        UNINITIALIZED -> READY (initialize) -> RUNNING (run_one_step)
        -> SUSPENDED (suspend) / COMPLETED (budget reached) -> RELEASED.

    Per-call errors are absorbed into the counters; configuration errors
    surface from initialize(). The result queue and counters stay readable
    after release().

    Not thread-safe; each unit instance owns its state exclusively.
    """

    def __init__(
        self,
        settings: SettingsPort,
        client_factory: ClientFactory,
        *,
        metrics: MetricsPort | None = None,
    ) -> None:
        """Initialize engine.

        Args:
            settings: Resolved unit settings.
            client_factory: Builds the transport client from request spec and TLS policy.
            metrics: Optional metrics collector updated after each step.
        """
        self.settings = settings
        self.metrics = metrics
        self.results = ResultQueue()
        self.state = UnitState.UNINITIALIZED
        self.call_state: CallState | None = None
        self.request_spec: RequestSpec | None = None
        self.tls_policy: TlsPolicy | None = None
        self.retry_policy = RetryPolicy.from_settings(settings)
        self._client_factory = client_factory
        self._client: TransportPort | None = None
        self._calls_requested = 0

    async def __aenter__(self) -> "CallLoopEngine":
        if self.state is UnitState.UNINITIALIZED:
            await self.initialize()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.release()

    async def initialize(self) -> None:
        """Build request spec, TLS policy and transport client; resolve the call budget.

        Raises:
            ConfigurationError: If the unit cannot be set up; nothing stays acquired.
            UnitStateError: If the unit was already initialized.
        """
        if self.state is not UnitState.UNINITIALIZED:
            raise UnitStateError(f"Cannot initialize unit in state {self.state.value}")

        try:
            if self.settings.number_of_calls < 0:
                raise ConfigurationError(
                    f"numberOfCalls must not be negative (got: {self.settings.number_of_calls})"
                )
            self.request_spec = build_request_spec(self.settings)
            logger.debug(f"Request uri [{self.request_spec.uri}]")

            self.tls_policy = TlsPolicy(
                verify=self.settings.verify_certificate,
                trust_material=self.settings.trust_certificate,
            )
            self._client = self._client_factory(self.request_spec, self.tls_policy)
            self._calls_requested = self.settings.number_of_calls
        except BaseException:
            await self.release()
            raise

        self.state = UnitState.READY
        logger.info(
            f"Unit initialized: {self.request_spec.method} {self.request_spec.uri}, "
            f"calls={self._calls_requested}, "
            f"version={self.request_spec.protocol_version.value}, "
            f"redirect={self.request_spec.redirect_policy.value}"
        )

    def estimate_total_calls(self) -> int:
        """Create the progress record and return the call budget.

        Raises:
            UnitStateError: If the unit is not initialized.
        """
        if self.state in (UnitState.UNINITIALIZED, UnitState.RELEASED):
            raise UnitStateError(f"Cannot estimate calls in state {self.state.value}")

        if self.call_state is None:
            self.call_state = CallState(calls_requested=self._calls_requested)
            if not self.call_state.has_more_work:
                self.state = UnitState.COMPLETED
        return self.call_state.calls_requested

    async def run_one_step(self) -> StepResult:
        """Perform one request/classify/retry/persist cycle.

        Returns:
            Continuation signal and outcome of this step.

        Raises:
            UnitStateError: If the unit is not initialized, released or has no calls left.
            asyncio.CancelledError: Re-raised after the call is recorded as failed.
        """
        if self.state in (UnitState.UNINITIALIZED, UnitState.RELEASED):
            raise UnitStateError(f"Cannot run a step in state {self.state.value}")
        if self.call_state is None:
            self.estimate_total_calls()
        assert self.call_state is not None and self.request_spec is not None
        assert self._client is not None
        if not self.call_state.has_more_work:
            raise UnitStateError("Unit has no calls left")

        self.state = UnitState.RUNNING
        started = get_now_time()

        try:
            result: HttpResponseDto | TransportError = await self._client.send(self.request_spec)
        except TransportError as e:
            logger.warning(f"Error occurred: {e}")
            result = e
        except asyncio.CancelledError:
            logger.info("Step cancelled, call recorded as failed.")
            self._settle(OutcomeKind.FAILURE)
            raise

        classification = self.retry_policy.classify(result, self.call_state.pending_retries)
        self._record_metrics(started, classification)

        if classification.kind is OutcomeKind.RETRY:
            await self._retry_delay()
        else:
            if classification.kind is OutcomeKind.SUCCESS:
                assert isinstance(result, HttpResponseDto)
                self.results.push(result.body)
            self._settle(classification.kind)

        return StepResult(
            more_work=self.call_state.has_more_work,
            outcome=classification.kind,
            status_code=classification.status_code,
            unexpected_status=classification.unexpected_status,
            error=classification.error,
        )

    def suspend(self) -> UnitSnapshot:
        """Mark the unit suspended and return its serialisable image.

        Raises:
            UnitStateError: If no step state exists yet.
        """
        if self.call_state is None:
            raise UnitStateError(f"Cannot suspend unit in state {self.state.value}")
        if self.state is UnitState.RUNNING or self.state is UnitState.READY:
            self.state = UnitState.SUSPENDED
        logger.info(
            f"Unit suspended after {self.call_state.calls_completed}/"
            f"{self.call_state.calls_requested} calls, {self.results.size()} results queued"
        )
        return self.snapshot()

    def snapshot(self) -> UnitSnapshot:
        """Return the serialisable image of counters and queued bodies.

        Raises:
            UnitStateError: If no step state exists yet.
        """
        if self.call_state is None:
            raise UnitStateError(f"No progress to snapshot in state {self.state.value}")
        return UnitSnapshot(
            calls_requested=self.call_state.calls_requested,
            success_count=self.call_state.success_count,
            failure_count=self.call_state.failure_count,
            retry_count=self.call_state.retry_count,
            pending_retries=self.call_state.pending_retries,
            results=self.results.snapshot(),
        )

    def restore(self, snapshot: UnitSnapshot) -> None:
        """Resume a freshly initialized unit from a snapshot.

        Raises:
            UnitStateError: If the unit is not READY or already has progress.
        """
        if self.state is not UnitState.READY or self.call_state is not None:
            raise UnitStateError(f"Cannot restore unit in state {self.state.value}")

        self.call_state = CallState(
            calls_requested=snapshot.calls_requested,
            success_count=snapshot.success_count,
            failure_count=snapshot.failure_count,
            retry_count=snapshot.retry_count,
            pending_retries=snapshot.pending_retries,
        )
        self.results = ResultQueue(snapshot.results)
        self.state = (
            UnitState.SUSPENDED if self.call_state.has_more_work else UnitState.COMPLETED
        )

    async def release(self) -> None:
        """Close the transport client; results and counters remain readable."""
        client, self._client = self._client, None
        try:
            if client is not None:
                await client.close()
        finally:
            if self.state is not UnitState.RELEASED:
                logger.debug(f"Unit released in state {self.state.value}")
            self.state = UnitState.RELEASED

    async def _retry_delay(self) -> None:
        assert self.call_state is not None
        self.call_state.retry_count += 1
        self.call_state.pending_retries += 1
        delay = self.retry_policy.sleep_before_retry_sec
        logger.info(
            f"Not found, retry {self.call_state.pending_retries}/"
            f"{self.retry_policy.max_retries} in {delay}s"
        )
        try:
            await asyncio.sleep(delay)
        except asyncio.CancelledError:
            logger.info("Retry wait interrupted, call recorded as failed.")
            self._settle(OutcomeKind.FAILURE)
            raise

    def _settle(self, kind: OutcomeKind) -> None:
        assert self.call_state is not None
        if kind is OutcomeKind.SUCCESS:
            self.call_state.success_count += 1
        else:
            self.call_state.failure_count += 1
        self.call_state.pending_retries = 0
        self.state = UnitState.RUNNING if self.call_state.has_more_work else UnitState.COMPLETED

    def _record_metrics(self, started: float, classification: Classification) -> None:
        if self.metrics is None:
            return
        self.metrics.update(
            CallAttemptDto(
                started_at_sec=started,
                finished_at_sec=get_now_time(),
                outcome=classification.kind,
                status_code=classification.status_code,
            )
        )
        logger.info(f"HTTP metrics: {self.metrics}")

    @property
    def calls_requested(self) -> int:
        return self.call_state.calls_requested if self.call_state else self._calls_requested

    @property
    def calls_completed(self) -> int:
        return self.call_state.calls_completed if self.call_state else 0
