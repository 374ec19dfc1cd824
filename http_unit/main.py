"""Application entrypoint: run one HTTP unit configured from the environment."""

import asyncio
import logging

from http_unit.adapters.driven.config.settings import load_settings
from http_unit.adapters.driven.http.client import TransportClient
from http_unit.adapters.driven.logging.logging_config import configure_logs
from http_unit.adapters.driven.metrics.call_metrics import CallMetrics
from http_unit.adapters.driving.signals import SuspendOnSignal
from http_unit.core.call_loop import CallLoopEngine, snapshot_to_json
from http_unit.core.errors import ConfigurationError, EmptyQueueError
from http_unit.core.runner import run_unit
from http_unit.ports.state import UnitState

__all__ = ["drain_results", "main", "run"]

logger = logging.getLogger(__name__)


async def main() -> int:
    """Run the HTTP unit.

    Startup sequence:
    1. Configure logging.
    2. Load and validate configuration.
    3. Initialize the unit (request, TLS, client).
    4. Step until all calls are done or SIGTERM/SIGINT suspends the unit.
    5. Release the client and report results.

    Returns:
        0 on completion or suspension, 1 on configuration errors.
    """
    configure_logs()
    logger.info("Starting HTTP unit...")

    try:
        settings = load_settings()
    except ConfigurationError as exc:
        logger.error(
            "Configuration error: %s\n"
            "Hint: check the HTTP_UNIT_* variables, e.g. HTTP_UNIT_URL, "
            "HTTP_UNIT_NUMBER_OF_CALLS and HTTP_UNIT_TRUST_CERTIFICATE.",
            exc,
        )
        return 1

    engine = CallLoopEngine(settings.to_port(), TransportClient.create, metrics=CallMetrics())
    stop = SuspendOnSignal().install()

    try:
        async with engine:
            await run_unit(engine, stop_fn=stop)
            if engine.state is UnitState.SUSPENDED:
                logger.info(f"Suspended unit state: {snapshot_to_json(engine.snapshot()).decode()}")
    except ConfigurationError as exc:
        logger.error(f"Unit initialization failed: {exc}")
        return 1
    finally:
        stop.uninstall()

    call_state = engine.call_state
    if call_state is not None:
        logger.info(
            f"HTTP unit stopped: {call_state.calls_completed}/{call_state.calls_requested} calls, "
            f"success={call_state.success_count}, failed={call_state.failure_count}, "
            f"retries={call_state.retry_count}"
        )
    for index, body in enumerate(drain_results(engine), start=1):
        logger.info(f"Result {index}: {body}")
    return 0


def drain_results(engine: CallLoopEngine) -> list[str]:
    """Pop every queued body, oldest first.

    Args:
        engine: Engine whose queue is drained.

    Returns:
        The drained bodies in arrival order.
    """
    drained: list[str] = []
    while True:
        try:
            drained.append(engine.results.pop())
        except EmptyQueueError:
            return drained


def run() -> int:
    """Console script entry point."""
    try:
        return asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user (Ctrl+C).")
        return 0


if __name__ == "__main__":
    raise SystemExit(run())
