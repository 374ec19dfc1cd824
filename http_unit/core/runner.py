"""Host-side driver that steps a unit until it completes or is stopped."""

import logging
from collections.abc import Callable

from http_unit.core.call_loop import CallLoopEngine
from http_unit.ports.state import UnitState

__all__ = ["run_unit"]

logger = logging.getLogger(__name__)


async def run_unit(
    engine: CallLoopEngine,
    stop_fn: Callable[[], bool] = lambda: False,
    *,
    max_steps: int | None = None,
) -> int:
    """Run steps on an initialized engine.

    Repeatedly:
    1. Check stop_fn(); when it returns True the unit is suspended.
    2. Run one step (one HTTP call, or one retry-delay).
    3. Stop once the engine reports no more work or max_steps ran.

    Args:
        engine: Initialized engine.
        stop_fn: Callable that returns True when the host wants to suspend.
        max_steps: Optional step limit (host-initiated abort).

    Returns:
        Number of steps executed.

    Notes:
        - Steps never overlap; suspension only happens between steps.
        - Per-call errors never stop the loop, they are counted by the engine.
    """
    total = engine.estimate_total_calls()
    logger.info(f"Running unit: {engine.calls_completed}/{total} calls done")

    steps = 0
    more_work = engine.state is not UnitState.COMPLETED
    while more_work:
        if stop_fn():
            engine.suspend()
            break
        if max_steps is not None and steps >= max_steps:
            logger.info(f"Step limit {max_steps} reached, aborting run.")
            break

        result = await engine.run_one_step()
        steps += 1
        more_work = result.more_work
        logger.debug(f"Step {steps}: outcome={result.outcome.value}, status={result.status_code}")

    return steps
