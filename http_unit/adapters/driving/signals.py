"""Signal handling for suspending a running unit."""

import asyncio
import logging
import signal

__all__ = ["STOP_SIGNALS", "SuspendOnSignal"]

logger = logging.getLogger(__name__)

STOP_SIGNALS = (signal.SIGTERM, signal.SIGINT)


class SuspendOnSignal:
    """Stop flag raised by termination signals.

    Pass the instance as ``stop_fn`` to ``run_unit``: it is polled between
    steps, so a signal never interrupts a call in flight and the unit is
    suspended after the current step.

    Usage:
        stop = SuspendOnSignal().install()
        try:
            await run_unit(engine, stop_fn=stop)
        finally:
            stop.uninstall()
    """

    def __init__(self, signals: tuple[signal.Signals, ...] = STOP_SIGNALS) -> None:
        self.signals = signals
        self.received: signal.Signals | None = None
        self._loop: asyncio.AbstractEventLoop | None = None

    def install(self) -> "SuspendOnSignal":
        """Register the handlers on the running event loop.

        Returns:
            Self, for chaining.
        """
        self._loop = asyncio.get_running_loop()
        for sig in self.signals:
            self._loop.add_signal_handler(sig, self._handle, sig)
        return self

    def uninstall(self) -> None:
        """Remove the handlers again; safe to call when not installed."""
        loop, self._loop = self._loop, None
        if loop is None:
            return
        for sig in self.signals:
            loop.remove_signal_handler(sig)

    def _handle(self, sig: signal.Signals) -> None:
        if self.received is None:
            logger.info(f"{sig.name} received, suspending after the current step...")
        self.received = sig

    def __call__(self) -> bool:
        return self.received is not None
