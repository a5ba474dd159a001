"""Repeating timer that drives the countdown recomputation."""

import asyncio
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)


class PeriodicTicker:
    """Calls a callback every ``interval_seconds`` on the running event loop.

    The ticker is either running or stopped. Starting it while running
    restarts the cadence from now.

    Parameters
    ----------
    interval_seconds : float
        Period between callback invocations in seconds

    """

    def __init__(self, interval_seconds: float = 1.0) -> None:
        self.interval_seconds = interval_seconds
        self._task: asyncio.Task[None] | None = None

    @property
    def is_running(self) -> bool:
        """True if the ticker is currently scheduling callbacks."""
        return self._task is not None and not self._task.done()

    def start(self, callback: "Callable[[], None]") -> None:
        """Start (or restart) calling *callback* periodically.

        Without a running event loop nothing is scheduled and the owner
        has to recompute on demand.
        """
        self.stop()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop, ticks must be driven manually")
            return
        self._task = loop.create_task(self._run(callback))
        logger.debug("Ticker started (%.1fs)", self.interval_seconds)

    def stop(self) -> None:
        """Stop the ticker. Idempotent, safe to call from the callback itself."""
        task = self._task
        self._task = None
        if task is not None and not task.done() and task is not _current_task():
            task.cancel()
            logger.debug("Ticker stopped")

    async def _run(self, callback: "Callable[[], None]") -> None:
        """Background task invoking the callback until stopped."""
        me = asyncio.current_task()
        try:
            while self._task is me:
                await asyncio.sleep(self.interval_seconds)
                if self._task is not me:
                    break
                callback()
        except asyncio.CancelledError:
            logger.debug("Ticker cancelled")
            raise


def _current_task() -> "asyncio.Task[None] | None":
    try:
        return asyncio.current_task()
    except RuntimeError:
        return None
