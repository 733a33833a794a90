"""
Interval timers driving the periodic jobs.
"""
import asyncio
import logging
from typing import Awaitable, Callable, Set

logger = logging.getLogger(__name__)


class PeriodicTask:
    """Calls ``callback`` every ``interval`` seconds until stopped.

    Each call runs as its own task, so a slow callback never delays the
    next tick. In-flight calls are awaited, not cancelled, on stop.
    """

    def __init__(self, name: str, interval: float, callback: Callable[[], Awaitable[None]]):
        if interval <= 0:
            raise ValueError(f"{name}: interval must be positive, got {interval}")
        self.name = name
        self.interval = interval
        self.callback = callback
        self._stop_event = asyncio.Event()
        self._running: Set[asyncio.Task] = set()

    def stop(self) -> None:
        self._stop_event.set()

    async def run(self) -> None:
        logger.info(f"⏰ {self.name}: every {self.interval:g}s")
        while True:
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self.interval)
                break
            except asyncio.TimeoutError:
                pass
            logger.debug(f"⏰ {self.name} triggered")
            self.trigger()

        if self._running:
            logger.info(f"Waiting for {len(self._running)} running {self.name} job(s)")
            await asyncio.gather(*self._running, return_exceptions=True)

    def trigger(self) -> asyncio.Task:
        """Start one call of the callback now."""
        task = asyncio.ensure_future(self._invoke())
        self._running.add(task)
        task.add_done_callback(self._running.discard)
        return task

    async def _invoke(self) -> None:
        try:
            await self.callback()
        except Exception as e:
            logger.error(f"Error in {self.name} job: {e}", exc_info=True)
