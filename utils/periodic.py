"""
Fixed-interval background task on asyncio.
"""

import asyncio
from typing import Awaitable, Callable, Optional, Union
import logging

logger = logging.getLogger(__name__)

Callback = Callable[[], Union[None, Awaitable[None]]]


class PeriodicTask:
    """
    Run a callback every ``interval`` seconds until stopped.

    The next run is scheduled only after the previous one returns, so runs
    never overlap. Exceptions from the callback are logged and the loop
    keeps going.
    """

    def __init__(self, interval: float, callback: Callback, name: str = "periodic",
                 run_immediately: bool = False):
        """
        Initialize the task.

        Args:
            interval: Seconds between the end of one run and the start of the next
            callback: Sync function or coroutine function taking no arguments
            name: Label used in log messages
            run_immediately: Run once at start instead of waiting one interval
        """
        if interval <= 0:
            raise ValueError(f"Interval must be positive, got {interval}")
        self.interval = interval
        self.callback = callback
        self.name = name
        self.run_immediately = run_immediately
        self.runs = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self):
        """Schedule the loop on the running event loop."""
        if self.running:
            return
        self._task = asyncio.create_task(self._loop(), name=self.name)
        logger.info(f"Started {self.name} (every {self.interval}s)")

    async def stop(self):
        """Cancel the loop and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info(f"Stopped {self.name} after {self.runs} runs")

    async def run_once(self):
        """Run the callback a single time, logging failures."""
        try:
            result = self.callback()
            if asyncio.iscoroutine(result):
                await result
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Error in {self.name}: {e}", exc_info=True)
        finally:
            self.runs += 1

    async def _loop(self):
        if self.run_immediately:
            await self.run_once()
        while True:
            await asyncio.sleep(self.interval)
            await self.run_once()
