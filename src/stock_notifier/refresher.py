"""Periodic background reload of a synchronized collection."""

import asyncio
import logging
from typing import Optional

from .collection import SyncedCollection
from .exceptions import FetchError

logger = logging.getLogger(__name__)

DEFAULT_REFRESH_INTERVAL = 30.0  # seconds


class BackgroundRefresher:
    """
    Reload a collection on a fixed interval while its screen is mounted.

    A tick that finds the previous reload still outstanding is skipped, so
    at most one refresh is in flight. Stopping cancels the timer; a reload
    already sent is left to finish.

    Example:
        >>> async with BackgroundRefresher(watchlist, interval=30):
        ...     await run_screen()
    """

    def __init__(self, collection: SyncedCollection, interval: float = DEFAULT_REFRESH_INTERVAL):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.collection = collection
        self.interval = interval
        self.skipped_ticks = 0
        self.refresh_count = 0
        self._timer_task: Optional[asyncio.Task] = None
        self._refresh_task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._timer_task is not None and not self._timer_task.done()

    def start(self) -> None:
        """
        Start the refresh timer on the running event loop.

        Raises:
            RuntimeError: If already started.
        """
        if self.running:
            raise RuntimeError(f"Refresher for {self.collection.name} already running")
        self._timer_task = asyncio.get_running_loop().create_task(self._tick_loop())
        logger.debug(f"Started {self.interval}s refresher for {self.collection.name}")

    def stop(self) -> None:
        """Cancel the refresh timer. Safe to call more than once."""
        if self._timer_task is not None:
            self._timer_task.cancel()
            self._timer_task = None
            logger.debug(f"Stopped refresher for {self.collection.name}")

    async def wait_idle(self) -> None:
        """Wait for an outstanding refresh, if any, to complete."""
        if self._refresh_task is not None:
            await asyncio.gather(self._refresh_task, return_exceptions=True)

    async def __aenter__(self) -> "BackgroundRefresher":
        self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        self.stop()

    async def _tick_loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            self._tick()

    def _tick(self) -> None:
        if self._refresh_task is not None and not self._refresh_task.done():
            self.skipped_ticks += 1
            logger.debug(f"Previous {self.collection.name} refresh still running, skipping tick")
            return
        self._refresh_task = asyncio.get_running_loop().create_task(self._refresh())

    async def _refresh(self) -> None:
        self.refresh_count += 1
        try:
            await self.collection.load()
        except FetchError as e:
            logger.warning(f"Background refresh of {self.collection.name} failed: {e}")
