"""
Debounced search-as-you-type.

Turns a fast-changing query string into a bounded rate of search requests:
a search fires only after the query has been stable for the quiet period,
and only the response for the latest query is ever published.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from .models import SearchResult

logger = logging.getLogger(__name__)

DEFAULT_QUIET_PERIOD = 0.3  # seconds

SearchFunction = Callable[[str], Awaitable[list[SearchResult]]]
ResultsListener = Callable[[list[SearchResult]], None]


class DebouncedQueryController:
    """
    Trailing-edge debounced, last-query-wins search controller.

    Each query change bumps a version counter. A scheduled search is
    cancelled by any later change; a search already sent is left to finish,
    but its response is dropped unless its version is still current.

    Args:
        search: Coroutine function performing the search
        on_results: Called with each published result list
        quiet_period: Seconds without changes before a search fires
    """

    def __init__(
        self,
        search: SearchFunction,
        on_results: Optional[ResultsListener] = None,
        quiet_period: float = DEFAULT_QUIET_PERIOD,
    ):
        if quiet_period < 0:
            raise ValueError("quiet_period must not be negative")
        self._search = search
        self._on_results = on_results
        self.quiet_period = quiet_period

        self._query = ""
        self._version = 0
        self._results: list[SearchResult] = []
        self._timer: Optional[asyncio.TimerHandle] = None
        self._in_flight: set[asyncio.Task] = set()
        self._closed = False

    @property
    def query(self) -> str:
        return self._query

    @property
    def results(self) -> list[SearchResult]:
        return list(self._results)

    @property
    def is_pending(self) -> bool:
        """True while a search is scheduled or awaiting its response."""
        return self._timer is not None or bool(self._in_flight)

    @property
    def closed(self) -> bool:
        return self._closed

    def on_query_change(self, text: str) -> None:
        """
        Record a new query and (re)schedule the search for it.

        Blank queries publish an empty result immediately without
        scheduling anything.

        Raises:
            RuntimeError: If the controller has been cancelled.
        """
        if self._closed:
            raise RuntimeError("Query controller has been cancelled")

        self._query = text
        self._version += 1
        self._cancel_timer()

        if not text.strip():
            self._publish([])
            return

        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self.quiet_period, self._fire, self._version, text)

    def cancel(self) -> None:
        """
        Tear down: no scheduled search fires afterwards, and responses of
        searches already sent are discarded.
        """
        self._closed = True
        self._version += 1
        self._cancel_timer()

    async def wait_idle(self) -> None:
        """Wait until no search is scheduled or awaiting its response."""
        while self.is_pending:
            if self._in_flight:
                await asyncio.gather(*list(self._in_flight), return_exceptions=True)
            else:
                await asyncio.sleep(max(self.quiet_period / 4, 0.01))

    # Internal helpers

    def _fire(self, version: int, text: str) -> None:
        self._timer = None
        task = asyncio.get_running_loop().create_task(self._run(version, text))
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)

    async def _run(self, version: int, text: str) -> None:
        logger.debug(f"Searching for {text!r}")
        try:
            results = await self._search(text)
        except Exception as e:
            logger.warning(f"Search for {text!r} failed, showing no results: {e}")
            results = []

        if self._closed or version != self._version:
            logger.debug(f"Discarding stale results for {text!r}")
            return
        self._publish(results)

    def _publish(self, results: list[SearchResult]) -> None:
        self._results = list(results)
        if self._on_results is not None:
            self._on_results(self.results)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
