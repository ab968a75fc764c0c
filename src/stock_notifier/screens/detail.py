"""Stock detail screen: quote, monitoring settings and price history."""

import logging
from dataclasses import dataclass
from typing import Optional, Union

from ..api_client import APIError, StockNotifierAPIClient
from ..collection import SyncedCollection
from ..context import AppContext
from ..exceptions import FetchError, MutationError
from ..models import StockHistoryPoint, WatchlistItem
from ..state import DEFAULT_HISTORY_PERIOD, HistoryPeriod
from .base import Screen

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StockDetailView:
    symbol: str
    found: bool
    item: Optional[WatchlistItem]
    period: HistoryPeriod
    history: tuple[StockHistoryPoint, ...]
    loading: bool
    error: Optional[str]


class StockDetailScreen(Screen):
    """
    Shows one watchlist symbol with its history for a selectable period.

    Quote data comes from the mirrored watchlist; history is fetched per
    period and only the most recently requested period is kept.
    """

    def __init__(
        self,
        ctx: AppContext,
        client: StockNotifierAPIClient,
        watchlist: SyncedCollection[WatchlistItem, str],
        symbol: str,
        period: HistoryPeriod = DEFAULT_HISTORY_PERIOD,
    ):
        super().__init__(ctx)
        self.client = client
        self.watchlist = watchlist
        self.symbol = symbol
        self.period = period
        self.title = symbol
        self.history: list[StockHistoryPoint] = []
        self.error: Optional[str] = None
        self.loading = False
        self._history_version = 0

    async def mount(self) -> None:
        await super().mount()
        self.loading = True
        try:
            await self.watchlist.load()
        except FetchError as e:
            logger.warning(f"Failed to load watchlist for {self.symbol}: {e}")
        await self.load_history()

    async def set_period(self, period: Union[HistoryPeriod, str]) -> None:
        if not isinstance(period, HistoryPeriod):
            period = HistoryPeriod.parse(period)
        self.period = period
        await self.load_history()

    async def load_history(self) -> None:
        """Fetch history for the current period; failures become error state."""
        self._history_version += 1
        version = self._history_version
        period = self.period
        self.loading = True
        try:
            history = await self.client.get_stock_history(self.symbol, period)
        except APIError as e:
            if version == self._history_version:
                self.history = []
                self.error = str(FetchError(f"load {period.value} history for {self.symbol}", e))
                self.loading = False
            return

        if version != self._history_version:
            logger.debug(f"Discarding stale {period.value} history for {self.symbol}")
            return
        self.history = history
        self.error = None
        self.loading = False

    async def remove(self) -> bool:
        """Remove this symbol from the watchlist. Returns True on success."""
        try:
            await self.watchlist.remove(self.symbol)
        except MutationError:
            self.ctx.notifier.error("Failed to delete")
            return False
        self.ctx.notifier.success(f"{self.symbol} removed from watchlist")
        return True

    def render(self) -> StockDetailView:
        item = self.watchlist.get(self.symbol)
        error = self.error
        if error is None and self.watchlist.last_error is not None:
            error = str(self.watchlist.last_error)
        return StockDetailView(
            symbol=self.symbol,
            found=item is not None,
            item=item,
            period=self.period,
            history=tuple(self.history),
            loading=self.loading,
            error=error,
        )
