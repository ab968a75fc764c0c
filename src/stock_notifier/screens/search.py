"""Search screen: debounced symbol search with add-to-watchlist."""

import logging
from dataclasses import dataclass

from ..api_client import StockNotifierAPIClient
from ..collection import SyncedCollection
from ..context import AppContext
from ..exceptions import FetchError, MutationError
from ..models import DEFAULT_ALERT_THRESHOLD, DEFAULT_DMA_PERIOD, SearchResult, WatchlistItem
from ..search import DEFAULT_QUIET_PERIOD, DebouncedQueryController
from ..symbols import is_member
from .base import Screen

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchRow:
    """One search result annotated with its watchlist status."""

    result: SearchResult
    canonical_symbol: str
    in_watchlist: bool

    @property
    def action_label(self) -> str:
        return "Added" if self.in_watchlist else "Add"


@dataclass(frozen=True)
class SearchView:
    query: str
    rows: tuple[SearchRow, ...]
    searching: bool


class SearchScreen(Screen):
    """
    Feeds typed text through a debounced controller and lets the user add a
    result to the watchlist under its canonical symbol.
    """

    title = "Search"

    def __init__(
        self,
        ctx: AppContext,
        client: StockNotifierAPIClient,
        watchlist: SyncedCollection[WatchlistItem, str],
        quiet_period: float = DEFAULT_QUIET_PERIOD,
        dma_period: int = DEFAULT_DMA_PERIOD,
        alert_threshold: float = DEFAULT_ALERT_THRESHOLD,
    ):
        super().__init__(ctx)
        self.client = client
        self.watchlist = watchlist
        self.dma_period = dma_period
        self.alert_threshold = alert_threshold
        self.controller = DebouncedQueryController(client.search, quiet_period=quiet_period)

    async def mount(self) -> None:
        await super().mount()
        try:
            await self.watchlist.load()
        except FetchError as e:
            # Membership markers fall back to whatever is already mirrored
            logger.warning(f"Could not load watchlist for search: {e}")

    async def unmount(self) -> None:
        self.controller.cancel()
        await super().unmount()

    def set_query(self, text: str) -> None:
        self.controller.on_query_change(text)

    async def add(self, result: SearchResult) -> bool:
        """
        Add a search result to the watchlist.

        Returns:
            True if the symbol is in the watchlist afterwards.
        """
        symbol = result.canonical_symbol
        if is_member(result.symbol, result.exchange, set(self.watchlist.keys())):
            return True

        item = WatchlistItem.placeholder(
            symbol,
            country=result.country,
            dma_period=self.dma_period,
            alert_threshold=self.alert_threshold,
        )
        try:
            await self.watchlist.add(item)
        except MutationError as e:
            logger.debug(f"Add of {symbol} failed: {e}")
            self.ctx.notifier.error("Failed to add stock")
            return False
        self.ctx.notifier.success(f"Added {symbol}")
        return True

    def render(self) -> SearchView:
        members = set(self.watchlist.keys())
        rows = tuple(
            SearchRow(
                result=result,
                canonical_symbol=result.canonical_symbol,
                in_watchlist=is_member(result.symbol, result.exchange, members),
            )
            for result in self.controller.results
        )
        return SearchView(
            query=self.controller.query,
            rows=rows,
            searching=self.controller.is_pending,
        )
