"""Watchlist screen."""

import logging
from dataclasses import dataclass
from typing import Optional

from ..collection import SyncedCollection
from ..context import AppContext
from ..exceptions import FetchError, MutationError
from ..models import WatchlistItem
from ..state import MutationErrorKind
from .base import Screen

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WatchlistView:
    items: tuple[WatchlistItem, ...]
    pending: frozenset[str]
    loading: bool
    error: Optional[str]

    @property
    def subtitle(self) -> str:
        return f"{len(self.items)} stocks tracked"


class WatchlistScreen(Screen):
    """Lists tracked symbols and removes them optimistically."""

    title = "Watchlist"

    def __init__(self, ctx: AppContext, watchlist: SyncedCollection[WatchlistItem, str]):
        super().__init__(ctx)
        self.watchlist = watchlist

    async def mount(self) -> None:
        await super().mount()
        try:
            await self.watchlist.load()
        except FetchError as e:
            logger.warning(f"Failed to load watchlist: {e}")

    async def delete(self, symbol: str) -> bool:
        """
        Remove a symbol and report the outcome through the notifier.

        Returns:
            True if the server confirmed the removal.
        """
        try:
            await self.watchlist.remove(symbol)
        except MutationError as e:
            if e.kind == MutationErrorKind.ALREADY_PENDING:
                self.ctx.notifier.error(f"Removal of {symbol} already in progress")
            else:
                self.ctx.notifier.error(f"Failed to remove {symbol}")
            return False
        self.ctx.notifier.success(f"{symbol} removed from watchlist")
        return True

    def render(self) -> WatchlistView:
        snapshot = self.watchlist.snapshot()
        return WatchlistView(
            items=snapshot.items,
            pending=snapshot.pending,
            loading=snapshot.is_loading,
            error=str(snapshot.last_error) if snapshot.has_error else None,
        )
