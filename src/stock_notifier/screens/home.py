"""Overview screen: watchlist quotes plus the latest alerts, kept fresh."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

from ..collection import SyncedCollection
from ..context import AppContext
from ..exceptions import FetchError
from ..models import AlertLogEntry, WatchlistItem
from ..refresher import DEFAULT_REFRESH_INTERVAL, BackgroundRefresher
from .base import Screen

logger = logging.getLogger(__name__)

RECENT_ALERT_COUNT = 5


@dataclass(frozen=True)
class HomeView:
    """What the overview screen shows."""

    watchlist: tuple[WatchlistItem, ...]
    recent_alerts: tuple[AlertLogEntry, ...]
    watchlist_error: Optional[str]
    alerts_error: Optional[str]
    loading: bool
    dark_mode: bool


class HomeScreen(Screen):
    """
    Loads the watchlist and alert log together and refreshes both in the
    background for as long as the screen is mounted.
    """

    title = "Overview"

    def __init__(
        self,
        ctx: AppContext,
        watchlist: SyncedCollection[WatchlistItem, str],
        alerts: SyncedCollection[AlertLogEntry, int],
        refresh_interval: float = DEFAULT_REFRESH_INTERVAL,
    ):
        super().__init__(ctx)
        self.watchlist = watchlist
        self.alerts = alerts
        self.refresh_interval = refresh_interval
        self.refreshers: list[BackgroundRefresher] = []

    async def mount(self) -> None:
        await super().mount()
        await self.refresh()
        self.refreshers = [
            BackgroundRefresher(self.watchlist, self.refresh_interval),
            BackgroundRefresher(self.alerts, self.refresh_interval),
        ]
        for refresher in self.refreshers:
            refresher.start()

    async def unmount(self) -> None:
        for refresher in self.refreshers:
            refresher.stop()
        self.refreshers = []
        await super().unmount()

    async def refresh(self) -> None:
        """Reload both collections concurrently; failures become error state."""
        results = await asyncio.gather(
            self.watchlist.load(), self.alerts.load(), return_exceptions=True
        )
        for result in results:
            if isinstance(result, FetchError):
                logger.warning(f"Overview refresh incomplete: {result}")
            elif isinstance(result, BaseException):
                raise result

    def render(self) -> HomeView:
        watchlist = self.watchlist.snapshot()
        alerts = self.alerts.snapshot()
        return HomeView(
            watchlist=watchlist.items,
            recent_alerts=alerts.items[:RECENT_ALERT_COUNT],
            watchlist_error=str(watchlist.last_error) if watchlist.has_error else None,
            alerts_error=str(alerts.last_error) if alerts.has_error else None,
            loading=watchlist.is_loading or alerts.is_loading,
            dark_mode=self.ctx.theme.is_dark_mode,
        )
