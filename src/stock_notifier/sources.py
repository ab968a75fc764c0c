"""Remote sources binding a synchronized collection to its API endpoints."""

from typing import Protocol, TypeVar

from .api_client import StockNotifierAPIClient
from .exceptions import MutationError
from .models import AlertLogEntry, WatchlistItem
from .state import MutationErrorKind

T = TypeVar("T")
K = TypeVar("K")


class RemoteSource(Protocol[T, K]):
    """Read/create/delete operations for one remote collection.

    Implementations raise ``APIError`` (or a subclass) on failure; the
    collection turns any other exception into a typed error as well.
    """

    async def fetch_all(self) -> list[T]:
        ...

    async def create(self, item: T) -> None:
        ...

    async def delete(self, key: K) -> None:
        ...


class WatchlistSource:
    """Watchlist endpoints: ``GET/POST /watchlist``, ``DELETE /watchlist/{symbol}``."""

    def __init__(self, client: StockNotifierAPIClient):
        self.client = client

    async def fetch_all(self) -> list[WatchlistItem]:
        return await self.client.list_watchlist()

    async def create(self, item: WatchlistItem) -> None:
        await self.client.add_watchlist_item(
            item.symbol,
            country=item.country,
            dma_period=item.dma_period,
            alert_threshold=item.alert_threshold,
        )

    async def delete(self, key: str) -> None:
        await self.client.delete_watchlist_item(key)


class AlertLogSource:
    """Alert log endpoints: ``GET /logs``, ``DELETE /logs/{id}``.

    Alert entries are only ever created by the server.
    """

    def __init__(self, client: StockNotifierAPIClient):
        self.client = client

    async def fetch_all(self) -> list[AlertLogEntry]:
        return await self.client.list_alerts()

    async def create(self, item: AlertLogEntry) -> None:
        raise MutationError(MutationErrorKind.REMOTE_REJECTED, "add", item.id)

    async def delete(self, key: int) -> None:
        await self.client.delete_alert(key)
