#!/usr/bin/env python3
"""
Stock Notifier - CLI and module for a stock watchlist with price alerts.

Mirrors the watchlist and alert log kept by a Stock Notifier API server,
applying changes optimistically and refreshing in the background.

CLI Usage:
    stock-notifier status
    stock-notifier search reliance
    stock-notifier watchlist add RELIANCE --exchange NSE
    stock-notifier watchlist list
    stock-notifier alerts list
    stock-notifier history RELIANCE.NS --period 6M
    stock-notifier watch --duration 300

Module Usage:
    from stock_notifier_tool import StockNotifierAPIClient, watchlist_collection

    async with StockNotifierAPIClient("http://localhost:8000") as client:
        watchlist = watchlist_collection(client)
        await watchlist.load()
        await watchlist.add(WatchlistItem.placeholder("RELIANCE.NS"))

Symbol identity:
    Search returns raw tickers plus an exchange code; the watchlist stores
    exchange-suffixed tickers (NSE -> .NS, BSE -> .BO, IDX -> .JK).
"""

from src.stock_notifier import (
    AlertLogEntry,
    CollectionStatus,
    FetchError,
    HistoryPeriod,
    MutationError,
    MutationErrorKind,
    SearchResult,
    WatchlistItem,
    canonicalize,
    is_member,
)
from src.stock_notifier.api_client import StockNotifierAPIClient
from src.stock_notifier.collection import (
    SyncedCollection,
    alerts_collection,
    watchlist_collection,
)
from src.stock_notifier.refresher import BackgroundRefresher
from src.stock_notifier.search import DebouncedQueryController

__all__ = [
    # Client and sync layer
    "StockNotifierAPIClient",
    "SyncedCollection",
    "watchlist_collection",
    "alerts_collection",
    "DebouncedQueryController",
    "BackgroundRefresher",
    # Data models
    "WatchlistItem",
    "AlertLogEntry",
    "SearchResult",
    "HistoryPeriod",
    "CollectionStatus",
    # Errors
    "FetchError",
    "MutationError",
    "MutationErrorKind",
    # Symbol identity
    "canonicalize",
    "is_member",
]


def main() -> None:
    """CLI entry point."""
    from src.stock_notifier.cli import cli

    cli()


if __name__ == "__main__":
    main()
