"""
Stock Notifier - client-side sync for a stock watchlist and price alerts.

This package mirrors the watchlist and alert log of a Stock Notifier API
server, applies changes optimistically, and keeps mirrored state fresh.

Public API:
    StockNotifierAPIClient: Async HTTP client for the API
    SyncedCollection: Local mirror of one remote collection
    DebouncedQueryController: Debounced, last-query-wins search
    BackgroundRefresher: Periodic reload while a screen is mounted
    canonicalize / is_member: Symbol identity rules
"""

from .exceptions import (
    FetchError,
    MutationError,
    PreferencesError,
    SearchError,
    StockNotifierError,
)
from .models import (
    AlertLogEntry,
    SearchResult,
    ServerStatus,
    StockHistoryPoint,
    WatchlistItem,
    WatchlistItemCreate,
)
from .state import (
    CollectionStatus,
    HistoryPeriod,
    MutationErrorKind,
    MutationKind,
)
from .symbols import canonicalize, infer_country, is_member, normalize_country

__all__ = [
    # Models
    "WatchlistItem",
    "WatchlistItemCreate",
    "AlertLogEntry",
    "SearchResult",
    "StockHistoryPoint",
    "ServerStatus",
    # State
    "CollectionStatus",
    "MutationKind",
    "MutationErrorKind",
    "HistoryPeriod",
    # Symbol identity
    "canonicalize",
    "is_member",
    "normalize_country",
    "infer_country",
    # Exceptions
    "StockNotifierError",
    "FetchError",
    "MutationError",
    "SearchError",
    "PreferencesError",
]

# Deferred imports to avoid circular dependencies
def __getattr__(name: str):
    """Lazy import for the network-facing classes."""
    if name == "StockNotifierAPIClient":
        from .api_client import StockNotifierAPIClient
        return StockNotifierAPIClient
    if name == "SyncedCollection":
        from .collection import SyncedCollection
        return SyncedCollection
    if name == "DebouncedQueryController":
        from .search import DebouncedQueryController
        return DebouncedQueryController
    if name == "BackgroundRefresher":
        from .refresher import BackgroundRefresher
        return BackgroundRefresher
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
