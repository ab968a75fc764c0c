"""
Headless screen controllers.

Each screen composes the shared synchronized collections, exposes the user
actions of its view, and renders an immutable view object.
"""

from .alerts import AlertsScreen, AlertsView
from .base import Screen
from .detail import StockDetailScreen, StockDetailView
from .home import HomeScreen, HomeView
from .search import SearchRow, SearchScreen, SearchView
from .settings import RowKind, SettingRow, SettingsScreen, SettingsSection, render_row
from .watchlist import WatchlistScreen, WatchlistView

__all__ = [
    "Screen",
    "HomeScreen",
    "HomeView",
    "WatchlistScreen",
    "WatchlistView",
    "AlertsScreen",
    "AlertsView",
    "SearchScreen",
    "SearchView",
    "SearchRow",
    "StockDetailScreen",
    "StockDetailView",
    "SettingsScreen",
    "SettingsSection",
    "SettingRow",
    "RowKind",
    "render_row",
]
