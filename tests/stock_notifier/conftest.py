"""Shared fixtures for stock notifier tests.

Provides in-memory remote sources and a fake API client so the sync layer
and screens can be exercised without a server.
"""

import pytest

from src.stock_notifier.collection import SyncedCollection
from src.stock_notifier.context import AppContext
from tests.stock_notifier.fakes import FakeClient, FakeSource, make_alert, make_item


@pytest.fixture
def watchlist_source() -> FakeSource:
    """Server-side watchlist with two symbols.

    Returns:
        FakeSource holding AAPL and RELIANCE.NS
    """
    return FakeSource([make_item("AAPL"), make_item("RELIANCE.NS", country="India")])


@pytest.fixture
def watchlist(watchlist_source: FakeSource) -> SyncedCollection:
    """Watchlist collection backed by the fake source."""
    return SyncedCollection(watchlist_source, key=lambda item: item.symbol, name="watchlist")


@pytest.fixture
def alerts_source() -> FakeSource:
    """Server-side alert log, deliberately out of order."""
    return FakeSource(
        [make_alert(2, 10), make_alert(1, 9), make_alert(3, 11, "TCS.NS")],
        key=lambda entry: entry.id,
    )


@pytest.fixture
def alerts(alerts_source: FakeSource) -> SyncedCollection:
    """Alert collection backed by the fake source, newest first."""
    return SyncedCollection(
        alerts_source,
        key=lambda entry: entry.id,
        name="alerts",
        sort_key=lambda entry: entry.timestamp,
        descending=True,
    )


@pytest.fixture
def fake_client() -> FakeClient:
    """Fake API client for search and history."""
    return FakeClient()


@pytest.fixture
def app_context(tmp_path) -> AppContext:
    """App context with preferences stored under tmp_path.

    Args:
        tmp_path: pytest tmp_path fixture

    Returns:
        AppContext instance
    """
    return AppContext.create(tmp_path / "preferences.yaml")
