"""Tests for the headless screen controllers."""

import asyncio
import json

import pytest
from pytest_httpx import HTTPXMock

from src.stock_notifier.api_client import (
    APIConnectionError,
    APIServerError,
    StockNotifierAPIClient,
)
from src.stock_notifier.collection import watchlist_collection
from src.stock_notifier.context import NotificationLevel
from src.stock_notifier.models import SearchResult, StockHistoryPoint
from src.stock_notifier.screens import (
    AlertsScreen,
    HomeScreen,
    SearchScreen,
    StockDetailScreen,
    WatchlistScreen,
)
from src.stock_notifier.screens.home import RECENT_ALERT_COUNT
from src.stock_notifier.state import HistoryPeriod
from tests.stock_notifier.fakes import make_alert, make_item


def last_message(app_context) -> tuple:
    notification = app_context.notifier.history[-1]
    return notification.level, notification.message


class TestHomeScreen:
    """Tests for the overview screen."""

    @pytest.mark.asyncio
    async def test_mount_loads_both_collections(
        self, app_context, watchlist, alerts, alerts_source
    ) -> None:
        alerts_source.items = [make_alert(i, i + 1) for i in range(1, 8)]
        screen = HomeScreen(app_context, watchlist, alerts, refresh_interval=60)

        async with screen:
            view = screen.render()
            assert len(screen.refreshers) == 2
            assert all(r.running for r in screen.refreshers)

        assert [item.symbol for item in view.watchlist] == ["AAPL", "RELIANCE.NS"]
        assert len(view.recent_alerts) == RECENT_ALERT_COUNT
        assert [entry.id for entry in view.recent_alerts] == [7, 6, 5, 4, 3]
        assert view.watchlist_error is None
        assert view.alerts_error is None
        assert view.loading is False
        assert screen.refreshers == []

    @pytest.mark.asyncio
    async def test_one_failed_collection_does_not_block_other(
        self, app_context, watchlist, alerts, alerts_source
    ) -> None:
        alerts_source.fail_fetch = APIConnectionError("Failed to connect")
        screen = HomeScreen(app_context, watchlist, alerts, refresh_interval=60)

        async with screen:
            view = screen.render()

        assert len(view.watchlist) == 2
        assert view.recent_alerts == ()
        assert "load alerts" in view.alerts_error
        assert view.watchlist_error is None

    @pytest.mark.asyncio
    async def test_background_refresh_while_mounted(
        self, app_context, watchlist, watchlist_source, alerts
    ) -> None:
        screen = HomeScreen(app_context, watchlist, alerts, refresh_interval=0.02)

        async with screen:
            watchlist_source.items = [make_item("TCS.NS")]
            await asyncio.sleep(0.1)
            view = screen.render()
            for refresher in screen.refreshers:
                refresher.stop()
                await refresher.wait_idle()

        assert [item.symbol for item in view.watchlist] == ["TCS.NS"]

    @pytest.mark.asyncio
    async def test_dark_mode_reflected(self, app_context, watchlist, alerts) -> None:
        app_context.theme.toggle()
        screen = HomeScreen(app_context, watchlist, alerts, refresh_interval=60)
        async with screen:
            assert screen.render().dark_mode is True


class TestWatchlistScreen:
    """Tests for the watchlist screen."""

    @pytest.mark.asyncio
    async def test_render(self, app_context, watchlist) -> None:
        async with WatchlistScreen(app_context, watchlist) as screen:
            view = screen.render()
        assert view.subtitle == "2 stocks tracked"
        assert view.error is None

    @pytest.mark.asyncio
    async def test_delete_success(self, app_context, watchlist) -> None:
        async with WatchlistScreen(app_context, watchlist) as screen:
            assert await screen.delete("AAPL") is True
            assert [i.symbol for i in screen.render().items] == ["RELIANCE.NS"]
        assert last_message(app_context) == (
            NotificationLevel.SUCCESS, "AAPL removed from watchlist"
        )

    @pytest.mark.asyncio
    async def test_delete_failure_restores_from_server(
        self, app_context, watchlist, watchlist_source
    ) -> None:
        async with WatchlistScreen(app_context, watchlist) as screen:
            watchlist_source.fail_delete = APIServerError("Server error", status_code=500)
            assert await screen.delete("AAPL") is False
            assert len(screen.render().items) == 2
        assert last_message(app_context) == (NotificationLevel.ERROR, "Failed to remove AAPL")

    @pytest.mark.asyncio
    async def test_delete_already_pending(
        self, app_context, watchlist, watchlist_source
    ) -> None:
        async with WatchlistScreen(app_context, watchlist) as screen:
            watchlist_source.delete_gate = asyncio.Event()
            first = asyncio.create_task(screen.delete("AAPL"))
            await asyncio.sleep(0)

            assert await screen.delete("AAPL") is False
            assert last_message(app_context) == (
                NotificationLevel.ERROR, "Removal of AAPL already in progress"
            )
            assert "AAPL" in screen.render().pending

            watchlist_source.delete_gate.set()
            assert await first is True

    @pytest.mark.asyncio
    async def test_load_error_rendered(self, app_context, watchlist, watchlist_source) -> None:
        watchlist_source.fail_fetch = APIConnectionError("Failed to connect")
        async with WatchlistScreen(app_context, watchlist) as screen:
            view = screen.render()
        assert view.items == ()
        assert "Failed to load watchlist" in view.error


class TestAlertsScreen:
    """Tests for the alert log screen."""

    @pytest.mark.asyncio
    async def test_entries_newest_first(self, app_context, alerts) -> None:
        async with AlertsScreen(app_context, alerts) as screen:
            view = screen.render()
        assert [entry.id for entry in view.entries] == [3, 2, 1]
        assert view.summary == "You have 3 recent notifications"

    @pytest.mark.asyncio
    async def test_empty_summary(self, app_context, alerts, alerts_source) -> None:
        alerts_source.items = []
        async with AlertsScreen(app_context, alerts) as screen:
            assert screen.render().summary == "No new notifications"

    @pytest.mark.asyncio
    async def test_delete(self, app_context, alerts) -> None:
        async with AlertsScreen(app_context, alerts) as screen:
            assert await screen.delete(2) is True
            assert [entry.id for entry in screen.render().entries] == [3, 1]
        assert last_message(app_context) == (NotificationLevel.SUCCESS, "Alert deleted")

    @pytest.mark.asyncio
    async def test_delete_failure(self, app_context, alerts, alerts_source) -> None:
        async with AlertsScreen(app_context, alerts) as screen:
            alerts_source.fail_delete = APIConnectionError("Failed to connect")
            assert await screen.delete(2) is False
            assert [entry.id for entry in screen.render().entries] == [3, 2, 1]
        assert last_message(app_context) == (NotificationLevel.ERROR, "Failed to delete alert")


class TestSearchScreen:
    """Tests for the search screen."""

    @pytest.fixture
    def results(self) -> list[SearchResult]:
        """Search results for 'reliance' plus an unrelated US listing."""
        return [
            SearchResult(symbol="RELIANCE", exchange="NSE", name="Reliance Industries",
                         country="India"),
            SearchResult(symbol="RELIANCE", exchange="BSE", name="Reliance Industries",
                         country="India"),
            SearchResult(symbol="AAPL", exchange="NASDAQ", name="Apple Inc",
                         country="United States"),
        ]

    @pytest.mark.asyncio
    async def test_rows_marked_by_membership(
        self, app_context, fake_client, watchlist, results
    ) -> None:
        fake_client.search_results["rel"] = results
        screen = SearchScreen(app_context, fake_client, watchlist, quiet_period=0.01)

        async with screen:
            screen.set_query("rel")
            await screen.controller.wait_idle()
            view = screen.render()

        assert view.query == "rel"
        assert view.searching is False
        assert [(row.canonical_symbol, row.in_watchlist) for row in view.rows] == [
            ("RELIANCE.NS", True),
            ("RELIANCE.BO", False),
            ("AAPL", True),
        ]
        assert view.rows[1].action_label == "Add"
        assert view.rows[0].action_label == "Added"

    @pytest.mark.asyncio
    async def test_add_uses_canonical_symbol(
        self, app_context, fake_client, watchlist, watchlist_source, results
    ) -> None:
        async with SearchScreen(app_context, fake_client, watchlist, dma_period=50) as screen:
            assert await screen.add(results[1]) is True

        created = watchlist_source.create_calls[0]
        assert created.symbol == "RELIANCE.BO"
        assert created.country == "India"
        assert created.dma_period == 50
        assert "RELIANCE.BO" in watchlist
        assert last_message(app_context) == (NotificationLevel.SUCCESS, "Added RELIANCE.BO")

    @pytest.mark.asyncio
    async def test_add_existing_is_noop(
        self, app_context, fake_client, watchlist, watchlist_source, results
    ) -> None:
        async with SearchScreen(app_context, fake_client, watchlist) as screen:
            assert await screen.add(results[0]) is True
        assert watchlist_source.create_calls == []

    @pytest.mark.asyncio
    async def test_legacy_raw_symbol_counts_as_member(
        self, app_context, fake_client, watchlist, watchlist_source, results
    ) -> None:
        watchlist_source.items = [make_item("RELIANCE")]
        async with SearchScreen(app_context, fake_client, watchlist) as screen:
            assert await screen.add(results[0]) is True
        assert watchlist_source.create_calls == []

    @pytest.mark.asyncio
    async def test_add_failure(
        self, app_context, fake_client, watchlist, watchlist_source, results
    ) -> None:
        watchlist_source.fail_create = APIServerError("Server error", status_code=500)
        async with SearchScreen(app_context, fake_client, watchlist) as screen:
            assert await screen.add(results[1]) is False
        assert "RELIANCE.BO" not in watchlist
        assert last_message(app_context) == (NotificationLevel.ERROR, "Failed to add stock")

    @pytest.mark.asyncio
    async def test_unexpected_add_failure_toasts(
        self, app_context, fake_client, watchlist, watchlist_source, results
    ) -> None:
        watchlist_source.fail_create = RuntimeError("encoder blew up")
        async with SearchScreen(app_context, fake_client, watchlist) as screen:
            assert await screen.add(results[1]) is False
        assert "RELIANCE.BO" not in watchlist
        assert last_message(app_context) == (NotificationLevel.ERROR, "Failed to add stock")

    @pytest.mark.asyncio
    async def test_add_nse_ticker_with_ampersand(self, app_context, httpx_mock: HTTPXMock) -> None:
        """Test Mahindra & Mahindra is added under M&M.NS."""
        httpx_mock.add_response(url="http://testserver/watchlist", method="GET", json=[])
        httpx_mock.add_response(url="http://testserver/watchlist", method="POST", status_code=201)
        async with StockNotifierAPIClient(base_url="http://testserver") as client:
            watchlist = watchlist_collection(client)
            async with SearchScreen(app_context, client, watchlist) as screen:
                added = await screen.add(SearchResult(symbol="M&M", exchange="NSE", country="India"))

        assert added is True
        assert watchlist.keys() == ["M&M.NS"]
        body = json.loads(httpx_mock.get_request(method="POST").content)
        assert body["symbol"] == "M&M.NS"
        assert last_message(app_context) == (NotificationLevel.SUCCESS, "Added M&M.NS")

    @pytest.mark.asyncio
    async def test_search_failure_shows_no_results(
        self, app_context, fake_client, watchlist
    ) -> None:
        fake_client.fail_search = True
        screen = SearchScreen(app_context, fake_client, watchlist, quiet_period=0.01)
        async with screen:
            screen.set_query("tcs")
            await screen.controller.wait_idle()
            assert screen.render().rows == ()

    @pytest.mark.asyncio
    async def test_unmount_cancels_controller(self, app_context, fake_client, watchlist) -> None:
        screen = SearchScreen(app_context, fake_client, watchlist, quiet_period=0.05)
        async with screen:
            screen.set_query("tcs")
        await asyncio.sleep(0.15)

        assert screen.controller.closed is True
        assert fake_client.search_calls == []


class TestStockDetailScreen:
    """Tests for the stock detail screen."""

    @pytest.fixture
    def history(self) -> list[StockHistoryPoint]:
        """Two daily closes."""
        return [
            StockHistoryPoint(date="2026-02-27", close=98.0, dma200=90.0),
            StockHistoryPoint(date="2026-03-01", close=100.0, dma200=91.0),
        ]

    @pytest.mark.asyncio
    async def test_mount_loads_item_and_default_history(
        self, app_context, fake_client, watchlist, history
    ) -> None:
        fake_client.history = history
        async with StockDetailScreen(app_context, fake_client, watchlist, "AAPL") as screen:
            view = screen.render()

        assert view.found is True
        assert view.item.symbol == "AAPL"
        assert view.period == HistoryPeriod.ONE_YEAR
        assert len(view.history) == 2
        assert view.loading is False
        assert view.error is None
        assert fake_client.history_calls == [("AAPL", HistoryPeriod.ONE_YEAR)]

    @pytest.mark.asyncio
    async def test_set_period_refetches(
        self, app_context, fake_client, watchlist, history
    ) -> None:
        fake_client.history = history
        async with StockDetailScreen(app_context, fake_client, watchlist, "AAPL") as screen:
            await screen.set_period("6M")
            assert screen.render().period == HistoryPeriod.SIX_MONTHS

        assert fake_client.history_calls[-1] == ("AAPL", HistoryPeriod.SIX_MONTHS)

    @pytest.mark.asyncio
    async def test_history_failure_is_error_state(
        self, app_context, fake_client, watchlist
    ) -> None:
        fake_client.fail_history = APIServerError("Server error: no data", status_code=500)
        async with StockDetailScreen(app_context, fake_client, watchlist, "AAPL") as screen:
            view = screen.render()

        assert view.history == ()
        assert "load 1Y history for AAPL" in view.error
        assert view.found is True

    @pytest.mark.asyncio
    async def test_unknown_symbol(self, app_context, fake_client, watchlist) -> None:
        async with StockDetailScreen(app_context, fake_client, watchlist, "MSFT") as screen:
            view = screen.render()
        assert view.found is False
        assert view.item is None

    @pytest.mark.asyncio
    async def test_watchlist_error_reported(
        self, app_context, fake_client, watchlist, watchlist_source, history
    ) -> None:
        watchlist_source.fail_fetch = APIConnectionError("Failed to connect")
        fake_client.history = history
        async with StockDetailScreen(app_context, fake_client, watchlist, "AAPL") as screen:
            view = screen.render()
        assert "load watchlist" in view.error
        assert len(view.history) == 2

    @pytest.mark.asyncio
    async def test_remove(self, app_context, fake_client, watchlist, watchlist_source) -> None:
        async with StockDetailScreen(app_context, fake_client, watchlist, "AAPL") as screen:
            watchlist_source.fail_delete = APIServerError("Server error", status_code=500)
            assert await screen.remove() is False
            assert last_message(app_context) == (NotificationLevel.ERROR, "Failed to delete")

            watchlist_source.fail_delete = None
            assert await screen.remove() is True
            assert screen.render().found is False
