"""Tests for the Stock Notifier API Client.

Covers successful requests for every endpoint, error mapping, and
connection detection.
"""

import json
from typing import Any

import httpx
import pytest
from pytest_httpx import HTTPXMock

from src.stock_notifier.api_client import (
    APIConnectionError,
    APIError,
    APIResponseError,
    APIServerError,
    APIValidationError,
    StockNotifierAPIClient,
)
from src.stock_notifier.exceptions import SearchError
from src.stock_notifier.state import HistoryPeriod


@pytest.fixture
def api_client():
    """Create API client for testing.

    Returns:
        StockNotifierAPIClient instance
    """
    return StockNotifierAPIClient(base_url="http://testserver", timeout=5)


@pytest.fixture
def mock_watchlist_response() -> list[dict[str, Any]]:
    """Mock watchlist response data.

    Returns:
        List of watchlist item dictionaries
    """
    return [
        {
            "symbol": "RELIANCE.NS",
            "country": "India",
            "dma_period": 200,
            "alert_threshold": 5.0,
            "last_price": 2950.5,
            "change": 12.0,
            "change_percent": 0.41,
            "company_name": "Reliance Industries",
            "last_checked": "2026-03-01T09:15:00",
            "last_dma": 2800.0,
        },
        {"symbol": "AAPL"},
    ]


# Connection Tests


@pytest.mark.asyncio
async def test_get_server_status(httpx_mock: HTTPXMock, api_client: StockNotifierAPIClient):
    """Test server status parses the root payload."""
    httpx_mock.add_response(
        url="http://testserver/",
        json={"status": "ok", "service": "Stock Notifier API"},
    )

    status = await api_client.get_server_status()
    assert status.status == "ok"
    assert status.service == "Stock Notifier API"


@pytest.mark.asyncio
async def test_connection_error(httpx_mock: HTTPXMock, api_client: StockNotifierAPIClient):
    """Test connection errors are mapped to APIConnectionError."""
    httpx_mock.add_exception(httpx.ConnectError("Connection refused"))

    with pytest.raises(APIConnectionError) as exc_info:
        await api_client.list_watchlist()
    assert "Failed to connect" in str(exc_info.value)
    assert exc_info.value.status_code is None


@pytest.mark.asyncio
async def test_timeout_error(httpx_mock: HTTPXMock, api_client: StockNotifierAPIClient):
    """Test timeouts are mapped to APIConnectionError."""
    httpx_mock.add_exception(httpx.ReadTimeout("Read timed out"))

    with pytest.raises(APIConnectionError) as exc_info:
        await api_client.list_alerts()
    assert "timed out" in str(exc_info.value)


@pytest.mark.asyncio
async def test_server_error(httpx_mock: HTTPXMock, api_client: StockNotifierAPIClient):
    """Test 5xx responses raise APIServerError."""
    httpx_mock.add_response(
        url="http://testserver/watchlist",
        json={"detail": "Database unavailable"},
        status_code=503,
    )

    with pytest.raises(APIServerError) as exc_info:
        await api_client.list_watchlist()
    assert exc_info.value.status_code == 503
    assert exc_info.value.detail == "Database unavailable"


@pytest.mark.asyncio
async def test_non_json_error_body(httpx_mock: HTTPXMock, api_client: StockNotifierAPIClient):
    """Test plain-text error bodies are kept as detail."""
    httpx_mock.add_response(
        url="http://testserver/watchlist",
        text="Bad Gateway",
        status_code=502,
    )

    with pytest.raises(APIServerError) as exc_info:
        await api_client.list_watchlist()
    assert exc_info.value.detail == "Bad Gateway"


@pytest.mark.asyncio
async def test_accepted_without_body_is_success(
    httpx_mock: HTTPXMock, api_client: StockNotifierAPIClient
):
    """Test any 2xx status counts as success, even with an empty body."""
    httpx_mock.add_response(
        url="http://testserver/watchlist/AAPL",
        method="DELETE",
        status_code=202,
    )

    assert await api_client.delete_watchlist_item("AAPL") is None


@pytest.mark.asyncio
async def test_malformed_row_raises_response_error(
    httpx_mock: HTTPXMock, api_client: StockNotifierAPIClient
):
    """Test a row failing schema validation surfaces as an APIError."""
    httpx_mock.add_response(
        url="http://testserver/watchlist",
        json=[{"symbol": "AAPL", "last_price": None}],
    )

    with pytest.raises(APIResponseError) as exc_info:
        await api_client.list_watchlist()
    assert "/watchlist" in str(exc_info.value)
    assert exc_info.value.detail[0]["loc"] == ("last_price",)


@pytest.mark.asyncio
async def test_non_list_body_raises_response_error(
    httpx_mock: HTTPXMock, api_client: StockNotifierAPIClient
):
    httpx_mock.add_response(url="http://testserver/logs", json={"status": "ok"})

    with pytest.raises(APIResponseError):
        await api_client.list_alerts()


@pytest.mark.asyncio
async def test_get_server_status_empty_body(
    httpx_mock: HTTPXMock, api_client: StockNotifierAPIClient
):
    httpx_mock.add_response(url="http://testserver/", status_code=200)

    with pytest.raises(APIResponseError):
        await api_client.get_server_status()


# Watchlist Tests


@pytest.mark.asyncio
async def test_list_watchlist(
    httpx_mock: HTTPXMock,
    api_client: StockNotifierAPIClient,
    mock_watchlist_response: list[dict[str, Any]],
):
    """Test listing the watchlist keeps server order and fills defaults."""
    httpx_mock.add_response(url="http://testserver/watchlist", json=mock_watchlist_response)

    items = await api_client.list_watchlist()
    assert [item.symbol for item in items] == ["RELIANCE.NS", "AAPL"]
    assert items[0].last_dma == 2800.0
    assert items[1].dma_period == 200
    assert items[1].is_placeholder is True


@pytest.mark.asyncio
async def test_add_watchlist_item(httpx_mock: HTTPXMock, api_client: StockNotifierAPIClient):
    """Test add sends the normalized create payload."""
    httpx_mock.add_response(
        url="http://testserver/watchlist",
        method="POST",
        json={"message": "Added"},
        status_code=201,
    )

    await api_client.add_watchlist_item("reliance.ns", country="India", dma_period=50)

    request = httpx_mock.get_request()
    assert json.loads(request.content) == {
        "symbol": "RELIANCE.NS",
        "country": "India",
        "dma_period": 50,
        "alert_threshold": 5.0,
    }


@pytest.mark.asyncio
async def test_add_watchlist_item_validation_error(
    httpx_mock: HTTPXMock, api_client: StockNotifierAPIClient
):
    """Test 422 responses raise APIValidationError."""
    httpx_mock.add_response(
        url="http://testserver/watchlist",
        method="POST",
        json={"detail": "Symbol already tracked"},
        status_code=422,
    )

    with pytest.raises(APIValidationError) as exc_info:
        await api_client.add_watchlist_item("AAPL")
    assert exc_info.value.status_code == 422


@pytest.mark.asyncio
async def test_add_watchlist_item_with_ampersand(
    httpx_mock: HTTPXMock, api_client: StockNotifierAPIClient
):
    """Test tickers with punctuation are sent unchanged."""
    httpx_mock.add_response(url="http://testserver/watchlist", method="POST", status_code=201)

    await api_client.add_watchlist_item("M&M.NS", country="India")

    assert json.loads(httpx_mock.get_request().content)["symbol"] == "M&M.NS"


@pytest.mark.asyncio
async def test_add_watchlist_item_blank_symbol(api_client: StockNotifierAPIClient):
    """Test a blank symbol is rejected before any request."""
    with pytest.raises(APIValidationError) as exc_info:
        await api_client.add_watchlist_item("  ")
    assert exc_info.value.status_code is None


@pytest.mark.asyncio
async def test_delete_watchlist_item(httpx_mock: HTTPXMock, api_client: StockNotifierAPIClient):
    """Test delete targets the symbol path."""
    httpx_mock.add_response(
        url="http://testserver/watchlist/RELIANCE.NS",
        method="DELETE",
        status_code=204,
    )

    assert await api_client.delete_watchlist_item("RELIANCE.NS") is None


@pytest.mark.asyncio
async def test_delete_watchlist_item_not_found(
    httpx_mock: HTTPXMock, api_client: StockNotifierAPIClient
):
    """Test 404 error when symbol is not tracked."""
    httpx_mock.add_response(
        url="http://testserver/watchlist/MSFT",
        method="DELETE",
        json={"detail": "Stock not found"},
        status_code=404,
    )

    with pytest.raises(APIError) as exc_info:
        await api_client.delete_watchlist_item("MSFT")
    assert exc_info.value.status_code == 404
    assert "Stock not found" in str(exc_info.value)


# Alert Log Tests


@pytest.mark.asyncio
async def test_list_alerts_newest_first(httpx_mock: HTTPXMock, api_client: StockNotifierAPIClient):
    """Test alerts are returned newest first regardless of server order."""
    httpx_mock.add_response(
        url="http://testserver/logs",
        json=[
            {"id": 2, "timestamp": "2026-03-01T10:00:00", "symbol": "AAPL",
             "message": "m2", "alert_type": "dma"},
            {"id": 1, "timestamp": "2026-03-01T09:00:00", "symbol": "AAPL",
             "message": "m1", "alert_type": "dma"},
            {"id": 3, "timestamp": "2026-03-01T11:00:00", "symbol": "TCS.NS",
             "message": "m3", "alert_type": "dma"},
        ],
    )

    entries = await api_client.list_alerts()
    assert [entry.id for entry in entries] == [3, 2, 1]


@pytest.mark.asyncio
async def test_delete_alert(httpx_mock: HTTPXMock, api_client: StockNotifierAPIClient):
    """Test alert deletion by id."""
    httpx_mock.add_response(
        url="http://testserver/logs/42",
        method="DELETE",
        json={"message": "Deleted"},
    )

    await api_client.delete_alert(42)
    assert httpx_mock.get_request().method == "DELETE"


# Search and History Tests


@pytest.mark.asyncio
async def test_search_bare_list(httpx_mock: HTTPXMock, api_client: StockNotifierAPIClient):
    """Test search accepts a bare array."""
    httpx_mock.add_response(
        url="http://testserver/search?q=AAPL",
        json=[{"symbol": "AAPL", "exchange": "NASDAQ", "name": "Apple Inc"}],
    )

    results = await api_client.search("AAPL")
    assert len(results) == 1
    assert results[0].canonical_symbol == "AAPL"


@pytest.mark.asyncio
async def test_search_envelope(httpx_mock: HTTPXMock, api_client: StockNotifierAPIClient):
    """Test search accepts a data envelope."""
    httpx_mock.add_response(
        url="http://testserver/search?q=reliance",
        json={"data": [
            {"symbol": "RELIANCE", "exchange": "NSE", "country": "India"},
            {"symbol": "RELIANCE", "exchange": "BSE", "country": "India"},
        ]},
    )

    results = await api_client.search("reliance")
    assert [r.canonical_symbol for r in results] == ["RELIANCE.NS", "RELIANCE.BO"]


@pytest.mark.asyncio
async def test_search_blank_query_makes_no_request(
    httpx_mock: HTTPXMock, api_client: StockNotifierAPIClient
):
    """Test blank queries short-circuit."""
    assert await api_client.search("   ") == []
    assert httpx_mock.get_requests() == []


@pytest.mark.asyncio
async def test_search_failure_raises_search_error(
    httpx_mock: HTTPXMock, api_client: StockNotifierAPIClient
):
    """Test search failures are wrapped in SearchError."""
    httpx_mock.add_response(
        url="http://testserver/search?q=AAPL",
        json={"detail": "Upstream quota exceeded"},
        status_code=500,
    )

    with pytest.raises(SearchError) as exc_info:
        await api_client.search("AAPL")
    assert exc_info.value.query == "AAPL"
    assert isinstance(exc_info.value.cause, APIServerError)


@pytest.mark.asyncio
async def test_search_malformed_payload_raises_search_error(
    httpx_mock: HTTPXMock, api_client: StockNotifierAPIClient
):
    """Test results failing validation are wrapped in SearchError."""
    httpx_mock.add_response(
        url="http://testserver/search?q=ABC",
        json=[{"symbol": "ABC", "exchange": None}],
    )

    with pytest.raises(SearchError) as exc_info:
        await api_client.search("ABC")
    assert exc_info.value.query == "ABC"


@pytest.mark.asyncio
async def test_get_stock_history(httpx_mock: HTTPXMock, api_client: StockNotifierAPIClient):
    """Test history passes the period label and parses points."""
    httpx_mock.add_response(
        url="http://testserver/stock/RELIANCE.NS/history?period=6M",
        json=[
            {"date": "2025-09-01", "close": 2700.0, "dma50": 2650.0},
            {"date": "2026-03-01", "close": 2950.5, "dma50": 2900.0, "dma200": 2800.0},
        ],
    )

    history = await api_client.get_stock_history("RELIANCE.NS", HistoryPeriod.SIX_MONTHS)
    assert [point.close for point in history] == [2700.0, 2950.5]
    assert history[0].dma200 is None
    assert history[1].dma200 == 2800.0


@pytest.mark.asyncio
async def test_get_stock_history_default_period(
    httpx_mock: HTTPXMock, api_client: StockNotifierAPIClient
):
    """Test history defaults to one year."""
    httpx_mock.add_response(url="http://testserver/stock/AAPL/history?period=1Y", json=[])

    assert await api_client.get_stock_history("AAPL") == []


@pytest.mark.asyncio
async def test_get_stock_history_invalid_period(api_client: StockNotifierAPIClient):
    """Test an unknown period label fails before any request."""
    with pytest.raises(ValueError):
        await api_client.get_stock_history("AAPL", "3W")
