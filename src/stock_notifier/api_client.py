"""API Client for the Stock Notifier server.

This module provides an async HTTP client for the watchlist, alert log,
symbol search, and price history endpoints of the Stock Notifier API.
"""

import logging
from typing import Any, Optional, TypeVar, Union
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError

from .exceptions import SearchError
from .models import (
    DEFAULT_ALERT_THRESHOLD,
    DEFAULT_DMA_PERIOD,
    AlertLogEntry,
    SearchResult,
    ServerStatus,
    StockHistoryPoint,
    WatchlistItem,
    WatchlistItemCreate,
    parse_search_payload,
)
from .state import DEFAULT_HISTORY_PERIOD, HistoryPeriod

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class APIError(Exception):
    """Base exception for API errors."""

    def __init__(self, message: str, status_code: Optional[int] = None, detail: Any = None):
        """Initialize API error.

        Args:
            message: Error message
            status_code: HTTP status code if applicable
            detail: Additional error details
        """
        self.message = message
        self.status_code = status_code
        self.detail = detail
        super().__init__(self.message)


class APIConnectionError(APIError):
    """Exception raised when connection to API fails."""

    pass


class APIValidationError(APIError):
    """Exception raised when API returns validation error (422)."""

    pass


class APIServerError(APIError):
    """Exception raised when API returns server error (5xx)."""

    pass


class APIResponseError(APIError):
    """Exception raised when a success response body does not match its schema."""

    pass


class StockNotifierAPIClient:
    """Async HTTP client for the Stock Notifier API.

    Provides methods for every endpoint the watchlist sync layer consumes.
    All methods are coroutines and must be awaited on the event loop that
    owns the client.

    Attributes:
        base_url: Base URL for API server
        timeout: Request timeout in seconds
        _client: Underlying httpx AsyncClient
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        timeout: float = 30,
    ):
        """Initialize API client.

        Args:
            base_url: Base URL for API server (default: http://localhost:8000)
            timeout: Request timeout in seconds (default: 30)

        Example:
            >>> async with StockNotifierAPIClient("http://localhost:8000") as client:
            ...     items = await client.list_watchlist()
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            follow_redirects=True,
        )

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def _make_request(
        self,
        method: str,
        endpoint: str,
        json: Optional[dict] = None,
        params: Optional[dict] = None,
    ) -> Any:
        """Make HTTP request and handle errors.

        Args:
            method: HTTP method (GET, POST, DELETE)
            endpoint: API endpoint path
            json: JSON request body
            params: Query parameters

        Returns:
            Response data (dict, list, or None)

        Raises:
            APIConnectionError: If connection fails or times out
            APIValidationError: If validation fails (422)
            APIServerError: If server error occurs (5xx)
            APIError: For other HTTP errors
        """
        url = endpoint if endpoint.startswith("http") else f"{self.base_url}{endpoint}"

        try:
            response = await self._client.request(
                method=method,
                url=url,
                json=json,
                params=params,
            )

            # Any 2xx is success; empty bodies (204, bare 202) carry no data
            if response.is_success:
                return response.json() if response.text else None

            # Handle errors
            error_detail = None
            try:
                error_data = response.json()
                if isinstance(error_data, dict):
                    error_detail = error_data.get("detail", error_data.get("message"))
            except ValueError:
                error_detail = response.text

            # Validation errors (422)
            if response.status_code == 422:
                raise APIValidationError(
                    message=f"Validation error: {error_detail}",
                    status_code=422,
                    detail=error_detail,
                )

            # Server errors (5xx)
            if response.status_code >= 500:
                raise APIServerError(
                    message=f"Server error: {error_detail}",
                    status_code=response.status_code,
                    detail=error_detail,
                )

            # Everything else outside 2xx (3xx left over after redirects, 4xx)
            raise APIError(
                message=f"API error ({response.status_code}): {error_detail}",
                status_code=response.status_code,
                detail=error_detail,
            )

        except httpx.ConnectError as e:
            raise APIConnectionError(
                message=f"Failed to connect to API server at {self.base_url}: {str(e)}"
            ) from e
        except httpx.TimeoutException as e:
            raise APIConnectionError(
                message=f"Request timed out after {self.timeout}s: {str(e)}"
            ) from e
        except APIError:
            raise
        except (httpx.HTTPError, ValueError) as e:
            raise APIError(
                message=f"Unexpected error during API request: {str(e)}"
            ) from e

    @staticmethod
    def _parse(model: type[ModelT], data: Any, endpoint: str) -> ModelT:
        """Validate one response object, raising APIResponseError if it is malformed."""
        try:
            return model.model_validate(data)
        except ValidationError as e:
            logger.debug(f"Rejected {model.__name__} from {endpoint}: {e}")
            raise APIResponseError(
                message=f"Malformed response from {endpoint}: {e.error_count()} invalid field(s)",
                detail=e.errors(include_url=False),
            ) from e

    def _parse_list(self, model: type[ModelT], data: Any, endpoint: str) -> list[ModelT]:
        """Validate a response array, treating a missing body as empty."""
        if data is None:
            return []
        if not isinstance(data, list):
            raise APIResponseError(
                message=f"Malformed response from {endpoint}: "
                f"expected a list, got {type(data).__name__}"
            )
        return [self._parse(model, item, endpoint) for item in data]

    # Health and connectivity methods

    async def get_server_status(self) -> ServerStatus:
        """Fetch the liveness payload from the API root.

        Returns:
            Server status and service name

        Raises:
            APIError: If request fails
        """
        data = await self._make_request("GET", "/")
        return self._parse(ServerStatus, data, "/")

    # Watchlist methods

    async def list_watchlist(self) -> list[WatchlistItem]:
        """List all watchlist items.

        Returns:
            Watchlist items in server order

        Raises:
            APIError: If request fails

        Example:
            >>> items = await client.list_watchlist()
            >>> for item in items:
            ...     print(f"{item.symbol}: {item.last_price}")
        """
        data = await self._make_request("GET", "/watchlist")
        return self._parse_list(WatchlistItem, data, "/watchlist")

    async def add_watchlist_item(
        self,
        symbol: str,
        country: Optional[str] = None,
        dma_period: int = DEFAULT_DMA_PERIOD,
        alert_threshold: float = DEFAULT_ALERT_THRESHOLD,
    ) -> Any:
        """Add a symbol to the watchlist.

        Args:
            symbol: Canonical (exchange-suffixed) ticker
            country: Optional market the symbol trades in
            dma_period: Moving-average window (default: 200)
            alert_threshold: Alert distance from DMA in percent (default: 5.0)

        Returns:
            Raw server response body, if any

        Raises:
            APIValidationError: If the item is invalid or the server rejects it (422)
            APIError: If request fails

        Example:
            >>> await client.add_watchlist_item("RELIANCE.NS", country="India")
        """
        try:
            payload = WatchlistItemCreate(
                symbol=symbol,
                country=country,
                dma_period=dma_period,
                alert_threshold=alert_threshold,
            ).model_dump(exclude_none=True)
        except ValidationError as e:
            raise APIValidationError(
                message=f"Validation error: {e.error_count()} invalid field(s)",
                detail=e.errors(include_url=False),
            ) from e
        return await self._make_request("POST", "/watchlist", json=payload)

    async def delete_watchlist_item(self, symbol: str) -> None:
        """Remove a symbol from the watchlist.

        Args:
            symbol: Canonical ticker

        Raises:
            APIError: If symbol not found or request fails
        """
        await self._make_request("DELETE", f"/watchlist/{quote(symbol, safe='')}")

    # Alert log methods

    async def list_alerts(self) -> list[AlertLogEntry]:
        """List alert log entries, newest first.

        Returns:
            Alert log entries sorted by timestamp descending

        Raises:
            APIError: If request fails
        """
        data = await self._make_request("GET", "/logs")
        entries = self._parse_list(AlertLogEntry, data, "/logs")
        return sorted(entries, key=lambda entry: entry.timestamp, reverse=True)

    async def delete_alert(self, alert_id: int) -> None:
        """Delete an alert log entry.

        Args:
            alert_id: Alert log entry identifier

        Raises:
            APIError: If entry not found or request fails
        """
        await self._make_request("DELETE", f"/logs/{alert_id}")

    # Search and market data methods

    async def search(self, query: str) -> list[SearchResult]:
        """Search instruments by ticker or name.

        Accepts either a bare array or a ``{"data": [...]}`` envelope.

        Args:
            query: Free-text query

        Returns:
            Matching instruments (empty for a blank query, without a request)

        Raises:
            SearchError: If the request fails or the payload is malformed

        Example:
            >>> results = await client.search("reliance")
            >>> [r.canonical_symbol for r in results]
            ['RELIANCE.NS', 'RELIANCE.BO']
        """
        if not query or not query.strip():
            return []
        try:
            data = await self._make_request("GET", "/search", params={"q": query})
        except APIError as e:
            raise SearchError(query, e) from e
        try:
            return parse_search_payload(data)
        except ValidationError as e:
            raise SearchError(query, e) from e

    async def get_stock_history(
        self,
        symbol: str,
        period: Union[HistoryPeriod, str] = DEFAULT_HISTORY_PERIOD,
    ) -> list[StockHistoryPoint]:
        """Get closing price history with moving averages.

        Args:
            symbol: Canonical ticker
            period: Lookback window (1M, 6M, 1Y, 2Y, 5Y, Max)

        Returns:
            History points in server order

        Raises:
            ValueError: If the period label is invalid
            APIError: If request fails
        """
        if not isinstance(period, HistoryPeriod):
            period = HistoryPeriod.parse(period)
        data = await self._make_request(
            "GET",
            f"/stock/{quote(symbol, safe='')}/history",
            params={"period": period.value},
        )
        return self._parse_list(StockHistoryPoint, data, f"/stock/{symbol}/history")
