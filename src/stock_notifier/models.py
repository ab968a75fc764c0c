"""Pydantic models for the stock notifier API requests and responses."""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .formatting import dma_distance_pct
from .symbols import canonicalize

DEFAULT_DMA_PERIOD = 200
DEFAULT_ALERT_THRESHOLD = 5.0


class WatchlistItem(BaseModel):
    """A symbol tracked in the watchlist, with its latest server-side quote.

    Attributes:
        symbol: Canonical (exchange-suffixed) ticker, the identity key
        country: Market the symbol trades in
        dma_period: Moving-average window used for alerts
        alert_threshold: Percent distance from the DMA that triggers an alert
        last_price: Most recent price
        change: Absolute change since previous close
        change_percent: Percent change since previous close
        company_name: Display name
        last_checked: When the server last refreshed the quote
        last_dma: Most recent moving-average value
    """

    model_config = ConfigDict(frozen=True)

    symbol: str
    country: Optional[str] = None
    dma_period: int = DEFAULT_DMA_PERIOD
    alert_threshold: float = DEFAULT_ALERT_THRESHOLD
    last_price: float = 0.0
    change: float = 0.0
    change_percent: float = 0.0
    company_name: Optional[str] = None
    last_checked: Optional[datetime] = None
    last_dma: Optional[float] = None

    @classmethod
    def placeholder(
        cls,
        symbol: str,
        country: Optional[str] = None,
        dma_period: int = DEFAULT_DMA_PERIOD,
        alert_threshold: float = DEFAULT_ALERT_THRESHOLD,
    ) -> "WatchlistItem":
        """Build the locally-visible item for an add that is not yet confirmed.

        Quote fields stay zeroed until the next load replaces the item with
        the server's copy.
        """
        return cls(
            symbol=symbol,
            country=country,
            dma_period=dma_period,
            alert_threshold=alert_threshold,
        )

    @property
    def dma_distance_pct(self) -> Optional[float]:
        """Percent distance between last price and last DMA."""
        return dma_distance_pct(self.last_price, self.last_dma)

    @property
    def is_placeholder(self) -> bool:
        """True for an optimistic item the server has not reported on yet."""
        return self.last_checked is None and self.last_price == 0.0


class WatchlistItemCreate(BaseModel):
    """Request schema for adding a symbol to the watchlist."""

    symbol: str = Field(..., description="Canonical ticker symbol")
    dma_period: int = Field(DEFAULT_DMA_PERIOD, gt=0, description="DMA window in days")
    alert_threshold: float = Field(
        DEFAULT_ALERT_THRESHOLD, gt=0, description="Alert distance from DMA in percent"
    )
    country: Optional[str] = Field(None, description="Market the symbol trades in")

    @field_validator("symbol")
    @classmethod
    def normalize_symbol(cls, v: str) -> str:
        v = v.upper().strip()
        if not v:
            raise ValueError("Symbol must not be empty")
        return v


class AlertLogEntry(BaseModel):
    """A triggered alert recorded by the server."""

    model_config = ConfigDict(frozen=True)

    id: int
    timestamp: datetime
    symbol: str
    message: str
    alert_type: str


class SearchResult(BaseModel):
    """One instrument returned by symbol search.

    ``symbol`` is the raw ticker without any exchange suffix.
    """

    model_config = ConfigDict(frozen=True)

    symbol: str
    exchange: str = ""
    name: Optional[str] = None
    country: Optional[str] = None
    currency: Optional[str] = None
    instrument_name: Optional[str] = None
    instrument_type: Optional[str] = None
    mic_code: Optional[str] = None
    last_price: Optional[float] = None
    change: Optional[float] = None
    change_percent: Optional[float] = None

    @property
    def canonical_symbol(self) -> str:
        """Symbol this result would be stored under in the watchlist."""
        return canonicalize(self.symbol, self.exchange)

    @property
    def display_name(self) -> str:
        return self.name or self.instrument_name or self.symbol


class StockHistoryPoint(BaseModel):
    """Daily close with optional moving averages."""

    model_config = ConfigDict(frozen=True)

    date: str
    close: float
    dma50: Optional[float] = None
    dma100: Optional[float] = None
    dma200: Optional[float] = None


class ServerStatus(BaseModel):
    """Liveness response from the API root."""

    status: str
    service: str


def parse_search_payload(data: Any) -> list[SearchResult]:
    """Parse a search response that is either a list or ``{"data": [...]}``."""
    if isinstance(data, dict):
        data = data.get("data") or []
    if not isinstance(data, list):
        return []
    return [SearchResult.model_validate(item) for item in data]
