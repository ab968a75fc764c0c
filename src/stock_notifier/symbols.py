"""Symbol identity rules for watchlist entries.

Search results carry a raw ticker plus an exchange code, while the watchlist
stores tickers with the exchange suffix the price backend expects
(e.g. ``RELIANCE.NS``). These helpers map between the two.
"""

from typing import AbstractSet, Literal, Optional

# Exchange code -> suffix appended to the raw ticker
EXCHANGE_SUFFIXES: dict[str, str] = {
    "NSE": ".NS",  # National Stock Exchange of India
    "BSE": ".BO",  # Bombay Stock Exchange
    "IDX": ".JK",  # Indonesia Stock Exchange (Jakarta)
}

# Well-known US tickers used when a result carries no country
KNOWN_US_SYMBOLS = frozenset({
    "AAPL", "GOOGL", "AMZN", "MSFT", "TSLA", "NVDA", "META", "NFLX", "SPY",
    "QQQ", "AMD", "INTC", "CSCO", "CMCSA", "PEP", "ADBE", "AVGO", "TXN",
})

Country = Literal["USA", "India"]


def canonicalize(symbol: str, exchange: Optional[str]) -> str:
    """Return the identifier a symbol is stored under in the watchlist.

    Args:
        symbol: Raw ticker as returned by search (no suffix)
        exchange: Exchange code of the listing

    Returns:
        Ticker with the exchange suffix appended, or the ticker unchanged
        for exchanges without a suffix rule

    Example:
        >>> canonicalize("RELIANCE", "NSE")
        'RELIANCE.NS'
        >>> canonicalize("AAPL", "NASDAQ")
        'AAPL'
    """
    suffix = EXCHANGE_SUFFIXES.get(exchange or "", "")
    return f"{symbol}{suffix}"


def is_member(
    symbol: str, exchange: Optional[str], watchlist_symbols: AbstractSet[str]
) -> bool:
    """Check whether a search result is already in the watchlist.

    Matches on the canonical symbol, and also on the raw symbol so that
    entries stored before suffixes were applied are still recognized.

    Args:
        symbol: Raw ticker from a search result
        exchange: Exchange code from the search result
        watchlist_symbols: Symbols currently in the watchlist

    Returns:
        True if either form of the symbol is present

    Example:
        >>> is_member("RELIANCE", "NSE", {"RELIANCE.NS"})
        True
    """
    return (
        canonicalize(symbol, exchange) in watchlist_symbols
        or symbol in watchlist_symbols
    )


def normalize_country(country: Optional[str]) -> Country:
    """Collapse a free-form country name into one of the supported markets."""
    if not country:
        return "India"
    if country.strip().lower() in ("united states", "usa"):
        return "USA"
    return "India"


def infer_country(symbol: str, country: Optional[str] = None) -> Country:
    """Best-effort market for a symbol, preferring an explicit country."""
    if country:
        return normalize_country(country)
    if symbol.upper() in KNOWN_US_SYMBOLS:
        return "USA"
    return "India"
