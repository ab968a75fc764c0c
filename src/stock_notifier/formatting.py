"""Display helpers shared by the screens and the CLI."""

from datetime import datetime, timezone
from typing import Optional


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def time_ago(timestamp: Optional[datetime], now: Optional[datetime] = None) -> str:
    """Format a timestamp as a short relative age such as ``5m ago``."""
    if timestamp is None:
        return "never"
    if now is None:
        now = datetime.now(timestamp.tzinfo)
    elif (now.tzinfo is None) != (timestamp.tzinfo is None):
        # Naive values are taken to be UTC
        now = _as_utc(now)
        timestamp = _as_utc(timestamp)

    seconds = max(0, int((now - timestamp).total_seconds()))
    if seconds < 60:
        return f"{seconds}s ago"
    if seconds < 3600:
        return f"{seconds // 60}m ago"
    if seconds < 86400:
        return f"{seconds // 3600}h ago"
    return f"{seconds // 86400}d ago"


def format_price(value: Optional[float]) -> str:
    if value is None:
        return "-"
    return f"{value:.2f}"


def format_change(change: float, change_percent: float) -> str:
    """Format a signed change with its percentage, e.g. ``+1.23 (0.45%)``."""
    sign = "+" if change >= 0 else ""
    return f"{sign}{change:.2f} ({change_percent:.2f}%)"


def dma_distance_pct(last_price: float, last_dma: Optional[float]) -> Optional[float]:
    """Absolute percent distance of the price from its moving average."""
    if not last_dma:
        return None
    return abs((last_price - last_dma) / last_dma * 100)
