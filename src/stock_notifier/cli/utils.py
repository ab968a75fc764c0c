"""
CLI utility functions for the stock notifier.

This module provides helper functions for formatting output, running the
async screens from click commands, and managing CLI context.
"""

import asyncio
import json
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Coroutine, TypeVar

import click
from pydantic import BaseModel

from ..api_client import StockNotifierAPIClient
from ..context import Notification, NotificationLevel
from ..formatting import format_change, format_price, time_ago
from ..models import AlertLogEntry, StockHistoryPoint, WatchlistItem
from ..screens import SearchRow

T = TypeVar("T")


def get_cli_context(ctx: click.Context):
    """Get the CLIContext from context."""
    return ctx.obj["cli_context"]


def run_async(coro: Coroutine[Any, Any, T]) -> T:
    """Run a coroutine to completion from a synchronous click command."""
    return asyncio.run(coro)


@asynccontextmanager
async def api_session(cli_ctx) -> AsyncIterator[StockNotifierAPIClient]:
    """Open an API client for the duration of one command."""
    async with StockNotifierAPIClient(
        base_url=cli_ctx.config.api_url,
        timeout=cli_ctx.config.api_timeout,
    ) as client:
        yield client


def print_error(message: str) -> None:
    """Print error message to stderr."""
    click.secho(f"Error: {message}", fg="red", err=True)


def print_success(message: str) -> None:
    """Print success message."""
    click.secho(message, fg="green")


def print_warning(message: str) -> None:
    """Print warning message."""
    click.secho(f"Warning: {message}", fg="yellow")


def print_notification(notification: Notification) -> None:
    """Echo a notifier message the way a toast would show it."""
    if notification.level == NotificationLevel.ERROR:
        print_error(notification.message)
    else:
        print_success(notification.message)


def print_json(data: Any) -> None:
    """Print models (or lists of models) as indented JSON."""

    def convert(value: Any) -> Any:
        if isinstance(value, BaseModel):
            return value.model_dump(mode="json")
        if isinstance(value, (list, tuple)):
            return [convert(v) for v in value]
        if isinstance(value, dict):
            return {k: convert(v) for k, v in value.items()}
        return value

    click.echo(json.dumps(convert(data), indent=2))


def print_watchlist(items: tuple[WatchlistItem, ...]) -> None:
    """Print watchlist items as a table."""
    if not items:
        click.echo("Watchlist is empty. Use 'stock-notifier search' to find symbols.")
        return

    click.echo()
    click.echo(f"{'Symbol':<14} {'Price':>10} {'Change':>20} {'DMA':>6} {'Alert':>7} {'Checked':>10}")
    click.echo("=" * 72)
    for item in items:
        if item.is_placeholder:
            change = "pending"
        else:
            change = format_change(item.change, item.change_percent)
        click.echo(
            f"{item.symbol:<14} "
            f"{format_price(item.last_price):>10} "
            f"{change:>20} "
            f"{item.dma_period:>6} "
            f"{item.alert_threshold:>6.1f}% "
            f"{time_ago(item.last_checked):>10}"
        )
    click.echo()
    click.echo(f"{len(items)} stocks tracked")


def print_alerts(entries: tuple[AlertLogEntry, ...]) -> None:
    """Print alert log entries newest first."""
    if not entries:
        click.echo("All caught up! No alerts have triggered.")
        return

    for entry in entries:
        click.echo(
            f"[{entry.id}] {entry.symbol:<12} {time_ago(entry.timestamp):>8}  {entry.message}"
        )


def print_search_rows(rows: tuple[SearchRow, ...]) -> None:
    """Print search results with their watchlist status."""
    if not rows:
        click.echo("No results")
        return

    for row in rows:
        result = row.result
        marker = "[added]" if row.in_watchlist else "       "
        exchange = f" ({result.exchange})" if result.exchange else ""
        click.echo(f"{marker} {row.canonical_symbol:<14} {result.display_name}{exchange}")


def print_stock_detail(item: WatchlistItem) -> None:
    """Print quote and monitoring settings for one watchlist item."""
    click.echo()
    click.secho(f"=== {item.symbol} ===", bold=True)
    if item.company_name:
        click.echo(item.company_name)
    click.echo(f"Price:           {format_price(item.last_price)}")
    click.echo(f"Change:          {format_change(item.change, item.change_percent)}")
    click.echo(f"Alert Threshold: {item.alert_threshold}%")
    click.echo(f"Monitoring:      {item.dma_period} DMA")
    distance = item.dma_distance_pct
    if distance is not None:
        click.echo(f"DMA Distance:    {distance:.2f}% away")
    checked = item.last_checked.strftime("%Y-%m-%d %H:%M") if item.last_checked else "-"
    click.echo(f"Last Updated:    {checked}")


def print_history(history: tuple[StockHistoryPoint, ...], period: str) -> None:
    """Print a short summary of a price history series."""
    if not history:
        click.echo(f"No {period} history available")
        return

    first, last = history[0], history[-1]
    change = last.close - first.close
    pct = (change / first.close * 100) if first.close else 0.0
    click.echo()
    click.echo(f"History ({period}): {len(history)} points, {first.date} to {last.date}")
    click.echo(f"  Close: {format_price(first.close)} -> {format_price(last.close)} "
               f"{format_change(change, pct)}")
    if last.dma200 is not None:
        click.echo(f"  200 DMA: {format_price(last.dma200)}")
