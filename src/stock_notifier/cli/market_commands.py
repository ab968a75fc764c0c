"""
Market data commands for the stock notifier CLI.

This module provides symbol search, price history, server status and the
live overview that refreshes in the background.
"""

import asyncio
import sys
from typing import Optional

import click

from ..api_client import APIError
from ..collection import alerts_collection, watchlist_collection
from ..screens import HomeScreen, SearchScreen, StockDetailScreen
from ..screens.home import HomeView
from ..state import DEFAULT_HISTORY_PERIOD, HistoryPeriod
from .utils import (
    api_session,
    get_cli_context,
    print_alerts,
    print_error,
    print_history,
    print_json,
    print_search_rows,
    print_stock_detail,
    print_success,
    print_warning,
    print_watchlist,
    run_async,
)

PERIOD_CHOICES = [p.value for p in HistoryPeriod]


@click.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """
    Check that the API server is up.

    Example: stock-notifier status
    """
    cli_ctx = get_cli_context(ctx)

    async def check():
        async with api_session(cli_ctx) as client:
            return await client.get_server_status()

    try:
        server = run_async(check())
    except APIError as e:
        print_error(f"API unavailable: {e}")
        sys.exit(1)

    if cli_ctx.json:
        print_json(server)
    else:
        print_success(f"{server.service}: {server.status}")


@click.command()
@click.argument("query")
@click.pass_context
def search(ctx: click.Context, query: str) -> None:
    """
    Search for symbols by ticker or company name.

    Example: stock-notifier search reliance
    """
    cli_ctx = get_cli_context(ctx)

    async def run():
        async with api_session(cli_ctx) as client:
            screen = SearchScreen(
                cli_ctx.app,
                client,
                watchlist_collection(client),
                quiet_period=cli_ctx.config.search_debounce,
            )
            async with screen:
                screen.set_query(query)
                await screen.controller.wait_idle()
                return screen.render()

    view = run_async(run())
    if cli_ctx.json:
        print_json([row.result for row in view.rows])
    else:
        print_search_rows(view.rows)


@click.command()
@click.argument("symbol")
@click.option(
    "--period",
    "-p",
    type=click.Choice(PERIOD_CHOICES, case_sensitive=False),
    default=DEFAULT_HISTORY_PERIOD.value,
    help="History lookback window",
)
@click.pass_context
def history(ctx: click.Context, symbol: str, period: str) -> None:
    """
    Show a watched symbol's quote and price history.

    Example: stock-notifier history AAPL --period 6M
    """
    cli_ctx = get_cli_context(ctx)
    symbol = symbol.upper()

    async def run():
        async with api_session(cli_ctx) as client:
            screen = StockDetailScreen(
                cli_ctx.app,
                client,
                watchlist_collection(client),
                symbol,
                period=HistoryPeriod.parse(period),
            )
            async with screen:
                return screen.render()

    view = run_async(run())

    if cli_ctx.json:
        print_json({"item": view.item, "period": view.period.value, "history": view.history})
    else:
        if view.item is not None:
            print_stock_detail(view.item)
        else:
            print_warning(f"{symbol} is not in the watchlist")
        print_history(view.history, view.period.value)

    if view.error:
        print_error(view.error)
        sys.exit(1)


def _print_overview(view: HomeView) -> None:
    click.secho("=== Overview ===", bold=True)
    if view.watchlist_error:
        print_error(view.watchlist_error)
    else:
        print_watchlist(view.watchlist)
    click.echo()
    click.secho("Recent alerts", bold=True)
    if view.alerts_error:
        print_error(view.alerts_error)
    else:
        print_alerts(view.recent_alerts)


@click.command()
@click.option(
    "--duration",
    "-d",
    type=float,
    default=None,
    help="Stop after this many seconds (default: run until interrupted)",
)
@click.pass_context
def watch(ctx: click.Context, duration: Optional[float]) -> None:
    """
    Show the overview and keep it refreshed in the background.

    Example: stock-notifier watch --duration 300
    """
    cli_ctx = get_cli_context(ctx)
    interval = cli_ctx.config.refresh_interval

    async def run():
        async with api_session(cli_ctx) as client:
            screen = HomeScreen(
                cli_ctx.app,
                watchlist_collection(client),
                alerts_collection(client),
                refresh_interval=interval,
            )
            async with screen:
                _print_overview(screen.render())
                loop = asyncio.get_running_loop()
                deadline = None if duration is None else loop.time() + duration
                while True:
                    wait = interval
                    if deadline is not None:
                        wait = min(interval, deadline - loop.time())
                        if wait <= 0:
                            break
                    await asyncio.sleep(wait)
                    click.echo()
                    _print_overview(screen.render())

    try:
        run_async(run())
    except KeyboardInterrupt:
        click.echo("Stopped")
