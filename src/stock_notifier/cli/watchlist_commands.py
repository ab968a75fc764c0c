"""
Watchlist and alert log commands for the stock notifier CLI.

This module provides commands for listing, adding and removing watchlist
symbols and for reviewing and dismissing triggered alerts.
"""

import sys
from typing import Optional

import click

from ..collection import alerts_collection, watchlist_collection
from ..models import SearchResult
from ..screens import AlertsScreen, SearchScreen, WatchlistScreen
from .utils import (
    api_session,
    get_cli_context,
    print_alerts,
    print_error,
    print_json,
    print_watchlist,
    run_async,
)


@click.group()
def watchlist() -> None:
    """Manage watched symbols."""
    pass


@watchlist.command("list")
@click.pass_context
def list_watchlist(ctx: click.Context) -> None:
    """
    List watched symbols with their latest quotes.

    Example: stock-notifier watchlist list
    """
    cli_ctx = get_cli_context(ctx)

    async def load():
        async with api_session(cli_ctx) as client:
            async with WatchlistScreen(cli_ctx.app, watchlist_collection(client)) as screen:
                return screen.render()

    view = run_async(load())
    if view.error:
        print_error(view.error)
        sys.exit(1)

    if cli_ctx.json:
        print_json(view.items)
    else:
        print_watchlist(view.items)


@watchlist.command("add")
@click.argument("symbol")
@click.option("--exchange", "-e", default="", help="Exchange code (NSE, BSE, IDX, ...)")
@click.option("--country", help="Country the symbol trades in")
@click.pass_context
def add_symbol(
    ctx: click.Context,
    symbol: str,
    exchange: str,
    country: Optional[str],
) -> None:
    """
    Add a symbol to the watchlist.

    The exchange suffix is appended automatically, so
    'add RELIANCE --exchange NSE' stores RELIANCE.NS.

    Example: stock-notifier watchlist add AAPL --country "United States"
    """
    cli_ctx = get_cli_context(ctx)
    result = SearchResult(symbol=symbol.upper(), exchange=exchange.upper(), country=country)

    async def add() -> bool:
        async with api_session(cli_ctx) as client:
            screen = SearchScreen(
                cli_ctx.app,
                client,
                watchlist_collection(client),
                dma_period=cli_ctx.config.default_dma_period,
                alert_threshold=cli_ctx.config.default_alert_threshold,
            )
            async with screen:
                if screen.watchlist.last_error is not None:
                    print_error(str(screen.watchlist.last_error))
                    return False
                if result.canonical_symbol in screen.watchlist:
                    click.echo(f"{result.canonical_symbol} is already in the watchlist")
                    return True
                return await screen.add(result)

    if not run_async(add()):
        sys.exit(1)


@watchlist.command("remove")
@click.argument("symbol")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def remove_symbol(ctx: click.Context, symbol: str, yes: bool) -> None:
    """
    Remove a symbol from the watchlist.

    Example: stock-notifier watchlist remove RELIANCE.NS
    """
    cli_ctx = get_cli_context(ctx)

    if not yes and not click.confirm(f"Remove {symbol} from watchlist?"):
        click.echo("Cancelled")
        return

    async def remove() -> bool:
        async with api_session(cli_ctx) as client:
            async with WatchlistScreen(cli_ctx.app, watchlist_collection(client)) as screen:
                return await screen.delete(symbol)

    if not run_async(remove()):
        sys.exit(1)


@click.group()
def alerts() -> None:
    """Review triggered alerts."""
    pass


@alerts.command("list")
@click.option("--limit", "-n", type=int, default=None, help="Show only the newest N alerts")
@click.pass_context
def list_alerts(ctx: click.Context, limit: Optional[int]) -> None:
    """
    List triggered alerts, newest first.

    Example: stock-notifier alerts list -n 10
    """
    cli_ctx = get_cli_context(ctx)

    async def load():
        async with api_session(cli_ctx) as client:
            async with AlertsScreen(cli_ctx.app, alerts_collection(client)) as screen:
                return screen.render()

    view = run_async(load())
    if view.error:
        print_error(view.error)
        sys.exit(1)

    entries = view.entries[:limit] if limit else view.entries
    if cli_ctx.json:
        print_json(entries)
        return

    click.echo(view.summary)
    print_alerts(entries)


@alerts.command("delete")
@click.argument("alert_id", type=int)
@click.pass_context
def delete_alert(ctx: click.Context, alert_id: int) -> None:
    """
    Dismiss a triggered alert.

    Example: stock-notifier alerts delete 42
    """
    cli_ctx = get_cli_context(ctx)

    async def delete() -> bool:
        async with api_session(cli_ctx) as client:
            async with AlertsScreen(cli_ctx.app, alerts_collection(client)) as screen:
                return await screen.delete(alert_id)

    if not run_async(delete()):
        sys.exit(1)
