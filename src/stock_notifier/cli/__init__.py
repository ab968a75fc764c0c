"""
Click CLI implementation for the stock notifier.

This module provides command-line interface commands for the watchlist,
alert log, symbol search and local settings, split into logical command
groups.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import click

from ..config import ConfigurationError, NotifierConfig
from ..context import AppContext
from ..exceptions import PreferencesError
from .market_commands import history, search, status, watch
from .settings_commands import settings
from .utils import print_error, print_notification
from .watchlist_commands import alerts, watchlist

logger = logging.getLogger(__name__)


@dataclass
class CLIContext:
    """Context object passed to all CLI commands.

    Attributes:
        config: Configuration settings
        app: Shared theme, notifier and preferences
        verbose: Verbose output enabled
        json: JSON output enabled
    """
    config: NotifierConfig
    app: AppContext
    verbose: bool
    json: bool


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Verbose output")
@click.option("--json", "output_json", is_flag=True, help="JSON output (where supported)")
@click.option(
    "--api-url",
    help="API server URL (overrides config)",
    envvar="STOCK_NOTIFIER_API_URL",
)
@click.option(
    "--config-file",
    type=click.Path(exists=True),
    help="Path to configuration file",
)
@click.option(
    "--preferences-file",
    type=click.Path(),
    envvar="STOCK_NOTIFIER_PREFERENCES",
    help="Path to the local preferences file",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    output_json: bool,
    api_url: Optional[str],
    config_file: Optional[str],
    preferences_file: Optional[str],
) -> None:
    """
    Stock Notifier - Watch stocks and review price alerts.

    Mirrors your watchlist and alert log from the Stock Notifier API.
    """
    ctx.ensure_object(dict)

    # Load configuration
    try:
        config = NotifierConfig.load_from_file(Path(config_file) if config_file else None)
    except ConfigurationError as e:
        if config_file:
            print_error(str(e))
            ctx.exit(1)
        if verbose:
            click.echo(f"! Could not load config file: {e}", err=True)
            click.echo("  Using default configuration", err=True)
        config = NotifierConfig()

    # Apply command-line overrides
    if api_url:
        config.api_url = api_url
    if verbose:
        config.verbose = True
    if output_json:
        config.json_output = True

    logging.basicConfig(
        level=logging.INFO if config.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        app = AppContext.create(Path(preferences_file) if preferences_file else None)
    except PreferencesError as e:
        print_error(str(e))
        ctx.exit(1)
    app.notifier.subscribe(print_notification)

    cli_ctx = CLIContext(
        config=config,
        app=app,
        verbose=config.verbose,
        json=config.json_output,
    )
    ctx.obj = {"cli_context": cli_ctx}


# Register watchlist and alert commands
cli.add_command(watchlist)
cli.add_command(alerts)

# Register market data commands
cli.add_command(status)
cli.add_command(search)
cli.add_command(history)
cli.add_command(watch)

# Register settings commands
cli.add_command(settings)


def main() -> None:
    """Main entry point for the CLI."""
    cli()


__all__ = ["cli", "main", "CLIContext"]
