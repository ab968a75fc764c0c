"""
Settings commands for the stock notifier CLI.
"""

import click

from ..screens import SettingsScreen, render_row
from .utils import get_cli_context, print_success


@click.group()
def settings() -> None:
    """View and change local preferences."""
    pass


@settings.command("show")
@click.pass_context
def show_settings(ctx: click.Context) -> None:
    """Show all settings."""
    screen = SettingsScreen(get_cli_context(ctx).app)
    for section in screen.render():
        click.echo()
        click.secho(section.title.upper(), bold=True)
        for row in section.rows:
            click.echo(render_row(row))


@settings.command("toggle-theme")
@click.pass_context
def toggle_theme(ctx: click.Context) -> None:
    """Switch between light and dark mode."""
    screen = SettingsScreen(get_cli_context(ctx).app)
    dark = screen.activate("dark_mode")
    print_success(f"Dark mode {'on' if dark else 'off'}")


@settings.command("toggle-notifications")
@click.pass_context
def toggle_notifications(ctx: click.Context) -> None:
    """Turn alert notifications on or off."""
    screen = SettingsScreen(get_cli_context(ctx).app)
    enabled = screen.activate("notifications")
    print_success(f"Notifications {'on' if enabled else 'off'}")


@settings.command("clear-cache")
@click.confirmation_option(prompt="Clear all local app data?")
@click.pass_context
def clear_cache(ctx: click.Context) -> None:
    """Clear locally stored preferences."""
    SettingsScreen(get_cli_context(ctx).app).activate("clear_cache")
