"""Settings screen built from typed setting rows."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from ..context import AppContext
from .base import Screen

logger = logging.getLogger(__name__)

APP_NAME = "Stock Notifier"
APP_VERSION = "1.0.0"


class RowKind(Enum):
    """How a settings row is displayed and activated."""

    ARROW = "arrow"  # Opens or runs an action
    TOGGLE = "toggle"  # On/off switch
    VALUE = "value"  # Read-only value


@dataclass(frozen=True)
class SettingRow:
    """
    One row on the settings screen.

    Only the fields of the row's kind are meaningful: ``is_active`` for
    TOGGLE, ``value`` for VALUE, ``action`` for ARROW and TOGGLE.
    """

    kind: RowKind
    key: str
    label: str
    sub_label: Optional[str] = None
    is_active: bool = False
    value: Optional[str] = None
    action: Optional[Callable[[], object]] = None

    @classmethod
    def toggle(cls, key: str, label: str, is_active: bool, action: Callable[[], object],
               sub_label: Optional[str] = None) -> "SettingRow":
        return cls(RowKind.TOGGLE, key, label, sub_label=sub_label, is_active=is_active,
                   action=action)

    @classmethod
    def arrow(cls, key: str, label: str, action: Callable[[], object],
              sub_label: Optional[str] = None) -> "SettingRow":
        return cls(RowKind.ARROW, key, label, sub_label=sub_label, action=action)

    @classmethod
    def value_display(cls, key: str, label: str, value: str,
                      sub_label: Optional[str] = None) -> "SettingRow":
        return cls(RowKind.VALUE, key, label, sub_label=sub_label, value=value)


def render_row(row: SettingRow) -> str:
    """Format a setting row as a single line of text."""
    if row.kind == RowKind.TOGGLE:
        trailing = "[on]" if row.is_active else "[off]"
    elif row.kind == RowKind.ARROW:
        trailing = ">"
    elif row.kind == RowKind.VALUE:
        trailing = row.value or "-"
    else:
        raise ValueError(f"Unknown row kind: {row.kind}")

    line = f"{row.label:<20} {trailing}"
    if row.sub_label:
        line = f"{line}\n  {row.sub_label}"
    return line


@dataclass(frozen=True)
class SettingsSection:
    title: str
    rows: tuple[SettingRow, ...]


class SettingsScreen(Screen):
    """Preferences (theme, notifications), data maintenance and app info."""

    title = "Settings"

    NOTIFICATIONS_KEY = "notifications"

    def __init__(self, ctx: AppContext):
        super().__init__(ctx)

    @property
    def notifications_enabled(self) -> bool:
        return bool(self.ctx.preferences.get(self.NOTIFICATIONS_KEY, True))

    def toggle_theme(self) -> bool:
        return self.ctx.theme.toggle()

    def toggle_notifications(self) -> bool:
        enabled = not self.notifications_enabled
        self.ctx.preferences.set(self.NOTIFICATIONS_KEY, enabled)
        return enabled

    def clear_cache(self) -> None:
        """Forget every stored preference."""
        self.ctx.preferences.clear()
        self.ctx.notifier.success("Local app data cleared")

    def activate(self, key: str) -> object:
        """
        Run the action behind a row.

        Raises:
            KeyError: If no actionable row has that key.
        """
        for section in self.render():
            for row in section.rows:
                if row.key == key and row.action is not None:
                    return row.action()
        raise KeyError(f"No actionable setting '{key}'")

    def render(self) -> tuple[SettingsSection, ...]:
        return (
            SettingsSection("Preferences", (
                SettingRow.toggle(
                    "dark_mode", "Dark Mode", self.ctx.theme.is_dark_mode, self.toggle_theme
                ),
                SettingRow.toggle(
                    "notifications", "Notifications", self.notifications_enabled,
                    self.toggle_notifications,
                    sub_label="Receive alerts for stock changes",
                ),
            )),
            SettingsSection("Data & Sync", (
                SettingRow.arrow(
                    "clear_cache", "Clear Cache", self.clear_cache,
                    sub_label="Clear local app data",
                ),
            )),
            SettingsSection("App Info", (
                SettingRow.value_display("app_name", "App", APP_NAME),
                SettingRow.value_display("version", "Version", APP_VERSION),
            )),
        )
