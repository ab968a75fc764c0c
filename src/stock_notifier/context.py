"""
Shared application context handed to every screen.

Holds the read-mostly theme setting, the notification channel used in place
of toast pop-ups, and the small on-disk preferences file backing them. Screens
receive an AppContext explicitly instead of reaching for module globals.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Optional

import yaml

from .exceptions import PreferencesError

logger = logging.getLogger(__name__)


class PreferencesStore:
    """YAML-backed key/value store for UI preferences.

    Attributes:
        path: Location of the preferences file
    """

    def __init__(self, path: Optional[Path] = None):
        self.path = path or self.get_default_path()

    @classmethod
    def get_default_path(cls) -> Path:
        """Default location: ~/.stock_notifier/preferences.yaml"""
        return Path.home() / ".stock_notifier" / "preferences.yaml"

    def load(self) -> dict[str, Any]:
        """Read all stored preferences (empty if the file does not exist).

        Raises:
            PreferencesError: If the file exists but cannot be parsed
        """
        if not self.path.exists():
            return {}
        try:
            with open(self.path) as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise PreferencesError(f"Failed to read preferences: {e}") from e
        return data if isinstance(data, dict) else {}

    def get(self, name: str, default: Any = None) -> Any:
        return self.load().get(name, default)

    def set(self, name: str, value: Any) -> None:
        """Store a single preference, keeping the others."""
        data = self.load()
        data[name] = value
        self.save(data)

    def save(self, data: dict[str, Any]) -> None:
        """Write all preferences.

        Raises:
            PreferencesError: If the file cannot be written
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w") as f:
                yaml.safe_dump(data, f, default_flow_style=False)
        except OSError as e:
            raise PreferencesError(f"Failed to save preferences: {e}") from e

    def clear(self) -> None:
        """Delete every stored preference."""
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            raise PreferencesError(f"Failed to clear preferences: {e}") from e
        logger.info(f"Cleared preferences at {self.path}")


class ThemeState:
    """Dark/light mode flag with a single writer, ``toggle``.

    Args:
        preferences: Store the choice is persisted to
        default_dark: Mode used when nothing has been stored yet
    """

    PREFERENCE_KEY = "theme"

    def __init__(self, preferences: PreferencesStore, default_dark: bool = False):
        self._preferences = preferences
        saved = preferences.get(self.PREFERENCE_KEY)
        self._dark = saved == "dark" if saved in ("dark", "light") else default_dark
        self._listeners: list[Callable[[bool], None]] = []

    @property
    def is_dark_mode(self) -> bool:
        return self._dark

    @property
    def name(self) -> str:
        return "dark" if self._dark else "light"

    def toggle(self) -> bool:
        """Flip the mode, persist it and tell subscribers. Returns the new mode."""
        self._dark = not self._dark
        self._preferences.set(self.PREFERENCE_KEY, self.name)
        for listener in list(self._listeners):
            listener(self._dark)
        return self._dark

    def subscribe(self, listener: Callable[[bool], None]) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener) if listener in self._listeners else None


class NotificationLevel(Enum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    """A transient user-facing message."""

    level: NotificationLevel
    message: str
    created_at: datetime = field(default_factory=datetime.now)


class Notifier:
    """Collects transient success/error messages and fans them out to listeners."""

    def __init__(self, history_size: int = 50):
        self.history_size = history_size
        self._history: list[Notification] = []
        self._listeners: list[Callable[[Notification], None]] = []

    @property
    def history(self) -> list[Notification]:
        return list(self._history)

    def success(self, message: str) -> Notification:
        logger.info(message)
        return self._emit(Notification(NotificationLevel.SUCCESS, message))

    def error(self, message: str) -> Notification:
        logger.warning(message)
        return self._emit(Notification(NotificationLevel.ERROR, message))

    def subscribe(self, listener: Callable[[Notification], None]) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener) if listener in self._listeners else None

    def _emit(self, notification: Notification) -> Notification:
        self._history.append(notification)
        del self._history[:-self.history_size]
        for listener in list(self._listeners):
            listener(notification)
        return notification


@dataclass
class AppContext:
    """Everything screens share: theme, notifications, preferences."""

    theme: ThemeState
    notifier: Notifier
    preferences: PreferencesStore

    @classmethod
    def create(cls, preferences_path: Optional[Path] = None) -> "AppContext":
        preferences = PreferencesStore(preferences_path)
        return cls(
            theme=ThemeState(preferences),
            notifier=Notifier(),
            preferences=preferences,
        )
