"""Alert log screen."""

import logging
from dataclasses import dataclass
from typing import Optional

from ..collection import SyncedCollection
from ..context import AppContext
from ..exceptions import FetchError, MutationError
from ..models import AlertLogEntry
from .base import Screen

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AlertsView:
    entries: tuple[AlertLogEntry, ...]
    loading: bool
    error: Optional[str]

    @property
    def summary(self) -> str:
        if self.entries:
            return f"You have {len(self.entries)} recent notifications"
        return "No new notifications"


class AlertsScreen(Screen):
    """Shows triggered alerts newest first and dismisses them optimistically."""

    title = "Alerts"

    def __init__(self, ctx: AppContext, alerts: SyncedCollection[AlertLogEntry, int]):
        super().__init__(ctx)
        self.alerts = alerts

    async def mount(self) -> None:
        await super().mount()
        try:
            await self.alerts.load()
        except FetchError as e:
            logger.warning(f"Failed to load alerts: {e}")

    async def delete(self, alert_id: int) -> bool:
        """Dismiss an alert. Returns True if the server confirmed it."""
        try:
            await self.alerts.remove(alert_id)
        except MutationError:
            self.ctx.notifier.error("Failed to delete alert")
            return False
        self.ctx.notifier.success("Alert deleted")
        return True

    def render(self) -> AlertsView:
        snapshot = self.alerts.snapshot()
        return AlertsView(
            entries=snapshot.items,
            loading=snapshot.is_loading,
            error=str(snapshot.last_error) if snapshot.has_error else None,
        )
