"""Common lifecycle for screen controllers."""

import logging
from typing import Any

from ..context import AppContext

logger = logging.getLogger(__name__)


class Screen:
    """
    Base class for headless screen controllers.

    A screen is mounted when it becomes visible and unmounted when it goes
    away; anything it starts (timers, pending searches) must stop on unmount.
    ``render`` returns an immutable view of what the screen would show.
    """

    title: str = ""

    def __init__(self, ctx: AppContext):
        self.ctx = ctx
        self.mounted = False

    async def mount(self) -> None:
        self.mounted = True
        logger.debug(f"Mounted {self.__class__.__name__}")

    async def unmount(self) -> None:
        self.mounted = False
        logger.debug(f"Unmounted {self.__class__.__name__}")

    def render(self) -> Any:
        raise NotImplementedError

    async def __aenter__(self):
        await self.mount()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.unmount()
