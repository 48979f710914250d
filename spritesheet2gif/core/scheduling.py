"""Cancellable per-display-frame scheduling used by the live preview."""

from __future__ import annotations

import asyncio
from typing import Callable, Optional, Protocol

DISPLAY_INTERVAL_SECONDS = 1 / 60


class ScheduledTask(Protocol):
    def cancel(self) -> None:
        """Stop the callback from running; safe to call more than once."""


class FrameScheduler(Protocol):
    def schedule(self, callback: Callable[[], None]) -> ScheduledTask:
        """Run ``callback`` once on the next display refresh."""


class AsyncioFrameScheduler:
    """Schedule callbacks on an asyncio event loop at a fixed refresh rate."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None, interval: float = DISPLAY_INTERVAL_SECONDS):
        self.loop = loop
        self.interval = interval

    def schedule(self, callback: Callable[[], None]) -> ScheduledTask:
        loop = self.loop or asyncio.get_running_loop()
        return loop.call_later(self.interval, callback)
