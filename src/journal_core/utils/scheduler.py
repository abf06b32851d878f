"""Cancellable delayed callbacks."""

import asyncio
from collections.abc import Callable
from typing import Protocol


class ScheduledHandle(Protocol):
    """Handle of a pending callback."""

    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Schedules a callback after a delay expressed in seconds."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledHandle: ...


class AsyncioScheduler:
    """Scheduler backed by the running asyncio event loop.

    The loop is resolved lazily so the owning component can be created
    before the loop starts.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay, callback)
