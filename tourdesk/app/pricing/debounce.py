"""Trailing-edge debounce for async callbacks."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional, Set

from loguru import logger


class Debouncer:
    """Run ``callback`` once ``wait`` seconds after the last :meth:`trigger`.

    Each trigger resets the timer. Once the timer fires, the callback runs to
    completion: later triggers start a new timer but never cancel a callback
    that is already running.
    """

    def __init__(self, wait: float, callback: Callable[[], Awaitable[object]]):
        self.wait = wait
        self._callback = callback
        self._timer: Optional[asyncio.Task] = None
        self._running: Set[asyncio.Task] = set()

    @property
    def pending(self) -> bool:
        return self._timer is not None and not self._timer.done()

    def trigger(self) -> None:
        self.cancel()
        self._timer = asyncio.get_running_loop().create_task(self._countdown())

    def cancel(self) -> None:
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None

    async def flush(self) -> None:
        """Run a pending callback now instead of waiting for the timer."""
        if self.pending:
            self.cancel()
            await self._callback()

    async def wait_idle(self) -> None:
        """Wait until no timer is pending and no callback is running."""
        while self.pending or self._running:
            if self.pending:
                await asyncio.gather(self._timer, return_exceptions=True)
            if self._running:
                await asyncio.gather(*list(self._running), return_exceptions=True)

    async def _countdown(self) -> None:
        await asyncio.sleep(self.wait)
        self._timer = None
        task = asyncio.get_running_loop().create_task(self._callback())
        self._running.add(task)
        task.add_done_callback(self._finished)

    def _finished(self, task: asyncio.Task) -> None:
        self._running.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.opt(exception=task.exception()).error("Debounced callback failed")
