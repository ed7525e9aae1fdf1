"""Cancellable quiescence timer on the running asyncio loop."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class Debouncer:
    """Runs a callback once ``delay`` seconds pass without a re-arm.

    At most one timer is live; arming always cancels the previous one.
    """

    def __init__(self, delay: float):
        self.delay = delay
        self._task: Optional[asyncio.Task] = None

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def arm(self, callback: Callable[[], None]) -> None:
        self.cancel()
        self._task = asyncio.get_running_loop().create_task(self._worker(callback))

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def _worker(self, callback: Callable[[], None]) -> None:
        try:
            await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            logger.debug("Debounce timer superseded")
            raise
        # Detach first so the callback may re-arm.
        self._task = None
        try:
            callback()
        except Exception:
            logger.exception("Debounced callback failed")
