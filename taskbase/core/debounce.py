"""Coalesce bursts of change notifications into a single callback."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)


class Debouncer:
    """Run ``callback`` once, ``delay`` seconds after the last ``schedule()``.

    Must be used from the thread running the event loop.
    """

    def __init__(
        self,
        delay: float,
        callback: Callable[[], None],
        loop: asyncio.AbstractEventLoop | None = None,
    ):
        self.delay = delay
        self.callback = callback
        self._loop = loop
        self._handle: asyncio.TimerHandle | None = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def schedule(self) -> None:
        """Cancel any pending run and arm a new one."""
        loop = self._loop or asyncio.get_running_loop()
        self.cancel()
        self._handle = loop.call_later(self.delay, self._fire)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self) -> None:
        self._handle = None
        logger.debug("Debounce interval elapsed, running callback")
        self.callback()
