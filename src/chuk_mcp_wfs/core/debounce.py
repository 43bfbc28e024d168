"""
Quiet-period debouncer for viewport changes.

Each signal restarts the timer and replaces the pending value; the callback
fires once, with the latest value, after ``delay_s`` seconds without a new
signal. This is not a sampler: a continuous stream of signals faster than
the delay never fires.
"""

import asyncio
import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)


class Debouncer:
    """Collapse rapid signals into a single settled callback."""

    def __init__(
        self,
        delay_s: float,
        callback: Callable[[Any], None],
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self.delay_s = delay_s
        self._callback = callback
        self._loop = loop
        self._handle: asyncio.TimerHandle | None = None
        self._value: Any = None

    @property
    def pending(self) -> bool:
        """True while a signal is waiting for its quiet period to elapse."""
        return self._handle is not None

    def signal(self, value: Any) -> None:
        """Record a new value and restart the quiet-period timer."""
        if self._handle is not None:
            self._handle.cancel()
        loop = self._loop or asyncio.get_running_loop()
        self._value = value
        self._handle = loop.call_later(self.delay_s, self._fire)

    def cancel(self) -> None:
        """Drop the pending signal, if any, without firing."""
        if self._handle is not None:
            self._handle.cancel()
            logger.debug("Debounce cancelled with a pending signal")
        self._handle = None
        self._value = None

    def _fire(self) -> None:
        value = self._value
        self._handle = None
        self._value = None
        self._callback(value)
