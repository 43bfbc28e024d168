"""
In-flight request tracking.

Holds at most one live request per cache key. A request's asyncio task is
its cancellation token; its ``request_id`` is what late results are checked
against, so a result whose request is no longer tracked is simply dropped
whether or not the transport honoured the cancellation.
"""

import asyncio
import itertools
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)


@dataclass
class PendingRequest:
    """A request issued for one key and not yet resolved or cancelled."""

    key: str
    layer: str
    bbox: tuple[float, float, float, float]
    request_id: int
    task: asyncio.Task | None = None


class InFlightTracker:
    """At most one pending request per key; superseded requests are cancelled."""

    def __init__(self) -> None:
        self._pending: dict[str, PendingRequest] = {}
        self._ids = itertools.count(1)
        self.started = 0
        self.cancelled = 0

    def __len__(self) -> int:
        return len(self._pending)

    def __contains__(self, key: object) -> bool:
        return key in self._pending

    def keys(self) -> list[str]:
        return list(self._pending.keys())

    def requests(self) -> list[PendingRequest]:
        return list(self._pending.values())

    def get(self, key: str) -> PendingRequest | None:
        return self._pending.get(key)

    def start(
        self,
        key: str,
        layer: str,
        bbox: tuple[float, float, float, float],
        run: Callable[[PendingRequest], Awaitable[Any]],
    ) -> PendingRequest:
        """Issue a request for ``key``, cancelling any earlier one for the same key."""
        self.cancel(key)

        pending = PendingRequest(key=key, layer=layer, bbox=bbox, request_id=next(self._ids))
        pending.task = asyncio.get_running_loop().create_task(run(pending))
        self._pending[key] = pending
        self.started += 1
        return pending

    def is_current(self, key: str, request_id: int) -> bool:
        pending = self._pending.get(key)
        return pending is not None and pending.request_id == request_id

    def finish(self, key: str, request_id: int) -> PendingRequest | None:
        """Remove and return the request if it is still the current one for its key."""
        if not self.is_current(key, request_id):
            return None
        return self._pending.pop(key)

    def cancel(self, key: str) -> bool:
        pending = self._pending.pop(key, None)
        if pending is None:
            return False
        if pending.task is not None and not pending.task.done():
            pending.task.cancel()
        self.cancelled += 1
        logger.debug(f"Cancelled request {pending.request_id} for {key}")
        return True

    def cancel_others(self, keep: str | None) -> list[str]:
        """Cancel every pending request whose key is not ``keep``."""
        cancelled = [k for k in self._pending if k != keep]
        for key in cancelled:
            self.cancel(key)
        return cancelled

    def cancel_all(self) -> list[str]:
        return self.cancel_others(None)
