"""
Feature fetch orchestrator: viewport-driven state machine over the WFS client.

Wires the debouncer, quantizer, request cache and in-flight tracker together
and exposes the current ``FeatureState`` (data, loading, error) to callers.

Every state transition happens inside a single owner task that drains an
asyncio queue of events: viewport changes, settled viewports, and fetch
results posted back by request tasks. Request tasks never touch shared state
directly, so results for cancelled or superseded requests can be discarded
by a plain ``request_id`` check when their event is processed.
"""

import asyncio
import logging
import os
from dataclasses import dataclass
from typing import Any, Callable

from ..constants import (
    CACHE_MAX_ENTRIES,
    DEFAULT_BBOX_PRECISION,
    DEFAULT_DEBOUNCE_MS,
    DEFAULT_LAYER,
    DEFAULT_REQUEST_TIMEOUT_S,
    DEFAULT_STALE_TIME_MS,
    WFS_BASE_URL,
    EnvVar,
    ErrorMessages,
)
from .cache import RequestCache
from .debounce import Debouncer
from .inflight import InFlightTracker, PendingRequest
from .quantize import BoundingBox, make_cache_key, quantize_bbox
from .wfs_client import WFSClient

logger = logging.getLogger(__name__)


@dataclass
class OrchestratorConfig:
    """Tunables for the viewport cache, read from the environment by the server."""

    layer: str = DEFAULT_LAYER
    base_url: str = WFS_BASE_URL
    debounce_ms: float = DEFAULT_DEBOUNCE_MS
    stale_time_ms: float = DEFAULT_STALE_TIME_MS
    precision: int = DEFAULT_BBOX_PRECISION
    cache_max_entries: int = CACHE_MAX_ENTRIES
    request_timeout_s: float = DEFAULT_REQUEST_TIMEOUT_S
    max_features: int | None = None

    @classmethod
    def from_env(cls) -> "OrchestratorConfig":
        max_features = os.environ.get(EnvVar.WFS_MAX_FEATURES)
        return cls(
            layer=os.environ.get(EnvVar.WFS_LAYER, DEFAULT_LAYER),
            base_url=os.environ.get(EnvVar.WFS_BASE_URL, WFS_BASE_URL),
            debounce_ms=float(os.environ.get(EnvVar.WFS_DEBOUNCE_MS, DEFAULT_DEBOUNCE_MS)),
            stale_time_ms=float(os.environ.get(EnvVar.WFS_STALE_TIME_MS, DEFAULT_STALE_TIME_MS)),
            precision=int(os.environ.get(EnvVar.WFS_BBOX_PRECISION, DEFAULT_BBOX_PRECISION)),
            cache_max_entries=int(os.environ.get(EnvVar.WFS_CACHE_MAX_ENTRIES, CACHE_MAX_ENTRIES)),
            request_timeout_s=float(
                os.environ.get(EnvVar.WFS_REQUEST_TIMEOUT_S, DEFAULT_REQUEST_TIMEOUT_S)
            ),
            max_features=int(max_features) if max_features else None,
        )


@dataclass(frozen=True, eq=False)
class FeatureState:
    """Snapshot of what a consumer should display."""

    data: dict[str, Any] | None
    loading: bool
    error: Exception | None
    key: str | None = None
    bbox: BoundingBox | None = None
    layer: str | None = None
    enabled: bool = True

    @property
    def feature_count(self) -> int:
        if self.data is None:
            return 0
        return len(self.data.get("features", []))


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ViewportChanged:
    layer: str
    bbox: BoundingBox | None
    enabled: bool


@dataclass(frozen=True)
class Settled:
    bbox: BoundingBox


@dataclass(frozen=True, eq=False)
class FetchSucceeded:
    key: str
    request_id: int
    feature_collection: dict[str, Any]


@dataclass(frozen=True, eq=False)
class FetchFailed:
    key: str
    request_id: int
    error: Exception


@dataclass(frozen=True)
class Refresh:
    pass


_STOP = object()

StateListener = Callable[[FeatureState], None]


class FeatureFetchOrchestrator:
    """Debounced, cached, cancellation-aware feature fetching for one viewport."""

    def __init__(
        self,
        client: Any | None = None,
        cache: RequestCache | None = None,
        config: OrchestratorConfig | None = None,
    ) -> None:
        self.config = config or OrchestratorConfig()
        self.cache = cache or RequestCache(
            stale_time_s=self.config.stale_time_ms / 1000.0,
            max_entries=self.config.cache_max_entries,
        )
        self.client = client or WFSClient(
            base_url=self.config.base_url,
            timeout_s=self.config.request_timeout_s,
            max_features=self.config.max_features,
        )
        self.tracker = InFlightTracker()
        self.request_count = 0

        self._debouncer = Debouncer(self.config.debounce_ms / 1000.0, self._on_settled)
        self._queue: asyncio.Queue | None = None
        self._worker: asyncio.Task | None = None
        self._idle: asyncio.Event | None = None
        self._listeners: list[StateListener] = []
        self._closed = False

        # Inputs
        self._layer = self.config.layer
        self._enabled = True
        self._settled_bbox: BoundingBox | None = None

        # Display state
        self._active_key: str | None = None
        self._data: dict[str, Any] | None = None
        # Last failure per cache key, dropped when that key next succeeds
        self._errors: dict[str, Exception] = {}

    # ------------------------------------------------------------------
    # Consumer interface
    # ------------------------------------------------------------------

    def use_feature_data(
        self,
        layer: str,
        bbox: BoundingBox | list[float] | None,
        enabled: bool = True,
    ) -> FeatureState:
        """Push the latest inputs and return the current state snapshot.

        The returned snapshot reflects events processed so far; the effect of
        this call (debounce, cache lookup, fetch) shows up in later snapshots,
        via ``subscribe`` listeners or after ``wait_until_idle``.

        Raises:
            ValueError: if a bbox coordinate is NaN or infinite
            RuntimeError: if the orchestrator has been closed
        """
        if bbox is not None:
            bbox = tuple(float(v) for v in bbox)  # type: ignore[assignment]
            quantize_bbox(bbox, self.config.precision)
        self._ensure_started()
        self._post(ViewportChanged(layer=layer, bbox=bbox, enabled=enabled))  # type: ignore[arg-type]
        return self.state

    @property
    def state(self) -> FeatureState:
        key = self._active_key
        loading = self._enabled and key is not None and key in self.tracker
        error = self._errors.get(key) if key is not None else None
        return FeatureState(
            data=self._data,
            loading=loading,
            error=error,
            key=key,
            bbox=self._settled_bbox,
            layer=self._layer,
            enabled=self._enabled,
        )

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a listener called with every new state. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def wait_until_idle(self, timeout: float | None = None) -> FeatureState:
        """Wait until no event, debounce timer or request is outstanding."""
        self._ensure_started()
        assert self._idle is not None
        await asyncio.wait_for(self._idle.wait(), timeout)
        return self.state

    def refresh(self) -> None:
        """Refetch the active viewport regardless of freshness."""
        self._ensure_started()
        self._post(Refresh())

    def clear_cache(self) -> int:
        count = self.cache.clear()
        logger.info(f"Cleared {count} cached viewport(s)")
        return count

    def stats(self) -> dict:
        return {
            "request_count": self.request_count,
            "in_flight": len(self.tracker),
            "cancelled": self.tracker.cancelled,
            "active_key": self._active_key,
            "cache": self.cache.stats(),
        }

    async def close(self) -> None:
        """Cancel the pending debounce and all requests, then stop the worker."""
        if self._closed:
            return
        self._closed = True

        # Events already queued are still handled; new ones are dropped by _post
        if self._worker is not None and self._queue is not None:
            self._queue.put_nowait(_STOP)
            await self._worker
            self._worker = None
        self._debouncer.cancel()

        tasks = [p.task for p in self.tracker.requests() if p.task is not None]
        self.tracker.cancel_all()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

        close = getattr(self.client, "aclose", None)
        if close is not None:
            await close()

    async def __aenter__(self) -> "FeatureFetchOrchestrator":
        self._ensure_started()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Event loop plumbing
    # ------------------------------------------------------------------

    def _ensure_started(self) -> None:
        if self._closed:
            raise RuntimeError(ErrorMessages.ORCHESTRATOR_CLOSED)
        if self._worker is None:
            self._queue = asyncio.Queue()
            self._idle = asyncio.Event()
            self._idle.set()
            self._worker = asyncio.get_running_loop().create_task(self._run())

    def _post(self, event: object) -> None:
        if self._closed or self._queue is None:
            return
        assert self._idle is not None
        self._idle.clear()
        self._queue.put_nowait(event)

    async def _run(self) -> None:
        assert self._queue is not None
        while True:
            event = await self._queue.get()
            if event is _STOP:
                break
            try:
                self._dispatch(event)
            except Exception as e:
                logger.error(f"Failed to handle {type(event).__name__}: {e}")
            self._update_idle()

    def _update_idle(self) -> None:
        assert self._queue is not None and self._idle is not None
        if self._queue.empty() and not self._debouncer.pending and len(self.tracker) == 0:
            self._idle.set()
        else:
            self._idle.clear()

    def _dispatch(self, event: object) -> None:
        if isinstance(event, ViewportChanged):
            self._handle_viewport_changed(event)
        elif isinstance(event, Settled):
            self._settled_bbox = event.bbox
            self._reconcile()
        elif isinstance(event, FetchSucceeded):
            self._handle_succeeded(event)
        elif isinstance(event, FetchFailed):
            self._handle_failed(event)
        elif isinstance(event, Refresh):
            self._handle_refresh()

    def _on_settled(self, bbox: BoundingBox) -> None:
        self._post(Settled(bbox=bbox))

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _handle_viewport_changed(self, event: ViewportChanged) -> None:
        inputs_changed = event.layer != self._layer or event.enabled != self._enabled
        self._layer = event.layer
        self._enabled = event.enabled

        if event.bbox is None:
            self._debouncer.cancel()
            self._settled_bbox = None
            self._reconcile()
            return

        if not event.enabled:
            self._debouncer.cancel()
            if inputs_changed:
                self._reconcile()
            return

        # Re-signalling an unchanged bbox is how a failed viewport gets retried
        self._debouncer.signal(event.bbox)
        if inputs_changed:
            self._reconcile()

    def _reconcile(self) -> None:
        """Bring requests and display in line with (layer, settled bbox, enabled)."""
        if not self._enabled:
            cancelled = self.tracker.cancel_all()
            if cancelled:
                logger.debug(f"Fetching disabled, cancelled {len(cancelled)} request(s)")
            self._publish()
            return

        if self._settled_bbox is None:
            self.tracker.cancel_all()
            self._active_key = None
            self._publish()
            return

        key = make_cache_key(self._layer, self._settled_bbox, self.config.precision)
        self._active_key = key

        entry = self.cache.get_fresh(key)
        if entry is not None:
            self._data = entry.feature_collection
            self._publish()
            return

        stale = self.cache.get(key)
        if stale is not None:
            # Shown until the refetch for this key swaps it
            self._data = stale.feature_collection

        self.tracker.cancel_others(key)
        if key not in self.tracker:
            self._issue(key, self._layer, self._settled_bbox)
        self._publish()

    def _issue(self, key: str, layer: str, bbox: BoundingBox) -> PendingRequest:
        pending = self.tracker.start(key, layer, bbox, self._fetch)
        self.request_count += 1
        logger.info(f"Issued request {pending.request_id} for {key}")
        return pending

    async def _fetch(self, pending: PendingRequest) -> None:
        try:
            feature_collection = await self.client.fetch_features(pending.layer, pending.bbox)
        except asyncio.CancelledError:
            logger.debug(f"Request {pending.request_id} for {pending.key} cancelled")
            raise
        except Exception as e:
            self._post(FetchFailed(key=pending.key, request_id=pending.request_id, error=e))
        else:
            self._post(
                FetchSucceeded(
                    key=pending.key,
                    request_id=pending.request_id,
                    feature_collection=feature_collection,
                )
            )

    def _handle_succeeded(self, event: FetchSucceeded) -> None:
        if self.tracker.finish(event.key, event.request_id) is None:
            logger.warning(f"Discarding result of superseded request {event.request_id}")
            return

        self.cache.put(event.key, event.feature_collection)
        self._errors.pop(event.key, None)
        if event.key == self._active_key:
            self._data = event.feature_collection
        self._publish()

    def _handle_failed(self, event: FetchFailed) -> None:
        if self.tracker.finish(event.key, event.request_id) is None:
            logger.warning(f"Discarding failure of superseded request {event.request_id}")
            return

        logger.warning(f"Request {event.request_id} for {event.key} failed: {event.error}")
        self._errors[event.key] = event.error
        self._publish()

    def _handle_refresh(self) -> None:
        if not self._enabled or self._settled_bbox is None or self._active_key is None:
            return
        self.tracker.cancel_others(self._active_key)
        self._issue(self._active_key, self._layer, self._settled_bbox)
        self._publish()

    def _publish(self) -> None:
        state = self.state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception as e:
                logger.error(f"State listener failed: {e}")
