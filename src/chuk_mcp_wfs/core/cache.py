"""
In-memory, freshness-aware cache of feature collections keyed by quantized viewport.

Entries are replaced wholesale on every successful fetch and are never
invalidated by time alone: a stale entry stays readable, it just stops
counting as a hit.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable

from ..constants import CACHE_MAX_ENTRIES, DEFAULT_STALE_TIME_MS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    """A successful response for exactly one quantized key."""

    key: str
    feature_collection: dict[str, Any]
    fetched_at: float


class RequestCache:
    """LRU cache of viewport responses with a staleness window."""

    def __init__(
        self,
        stale_time_s: float = DEFAULT_STALE_TIME_MS / 1000.0,
        max_entries: int = CACHE_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.stale_time_s = stale_time_s
        self.max_entries = max_entries
        self._clock = clock

        # Insertion order doubles as recency order: key -> entry
        self._entries: dict[str, CacheEntry] = {}
        self.hits = 0
        self.misses = 0
        self.evictions = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def get(self, key: str) -> CacheEntry | None:
        """Get the entry for a key (fresh or not), moving it to the end of the LRU."""
        if key not in self._entries:
            return None
        entry = self._entries.pop(key)
        self._entries[key] = entry
        return entry

    def put(self, key: str, feature_collection: dict[str, Any]) -> CacheEntry:
        """Replace any entry for ``key`` with a new one timestamped now."""
        self._entries.pop(key, None)

        while self.max_entries > 0 and len(self._entries) >= self.max_entries:
            oldest_key = next(iter(self._entries))
            del self._entries[oldest_key]
            self.evictions += 1
            logger.debug(f"Evicted cached viewport {oldest_key}")

        entry = CacheEntry(key=key, feature_collection=feature_collection, fetched_at=self._clock())
        self._entries[key] = entry
        return entry

    def is_fresh(self, entry: CacheEntry, now: float | None = None) -> bool:
        if now is None:
            now = self._clock()
        return now - entry.fetched_at < self.stale_time_s

    def get_fresh(self, key: str) -> CacheEntry | None:
        """Return the entry only if it is still fresh, counting hits and misses."""
        entry = self.get(key)
        if entry is not None and self.is_fresh(entry):
            self.hits += 1
            logger.debug(f"Cache hit for {key}")
            return entry
        self.misses += 1
        logger.debug(f"Cache {'stale' if entry else 'miss'} for {key}")
        return None

    def clear(self) -> int:
        """Drop every entry. Returns the number removed."""
        count = len(self._entries)
        self._entries.clear()
        return count

    def stats(self) -> dict:
        now = self._clock()
        fresh = sum(1 for e in self._entries.values() if self.is_fresh(e, now))
        return {
            "entries": len(self._entries),
            "fresh_entries": fresh,
            "max_entries": self.max_entries,
            "stale_time_s": self.stale_time_s,
            "hits": self.hits,
            "misses": self.misses,
            "evictions": self.evictions,
        }
