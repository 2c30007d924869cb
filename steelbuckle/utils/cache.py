"""
Bounded FIFO cache with timestamp invalidation and a non-blocking fetch latch.

IMPORTANT: Read `DESIGN.md` before making changes.
"""

import logging
import time
from collections import OrderedDict
from threading import Lock
from typing import Any, Callable, Dict, Hashable, List, Optional

logger = logging.getLogger(__name__)


class _Entry:
    __slots__ = ("data", "fetched_at", "marker")

    def __init__(self, data, fetched_at, marker):
        self.data = data
        self.fetched_at = fetched_at
        self.marker = marker


class BoundedCache:
    """
    At most `max_entries` slots, evicted strictly in insertion order (not LRU).

    `invalidate()` moves a single `last_invalidated_at` marker forward. Every
    entry remembers the marker that was current when its fetch *started*, so a
    fetch that straddles an invalidation is stored already stale and will be
    refetched on the next access.

    While a fetch for a key is in flight, other callers get the best data
    available right now (the stale entry, else an empty value) instead of
    waiting or starting a second fetch.
    """

    def __init__(
        self,
        max_entries: int,
        clock: Callable[[], float] = time.time,
        empty_factory: Callable[[], Any] = dict,
    ):
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.max_entries = max_entries
        self._clock = clock
        self._empty_factory = empty_factory
        self._entries: "OrderedDict[Hashable, _Entry]" = OrderedDict()
        self._in_flight = set()
        self._lock = Lock()
        self.last_invalidated_at = 0.0

    def get_or_fetch(self, key: Hashable, fetcher: Callable[[], Any]) -> Any:
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and entry.marker >= self.last_invalidated_at:
                return entry.data
            if key in self._in_flight:
                return entry.data if entry is not None else self._empty_factory()
            self._in_flight.add(key)
            marker = self.last_invalidated_at

        try:
            data = fetcher()
        except Exception:
            logger.warning("Cache fetch failed for %r; keeping previous data", key, exc_info=True)
            with self._lock:
                self._in_flight.discard(key)
            return entry.data if entry is not None else self._empty_factory()

        with self._lock:
            self._in_flight.discard(key)
            self._entries.pop(key, None)
            self._entries[key] = _Entry(data, self._clock(), marker)
            while len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("Evicted cache entry %r", evicted)
        return data

    def invalidate(self) -> float:
        """Mark every current entry stale. Returns the new marker."""
        with self._lock:
            now = self._clock()
            if now <= self.last_invalidated_at:
                now = self.last_invalidated_at + 1e-6
            self.last_invalidated_at = now
            return now

    def peek(self, key: Hashable) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            return entry.data if entry is not None else None

    def is_stale(self, key: Hashable) -> bool:
        """True when the key is missing or was fetched before the last invalidation."""
        with self._lock:
            entry = self._entries.get(key)
            return entry is None or entry.marker < self.last_invalidated_at

    def is_fetching(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._in_flight

    def keys(self) -> List[Hashable]:
        with self._lock:
            return list(self._entries.keys())

    def snapshot(self) -> Dict[Hashable, Any]:
        with self._lock:
            return {k: e.data for k, e in self._entries.items()}

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
