"""
Tile cache collaborators.

The fetch engine only relies on ``get(key) -> bytes | None`` and
``set(key, data)``. ``MemoryTileCache`` is the in-process store used by
default: thread-safe, TTL-bounded and capped in size with oldest-first
eviction. ``NullTileCache`` turns caching off.
"""

import logging
import threading
import time
from collections import OrderedDict
from typing import Callable, Optional, Protocol, Tuple

logger = logging.getLogger("static_maps.tiles.cache")


class TileCache(Protocol):
    def get(self, key: str) -> Optional[bytes]:
        ...

    def set(self, key: str, data: bytes) -> None:
        ...


class NullTileCache:
    """A cache that never stores anything."""

    def get(self, key: str) -> Optional[bytes]:
        return None

    def set(self, key: str, data: bytes) -> None:
        return None


class MemoryTileCache:
    """
    In-memory tile store with a time-to-live.

    Args:
        ttl: Seconds an entry stays valid (0 disables expiry)
        max_entries: Entries kept before the oldest are evicted
        clock: Monotonic time source, replaceable in tests

    Example:
        >>> cache = MemoryTileCache(ttl=60)
        >>> cache.set("osm|3/4/2", b"...")
        >>> cache.get("osm|3/4/2")
        b'...'
    """

    def __init__(
        self,
        ttl: float = 3600.0,
        max_entries: int = 2048,
        clock: Callable[[], float] = time.monotonic
    ):
        self.ttl = float(ttl)
        self.max_entries = int(max_entries)
        self._clock = clock
        self._entries: "OrderedDict[str, Tuple[float, bytes]]" = OrderedDict()
        self._lock = threading.Lock()
        self._stats = {"hits": 0, "misses": 0, "evictions": 0}

    def get(self, key: str) -> Optional[bytes]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self._stats["misses"] += 1
                return None
            stored_at, data = entry
            if self.ttl > 0 and self._clock() - stored_at > self.ttl:
                del self._entries[key]
                self._stats["misses"] += 1
                return None
            self._stats["hits"] += 1
            return data

    def set(self, key: str, data: bytes) -> None:
        with self._lock:
            self._entries.pop(key, None)
            self._entries[key] = (self._clock(), bytes(data))
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)
                self._stats["evictions"] += 1

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get_stats(self) -> dict:
        """Hit/miss/eviction counters and current size."""
        with self._lock:
            return {**self._stats, "entries": len(self._entries)}


def cache_from_config(config) -> "TileCache":
    """Build the default cache for a Config (honors cache_disabled/cache_ttl)."""
    if config.cache_disabled:
        logger.debug("Tile cache disabled")
        return NullTileCache()
    return MemoryTileCache(ttl=config.cache_ttl, max_entries=config.cache_max_entries)
