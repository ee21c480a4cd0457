"""
Small in-memory TTL cache shared by the decimals and price resolvers.
"""
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Hashable, Optional, TypeVar

V = TypeVar("V")

# Returned by TTLCache.get when nothing usable is stored. None is a legitimate
# cached value ("looked up, unknown") so it cannot double as the miss marker.
MISSING: Any = object()


@dataclass
class CacheEntry(Generic[V]):
    value: V
    expires_at: Optional[float] = None  # None = never expires


class TTLCache(Generic[V]):
    """
    Key -> value cache with per-entry time-to-live.

    Expired entries are evicted lazily on access. There is no size bound; the
    key space is the set of assets seen on chain.
    """

    def __init__(self, default_ttl: Optional[float] = None, clock: Callable[[], float] = time.monotonic):
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: Dict[Hashable, CacheEntry[V]] = {}
        self._lock = threading.Lock()

    def get(self, key: Hashable) -> Any:
        """Return the cached value, or MISSING if absent or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return MISSING
            if entry.expires_at is not None and self._clock() > entry.expires_at:
                del self._entries[key]
                return MISSING
            return entry.value

    def set(self, key: Hashable, value: V, ttl: Any = MISSING):
        """Store a value. ttl defaults to the cache's default; None never expires."""
        if ttl is MISSING:
            ttl = self.default_ttl
        expires_at = None if ttl is None else self._clock() + ttl
        with self._lock:
            self._entries[key] = CacheEntry(value=value, expires_at=expires_at)

    def __contains__(self, key: Hashable) -> bool:
        return self.get(key) is not MISSING

    def __len__(self) -> int:
        return len(self._entries)
