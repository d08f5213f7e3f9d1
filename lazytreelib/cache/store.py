"""
Key/value cache with per-entry time-to-live.

Entries expire lazily: every get()/has() checks the entry's age and drops
it when it is older than its TTL. cleanup() is available for proactive
eviction but is never needed for correctness.

Supports two modes:
- Bounded (max_entries > 0): cachetools LRUCache, least recently used
  entries are evicted past capacity
- Unbounded (max_entries = 0): plain dict for maximum speed
"""

import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Protocol, runtime_checkable

from cachetools import LRUCache

from ..config import DEFAULT_CACHE_TTL, DEFAULT_MAX_CACHE_ENTRIES

ROOT_CACHE_SUFFIX = "root"


def cache_key_for(parent_id: Optional[str]) -> str:
    """Cache key for the children of parent_id (None means the root level)."""
    return "items-" + (ROOT_CACHE_SUFFIX if parent_id is None else parent_id)


@dataclass
class CacheEntry:
    """A cached value with its creation time and lifetime (seconds)."""

    value: Any
    created_at: float
    ttl: float

    def is_expired(self, now: float) -> bool:
        return now - self.created_at > self.ttl

    def age(self, now: float) -> float:
        return now - self.created_at


@runtime_checkable
class DataSourceCache(Protocol):
    """Interface the controller expects from an injected cache.

    delete() and has() are optional; the controller only calls them when
    the cache provides them.
    """

    def get(self, key: str) -> Any: ...

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None: ...

    def clear(self) -> None: ...


class TTLCacheStore:
    """
    In-memory cache with per-entry TTL and optional LRU capacity bound.

    The cache never raises for missing or expired keys; absence is a
    normal outcome.

    Example:
        cache = TTLCacheStore(default_ttl=300.0)
        cache.set('items-root', children)
        cache.get('items-root')
    """

    def __init__(self,
                 default_ttl: float = DEFAULT_CACHE_TTL,
                 max_entries: int = DEFAULT_MAX_CACHE_ENTRIES,
                 clock: Optional[Callable[[], float]] = None):
        """
        Initialize the cache.

        Args:
            default_ttl: TTL in seconds used when set() gets no ttl
            max_entries: Maximum number of entries (0 = unbounded)
            clock: Zero-argument callable returning the current time in seconds
        """
        self.default_ttl = default_ttl
        self.max_entries = max_entries
        self._clock = clock or time.monotonic

        if max_entries > 0:
            self._store = LRUCache(maxsize=max_entries)
        else:
            self._store = {}

        self.hits = 0
        self.misses = 0

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a cached value, evicting it first if it has expired.

        Args:
            key: Cache key
            default: Returned when the key is absent or expired

        Returns:
            The cached value or default
        """
        entry = self._live_entry(key)
        if entry is None:
            self.misses += 1
            return default

        self.hits += 1
        return entry.value

    def set(self, key: str, value: Any, ttl: Optional[float] = None) -> None:
        """
        Store a value, overwriting any existing entry.

        Args:
            key: Cache key
            value: Value to cache
            ttl: Lifetime in seconds (defaults to default_ttl)
        """
        self._store[key] = CacheEntry(
            value=value,
            created_at=self._clock(),
            ttl=self.default_ttl if ttl is None else ttl,
        )

    def has(self, key: str) -> bool:
        """Check for a live entry, evicting it first if it has expired."""
        return self._live_entry(key) is not None

    def delete(self, key: str) -> bool:
        """Remove an entry. Returns True if an entry existed."""
        return self._store.pop(key, None) is not None

    def clear(self) -> None:
        """Drop all entries."""
        self._store.clear()

    def cleanup(self) -> int:
        """
        Evict every currently expired entry.

        Returns:
            Number of entries evicted
        """
        now = self._clock()
        expired = [key for key in list(self._store.keys()) if self._store[key].is_expired(now)]
        for key in expired:
            del self._store[key]
        return len(expired)

    def size(self) -> int:
        """Number of stored entries, including expired ones not yet evicted."""
        return len(self._store)

    def keys(self) -> List[str]:
        """Snapshot of all stored keys."""
        return list(self._store.keys())

    def entry(self, key: str) -> Optional[CacheEntry]:
        """Return the live CacheEntry for key without counting a hit or miss."""
        return self._live_entry(key)

    def get_stats(self) -> Dict[str, Any]:
        """
        Get cache statistics for monitoring and debugging.

        Returns:
            Dictionary with cache metrics
        """
        total_requests = self.hits + self.misses
        return {
            'entries': len(self._store),
            'hits': self.hits,
            'misses': self.misses,
            'hit_rate': self.hits / total_requests if total_requests > 0 else 0,
            'max_entries': self.max_entries,
            'default_ttl': self.default_ttl,
        }

    def _live_entry(self, key: str) -> Optional[CacheEntry]:
        entry = self._store.get(key)
        if entry is None:
            return None
        if entry.is_expired(self._clock()):
            del self._store[key]
            return None
        return entry

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, key: str) -> bool:
        return self.has(key)

    def __repr__(self) -> str:
        return (f"TTLCacheStore(entries={len(self._store)}, "
                f"default_ttl={self.default_ttl}, max_entries={self.max_entries})")
