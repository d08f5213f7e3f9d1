"""
Caching layer for lazytreelib.

Children fetched for a node are cached under a key derived from the
parent id, so repeated expansions are served without touching the
fetch provider until the entry expires.
"""

from .store import CacheEntry, DataSourceCache, TTLCacheStore, cache_key_for

__all__ = [
    'CacheEntry',
    'DataSourceCache',
    'TTLCacheStore',
    'cache_key_for',
]
