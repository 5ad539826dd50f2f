"""
Simple in-memory TTL cache for database queries.

Entries expire individually; expired entries are dropped when read. The
cache is per-process, so each worker keeps its own copy.
"""

import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, TypeVar

T = TypeVar("T")

DEFAULT_TTL_SECONDS = 5 * 60


@dataclass
class CacheEntry:
    data: Any
    timestamp: float
    ttl: float


class QueryCache:
    """Key/value cache with a time-to-live per entry."""

    def __init__(
        self,
        default_ttl: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}

    def set(self, key: str, data: Any, ttl: Optional[float] = None) -> None:
        self._entries[key] = CacheEntry(
            data=data,
            timestamp=self._clock(),
            ttl=self.default_ttl if ttl is None else ttl,
        )

    def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None

        if self._clock() - entry.timestamp > entry.ttl:
            del self._entries[key]
            return None

        return entry.data

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def invalidate(self, pattern: str) -> int:
        """Drop every entry whose key contains `pattern`. Returns the count."""
        keys = [key for key in self._entries if pattern in key]
        for key in keys:
            del self._entries[key]
        return len(keys)

    def __len__(self) -> int:
        return len(self._entries)


query_cache = QueryCache()


async def with_cache(
    key: str,
    fetcher: Callable[[], Awaitable[T]],
    ttl: Optional[float] = None,
    cache: Optional[QueryCache] = None,
) -> T:
    """
    Return the cached value for `key`, or await `fetcher` and cache its result.

    `None` results are not cached.
    """
    cache = cache if cache is not None else query_cache

    cached = cache.get(key)
    if cached is not None:
        return cached

    data = await fetcher()
    if data is not None:
        cache.set(key, data, ttl)
    return data
