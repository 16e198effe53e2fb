"""In-process lookup cache with per-entry expiry.

Catalog lookups are cached for different lengths of time (a MusicKit ISRC
hit can live for a day, other callers may want minutes), so entries carry
their own TTL.  ``cachetools.TLRUCache`` evicts by expiry first and by
least-recent use once ``max_size`` is reached.
"""

from __future__ import annotations

import time
from typing import Any, Callable, NamedTuple

import structlog
from cachetools import TLRUCache

from linkscout.interfaces.cache_provider import ICacheProvider

logger = structlog.get_logger(logger_name=__name__)


class _Entry(NamedTuple):
    value: Any
    ttl: float


def _expires_at(_key: str, entry: _Entry, now: float) -> float:
    return now + entry.ttl


class MemoryCacheProvider(ICacheProvider):
    """TTL cache for catalog lookups, with hit/miss counters.

    Parameters
    ----------
    max_size:
        Entries kept before the least-recently-used one is evicted.
    ttl:
        Seconds an entry lives when :meth:`set` is called without one.
    timer:
        Monotonic clock, injectable for tests.
    """

    def __init__(
        self,
        max_size: int = 1000,
        ttl: int = 3600,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self._default_ttl = ttl
        self._cache: TLRUCache[str, _Entry] = TLRUCache(maxsize=max_size, ttu=_expires_at, timer=timer)
        self._hits = 0
        self._misses = 0

    @property
    def stats(self) -> dict[str, int]:
        self._cache.expire()
        return {"hits": self._hits, "misses": self._misses, "size": len(self._cache)}

    async def get(self, key: str) -> Any | None:
        entry = self._cache.get(key)
        if entry is None:
            self._misses += 1
            logger.debug("lookup_cache_miss", key=key)
            return None
        self._hits += 1
        logger.debug("lookup_cache_hit", key=key)
        return entry.value

    async def set(self, key: str, value: Any, ttl: int | None = None) -> None:
        """Store *value* for *ttl* seconds (the cache default when ``None``)."""
        lifetime = self._default_ttl if ttl is None else ttl
        if lifetime <= 0:
            self._cache.pop(key, None)
            return
        self._cache[key] = _Entry(value, float(lifetime))
        logger.debug("lookup_cache_set", key=key, ttl=lifetime)

    async def delete(self, key: str) -> None:
        self._cache.pop(key, None)

    async def exists(self, key: str) -> bool:
        return key in self._cache

    async def clear(self) -> None:
        """Drop every entry and reset the counters."""
        self._cache.clear()
        self._hits = 0
        self._misses = 0
