"""Cache providers: TTL memory cache and in-flight request de-duplication."""

from linkscout.providers.cache.inflight_cache import InflightRequestCache
from linkscout.providers.cache.memory_cache import MemoryCacheProvider

__all__ = ["InflightRequestCache", "MemoryCacheProvider"]
