"""Utility modules for LinkScout.

- **errors** -- Exception hierarchy rooted at LinkScoutError; transport,
  rate-limit and persistence failures each get their own subclass so the
  resolver and orchestrator can record them without broad guesswork.
- **concurrency** -- ``throttled_gather`` for fan-out of catalog lookups.
- **logging** -- structlog setup with a dual-renderer pattern: coloured
  console output in development, structured JSON in production.
- **rate_limiter** -- Token bucket used by the HTTP client per catalog.
- **text_normalizer** -- ISRC normalization and search-query building.
"""

from linkscout.utils.concurrency import throttled_gather
from linkscout.utils.errors import (
    ConfigurationError,
    DiscoveryError,
    LinkScoutError,
    MalformedResponseError,
    PersistenceError,
    ProviderRequestError,
    ProviderUnavailableError,
    RateLimiterError,
    RateLimitError,
    RequestTimeoutError,
)
from linkscout.utils.logging import configure_logging, get_logger
from linkscout.utils.rate_limiter import TokenBucketRateLimiter
from linkscout.utils.text_normalizer import build_search_query, is_valid_isrc, normalize_isrc

__all__ = [
    "ConfigurationError",
    "DiscoveryError",
    "LinkScoutError",
    "MalformedResponseError",
    "PersistenceError",
    "ProviderRequestError",
    "ProviderUnavailableError",
    "RateLimitError",
    "RateLimiterError",
    "RequestTimeoutError",
    "TokenBucketRateLimiter",
    "build_search_query",
    "configure_logging",
    "get_logger",
    "is_valid_isrc",
    "normalize_isrc",
    "throttled_gather",
]
