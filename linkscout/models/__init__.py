"""LinkScout domain models, re-exported from their submodules.

    - providers.py   -- ProviderKey vocabulary and the PROVIDER_METADATA table
    - catalog.py     -- Track and release rows, TrackDescriptor
    - links.py       -- Lookup results, resolved links, persisted link rows
    - monitoring.py  -- RegressionEvent
"""

from __future__ import annotations

from linkscout.models.catalog import ReleaseRecord, TrackDescriptor, TrackRecord
from linkscout.models.links import (
    SEARCH_FALLBACK_SOURCE,
    AggregatorResult,
    CanonicalResult,
    DiscoveryJob,
    LinkQuality,
    LinkResolution,
    ProviderLink,
    ProviderLinkRecord,
    ReleaseDiscoveryResult,
)
from linkscout.models.monitoring import RegressionEvent
from linkscout.models.providers import (
    DEFAULT_DISCOVERY_PROVIDERS,
    PROVIDER_METADATA,
    ProviderInfo,
    ProviderKey,
    display_name,
    get_provider_info,
    parse_provider_key,
    provider_for_musicfetch_service,
)

__all__ = [
    "DEFAULT_DISCOVERY_PROVIDERS",
    "PROVIDER_METADATA",
    "SEARCH_FALLBACK_SOURCE",
    "AggregatorResult",
    "CanonicalResult",
    "DiscoveryJob",
    "LinkQuality",
    "LinkResolution",
    "ProviderInfo",
    "ProviderKey",
    "ProviderLink",
    "ProviderLinkRecord",
    "RegressionEvent",
    "ReleaseDiscoveryResult",
    "ReleaseRecord",
    "TrackDescriptor",
    "TrackRecord",
    "display_name",
    "get_provider_info",
    "parse_provider_key",
    "provider_for_musicfetch_service",
]
