"""LinkScout composition root.

Builds catalog sources, the resolver and the discovery pipeline from
:class:`Settings`.  Nothing here runs at import time; the CLI (and any
embedding application) calls the ``build_*`` factories with its own
``httpx.AsyncClient`` and owns that client's lifecycle.
"""

from __future__ import annotations

import math
from typing import Any

import httpx

from linkscout.config.settings import Settings
from linkscout.interfaces.link_repository import ILinkRepository
from linkscout.interfaces.link_source import ILinkSource
from linkscout.models.providers import DEFAULT_DISCOVERY_PROVIDERS, ProviderKey
from linkscout.monitoring.regression_detector import PerformanceRegressionDetector
from linkscout.pipeline.discovery import LinkDiscoveryPipeline
from linkscout.providers.cache.inflight_cache import InflightRequestCache
from linkscout.providers.cache.memory_cache import MemoryCacheProvider
from linkscout.providers.catalog.apple_music_provider import AppleMusicProvider
from linkscout.providers.catalog.deezer_provider import DEEZER_API_BASE, DeezerProvider
from linkscout.providers.catalog.itunes_provider import ITunesSearchProvider
from linkscout.providers.catalog.musicfetch_provider import MusicFetchProvider
from linkscout.providers.catalog.musickit_client import MUSICKIT_API_BASE, MusicKitClient
from linkscout.providers.http.resilient_client import ResilientHttpClient
from linkscout.services.link_resolver import LinkResolver
from linkscout.utils.logging import get_logger
from linkscout.utils.rate_limiter import TokenBucketRateLimiter

_logger = get_logger(__name__)


def build_http_client(app_settings: Settings) -> httpx.AsyncClient:
    """Create the shared ``httpx.AsyncClient`` used by every catalog."""
    return httpx.AsyncClient(timeout=app_settings.http_timeout_seconds, follow_redirects=True)


def build_regression_detector(app_settings: Settings) -> PerformanceRegressionDetector:
    return PerformanceRegressionDetector(
        threshold_percent=app_settings.regression_threshold_percent,
        max_samples=app_settings.regression_max_samples,
    )


def _resilient(
    http_client: httpx.AsyncClient,
    app_settings: Settings,
    name: str,
    base_url: str = "",
    **kwargs: Any,
) -> ResilientHttpClient:
    return ResilientHttpClient(
        http_client,
        base_url,
        name=name,
        timeout=app_settings.http_timeout_seconds,
        max_retries=app_settings.http_max_retries,
        backoff_base=app_settings.http_backoff_seconds,
        max_retry_after=app_settings.http_max_retry_after_seconds,
        **kwargs,
    )


def build_link_sources(
    app_settings: Settings,
    http_client: httpx.AsyncClient,
    *,
    inflight: InflightRequestCache | None = None,
    regression_detector: PerformanceRegressionDetector | None = None,
) -> list[ILinkSource]:
    """Build link sources in precedence order: Apple Music, Deezer, MusicFetch."""
    inflight = inflight if inflight is not None else InflightRequestCache()
    shared = {"inflight": inflight, "regression_detector": regression_detector}

    musickit = MusicKitClient(
        _resilient(http_client, app_settings, "musickit", MUSICKIT_API_BASE, **shared),
        developer_token=app_settings.apple_music_developer_token,
        cache=MemoryCacheProvider(ttl=app_settings.lookup_cache_ttl_seconds),
        cache_ttl=app_settings.lookup_cache_ttl_seconds,
    )
    itunes = ITunesSearchProvider(_resilient(http_client, app_settings, "itunes", **shared))

    deezer_rps = app_settings.deezer_requests_per_second
    deezer_http = _resilient(
        http_client,
        app_settings,
        "deezer",
        DEEZER_API_BASE,
        rate_limiter=TokenBucketRateLimiter(
            capacity=max(1, math.ceil(deezer_rps)), refill_rate=deezer_rps, name="deezer"
        ),
        **shared,
    )
    musicfetch_http = _resilient(
        http_client,
        app_settings,
        "musicfetch",
        rate_limiter=TokenBucketRateLimiter.per_minute(
            app_settings.musicfetch_requests_per_minute, name="musicfetch"
        ),
        **shared,
    )

    sources: list[ILinkSource] = [
        AppleMusicProvider(musickit, itunes),
        DeezerProvider(deezer_http),
        MusicFetchProvider(
            musicfetch_http,
            api_token=app_settings.musicfetch_api_token,
            enabled=app_settings.musicfetch_enabled,
        ),
    ]
    _logger.info(
        "link_sources_built",
        configured=app_settings.get_configured_sources(),
        available=[s.get_source_name() for s in sources if s.is_available()],
        musickit=musickit.is_available(),
    )
    return sources


def build_link_resolver(
    app_settings: Settings,
    http_client: httpx.AsyncClient,
    *,
    regression_detector: PerformanceRegressionDetector | None = None,
) -> LinkResolver:
    return LinkResolver(
        build_link_sources(app_settings, http_client, regression_detector=regression_detector)
    )


def _configured_providers(config: dict | None) -> list[ProviderKey]:
    names = ((config or {}).get("discovery") or {}).get("providers")
    if not names:
        return list(DEFAULT_DISCOVERY_PROVIDERS)
    return [ProviderKey(name) for name in names]


def build_discovery_service(
    app_settings: Settings,
    http_client: httpx.AsyncClient,
    repository: ILinkRepository,
    *,
    config: dict | None = None,
    regression_detector: PerformanceRegressionDetector | None = None,
) -> LinkDiscoveryPipeline:
    """Assemble a :class:`LinkDiscoveryPipeline` ready to run.

    ``config`` is the dict from :func:`linkscout.config.load_config`; its
    ``discovery.providers`` list, when present, replaces the default
    platform set.
    """
    if regression_detector is None:
        regression_detector = build_regression_detector(app_settings)
    resolver = build_link_resolver(app_settings, http_client, regression_detector=regression_detector)
    return LinkDiscoveryPipeline(
        repository=repository,
        resolver=resolver,
        providers=_configured_providers(config),
        inter_release_delay=app_settings.inter_release_delay_seconds,
    )
