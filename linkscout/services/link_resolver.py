"""Resolve one track to exactly one link per requested platform.

Flow for ``resolve(track, providers)``:

1. De-duplicate the requested platforms, keeping their order.
2. Without an ISRC, skip every catalog lookup.
3. Otherwise run every available source that covers at least one requested
   platform, concurrently, and wait for all of them to settle.
4. Merge the results in source order.  Sources are registered as dedicated
   Apple Music, dedicated Deezer, then MusicFetch, so a dedicated lookup
   beats the aggregator for its own platform no matter which finished
   first.  Results for platforms nobody asked for are dropped.
5. Give every platform still missing a search-page URL.

A failing source is logged and recorded as ``"<Display> lookup failed:
<message>"``; its platforms fall through to step 5 and siblings are
unaffected.
"""

from __future__ import annotations

import asyncio
from typing import Iterable, Sequence

import structlog

from linkscout.interfaces.link_source import ILinkSource
from linkscout.models.catalog import TrackDescriptor
from linkscout.models.links import CanonicalResult, LinkResolution, ProviderLink
from linkscout.models.providers import ProviderKey
from linkscout.services.search_url_builder import build_search_url
from linkscout.utils.concurrency import throttled_gather
from linkscout.utils.errors import LinkScoutError
from linkscout.utils.text_normalizer import normalize_isrc

logger = structlog.get_logger(logger_name=__name__)


def dedupe_providers(providers: Iterable[ProviderKey | str]) -> list[ProviderKey]:
    """Coerce to :class:`ProviderKey` and drop repeats, preserving order."""
    seen: dict[ProviderKey, None] = {}
    for provider in providers:
        seen.setdefault(ProviderKey(provider), None)
    return list(seen)


def merge_by_precedence(
    results_in_order: Sequence[list[CanonicalResult]],
    requested: Iterable[ProviderKey],
) -> dict[ProviderKey, CanonicalResult]:
    """Keep the first result per requested platform, walking sources in order."""
    wanted = set(requested)
    merged: dict[ProviderKey, CanonicalResult] = {}
    for results in results_in_order:
        for result in results:
            if result.provider in wanted and result.provider not in merged:
                merged[result.provider] = result
    return merged


def _error_message(exc: BaseException) -> str:
    if isinstance(exc, LinkScoutError):
        return exc.message
    return str(exc) or "Unknown error"


class LinkResolver:
    """Fan a track out to catalog sources and fill gaps with search URLs.

    Parameters
    ----------
    sources:
        Link sources in precedence order (earlier wins).
    max_concurrency:
        Optional cap on simultaneous source lookups.
    """

    def __init__(self, sources: Sequence[ILinkSource], max_concurrency: int | None = None) -> None:
        self._sources = list(sources)
        self._max_concurrency = max_concurrency

    @property
    def sources(self) -> list[ILinkSource]:
        return list(self._sources)

    def _applicable_sources(self, requested: list[ProviderKey]) -> list[ILinkSource]:
        wanted = set(requested)
        return [
            source
            for source in self._sources
            if source.is_available() and source.covers() & wanted
        ]

    async def resolve(
        self,
        track: TrackDescriptor,
        providers: Iterable[ProviderKey | str],
        storefront: str = "us",
    ) -> LinkResolution:
        requested = dedupe_providers(providers)
        if not requested:
            return LinkResolution()

        isrc = normalize_isrc(track.isrc)
        errors: list[str] = []
        canonical: dict[ProviderKey, CanonicalResult] = {}

        if isrc:
            sources = self._applicable_sources(requested)
            if sources:
                semaphore = asyncio.Semaphore(self._max_concurrency) if self._max_concurrency else None
                outcomes = await throttled_gather(
                    [source.find_links(isrc, storefront) for source in sources],
                    semaphore=semaphore,
                )
                settled: list[list[CanonicalResult]] = []
                for source, outcome in zip(sources, outcomes):
                    if isinstance(outcome, BaseException):
                        if not isinstance(outcome, Exception):
                            raise outcome
                        message = _error_message(outcome)
                        logger.warning(
                            "link_lookup_failed",
                            source=source.get_source_name(),
                            isrc=isrc,
                            error=message,
                        )
                        errors.append(f"{source.get_display_name()} lookup failed: {message}")
                        settled.append([])
                    else:
                        settled.append(outcome)
                canonical = merge_by_precedence(settled, requested)

        links: list[ProviderLink] = []
        for provider in requested:
            hit = canonical.get(provider)
            if hit is not None:
                links.append(ProviderLink.from_canonical(hit))
            else:
                links.append(
                    ProviderLink.search_fallback(
                        provider, build_search_url(provider, track, storefront=storefront)
                    )
                )

        logger.info(
            "links_resolved",
            isrc=isrc,
            requested=len(requested),
            canonical=len(canonical),
            fallbacks=len(requested) - len(canonical),
            errors=len(errors),
        )
        return LinkResolution(links=links, errors=errors)


async def resolve_provider_links(
    track: TrackDescriptor,
    providers: Iterable[ProviderKey | str],
    sources: Sequence[ILinkSource],
    storefront: str = "us",
) -> list[ProviderLink]:
    """Resolve *track* with a one-off :class:`LinkResolver`, discarding errors."""
    resolution = await LinkResolver(sources).resolve(track, providers, storefront)
    return resolution.links
