"""Release-level link discovery orchestrator.

For one release:

1. Load its tracks; stop with ``"No tracks found for release"`` if none.
2. Pick the first track carrying an ISRC; stop with
   ``"No ISRC found on any track"`` if none does.
3. Load the release row for artist context.  Any failure here only costs
   search-URL quality, so it degrades to an empty artist name.
4. Resolve every candidate platform through :class:`LinkResolver`.
5. Upsert each link.  A failed write is recorded against its platform and
   the remaining writes continue; only persisted links are reported.

Batches run one release at a time with a short pause between releases so
the catalog APIs see a steady trickle rather than bursts.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Iterable, Sequence

import structlog

from linkscout.interfaces.link_repository import ILinkRepository
from linkscout.models.catalog import TrackRecord
from linkscout.models.links import (
    DiscoveryJob,
    ProviderLink,
    ProviderLinkRecord,
    ReleaseDiscoveryResult,
)
from linkscout.models.providers import (
    DEFAULT_DISCOVERY_PROVIDERS,
    ProviderKey,
    display_name,
    parse_provider_key,
)
from linkscout.services.link_resolver import LinkResolver
from linkscout.utils.errors import DiscoveryError, LinkScoutError
from linkscout.utils.logging import get_logger
from linkscout.utils.text_normalizer import normalize_isrc

NO_TRACKS_ERROR = "No tracks found for release"
NO_ISRC_ERROR = "No ISRC found on any track"


def _message(exc: BaseException) -> str:
    if isinstance(exc, LinkScoutError):
        return exc.message
    return str(exc) or exc.__class__.__name__


def select_isrc_track(tracks: Sequence[TrackRecord]) -> TrackRecord | None:
    """Return the first track (in the given order) with a non-blank ISRC."""
    for track in tracks:
        if track.isrc and track.isrc.strip():
            return track
    return None


class LinkDiscoveryPipeline:
    """Discover and persist streaming links for releases.

    Parameters
    ----------
    repository:
        Source of tracks/releases and sink for discovered links.
    resolver:
        Catalog fan-out plus search fallbacks.
    providers:
        Platforms considered for every release.  Defaults to every platform
        except Spotify.
    inter_release_delay:
        Seconds to pause between releases in a batch.
    sleep:
        Awaitable sleep, injectable for tests.
    """

    def __init__(
        self,
        repository: ILinkRepository,
        resolver: LinkResolver,
        providers: Iterable[ProviderKey | str] = DEFAULT_DISCOVERY_PROVIDERS,
        inter_release_delay: float = 0.2,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._repository = repository
        self._resolver = resolver
        self._providers = [ProviderKey(p) for p in providers]
        self._inter_release_delay = inter_release_delay
        self._sleep = sleep
        self._logger: structlog.BoundLogger = get_logger(__name__)

    @property
    def providers(self) -> list[ProviderKey]:
        return list(self._providers)

    def candidate_providers(
        self, existing_providers: Iterable[str], skip_existing: bool = True
    ) -> list[ProviderKey]:
        if not skip_existing:
            return list(self._providers)
        existing = {parse_provider_key(p) for p in existing_providers}
        return [p for p in self._providers if p not in existing]

    async def _artist_name(self, release_id: str) -> str:
        try:
            release = await self._repository.get_release_by_id(release_id)
        except Exception as exc:
            self._logger.warning("release_lookup_failed", release_id=release_id, error=_message(exc))
            return ""
        return release.primary_artist_name if release is not None else ""

    async def discover_links_for_release(
        self,
        release_id: str,
        existing_providers: Iterable[str] = (),
        *,
        skip_existing: bool = True,
        storefront: str = "us",
    ) -> ReleaseDiscoveryResult:
        """Discover, persist and report links for one release.

        Raises
        ------
        DiscoveryError
            The release's tracks could not be loaded.
        """
        try:
            tracks = await self._repository.get_tracks_for_release(release_id)
        except Exception as exc:
            raise DiscoveryError(message=f"Could not load tracks: {_message(exc)}") from exc
        if not tracks:
            return ReleaseDiscoveryResult(release_id=release_id, errors=[NO_TRACKS_ERROR])

        track = select_isrc_track(tracks)
        if track is None:
            return ReleaseDiscoveryResult(release_id=release_id, errors=[NO_ISRC_ERROR])

        candidates = self.candidate_providers(existing_providers, skip_existing)
        if not candidates:
            self._logger.info("discovery_nothing_to_do", release_id=release_id)
            return ReleaseDiscoveryResult(release_id=release_id)

        artist_name = await self._artist_name(release_id)
        descriptor = track.to_descriptor(artist_name)
        resolution = await self._resolver.resolve(descriptor, candidates, storefront)

        isrc = normalize_isrc(track.isrc)
        errors = list(resolution.errors)
        discovered: list[ProviderLink] = []
        for link in resolution.links:
            record = ProviderLinkRecord.from_link(release_id, link, isrc=isrc)
            try:
                await self._repository.upsert_provider_link(record)
            except Exception as exc:
                self._logger.warning(
                    "provider_link_persist_failed",
                    release_id=release_id,
                    provider=link.provider.value,
                    error=_message(exc),
                )
                errors.append(f"{display_name(link.provider)}: {_message(exc)}")
                continue
            discovered.append(link)

        result = ReleaseDiscoveryResult(release_id=release_id, discovered=discovered, errors=errors)
        self._logger.info(
            "release_discovery_complete",
            release_id=release_id,
            isrc=isrc,
            canonical=result.canonical_count,
            fallbacks=result.fallback_count,
            errors=len(errors),
        )
        return result

    async def discover_links_for_releases(
        self,
        jobs: Sequence[DiscoveryJob],
        *,
        skip_existing: bool = True,
        storefront: str = "us",
    ) -> list[ReleaseDiscoveryResult]:
        """Run :meth:`discover_links_for_release` for each job, in order.

        An unexpected exception for one release is recorded in that
        release's ``errors`` and the batch moves on.
        """
        results: list[ReleaseDiscoveryResult] = []
        for index, job in enumerate(jobs):
            try:
                result = await self.discover_links_for_release(
                    job.release_id,
                    job.existing_providers,
                    skip_existing=skip_existing,
                    storefront=storefront,
                )
            except Exception as exc:
                self._logger.error("release_discovery_failed", release_id=job.release_id, error=_message(exc))
                result = ReleaseDiscoveryResult(release_id=job.release_id, errors=[_message(exc)])
            results.append(result)

            if index < len(jobs) - 1 and self._inter_release_delay > 0:
                await self._sleep(self._inter_release_delay)
        return results
