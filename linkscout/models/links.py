"""Link models produced by catalog lookups, the resolver and the pipeline.

Flow through the system:

    ILinkSource.find_links()  -> list[CanonicalResult]
    LinkResolver.resolve()    -> LinkResolution(links=[ProviderLink, ...])
    LinkDiscoveryPipeline     -> ProviderLinkRecord (persisted)
                              -> ReleaseDiscoveryResult (returned)
"""

from __future__ import annotations

import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from linkscout.models.providers import ProviderKey

SEARCH_FALLBACK_SOURCE = "search_fallback"


class LinkQuality(str, Enum):  # noqa: UP042
    """How trustworthy a discovered link is.

    CANONICAL:        URL returned by an authoritative catalog lookup.
    SEARCH_FALLBACK:  URL synthesised from the platform's search page.
    """

    CANONICAL = "canonical"
    SEARCH_FALLBACK = "search_fallback"


class CanonicalResult(BaseModel):
    """One authoritative hit returned by a catalog lookup."""

    model_config = ConfigDict(frozen=True)

    provider: ProviderKey
    url: str
    provider_id: str | None = None
    discovered_from: str
    extra: dict[str, Any] = Field(default_factory=dict)


class AggregatorResult(BaseModel):
    """Parsed MusicFetch response: one link per recognised platform."""

    model_config = ConfigDict(frozen=True)

    links: dict[ProviderKey, str] = Field(default_factory=dict)
    raw: dict[str, Any] = Field(default_factory=dict)


class ProviderLink(BaseModel):
    """The resolver's answer for one requested platform."""

    model_config = ConfigDict(frozen=True)

    provider: ProviderKey
    url: str
    provider_id: str | None = None
    quality: LinkQuality
    discovered_from: str
    extra: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_canonical(cls, result: CanonicalResult) -> ProviderLink:
        return cls(
            provider=result.provider,
            url=result.url,
            provider_id=result.provider_id,
            quality=LinkQuality.CANONICAL,
            discovered_from=result.discovered_from,
            extra=dict(result.extra),
        )

    @classmethod
    def search_fallback(cls, provider: ProviderKey, url: str) -> ProviderLink:
        return cls(
            provider=provider,
            url=url,
            quality=LinkQuality.SEARCH_FALLBACK,
            discovered_from=SEARCH_FALLBACK_SOURCE,
        )


class LinkResolution(BaseModel):
    """Links for every requested platform plus any lookup failures."""

    model_config = ConfigDict(frozen=True)

    links: list[ProviderLink] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)


class ProviderLinkRecord(BaseModel):
    """What the repository upserts for one (release, platform) pair.

    ``metadata`` carries provenance under camelCase keys
    (``discoveredFrom``, ``discoveredAt``, ``isrc``, ``quality``) plus any
    lookup extras such as Deezer's ``trackUrl``/``trackId``.
    """

    model_config = ConfigDict(frozen=True)

    release_id: str
    provider: ProviderKey
    url: str
    external_id: str | None = None
    source_type: str = "ingested"
    metadata: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_link(
        cls,
        release_id: str,
        link: ProviderLink,
        isrc: str | None,
        discovered_at: datetime.datetime | None = None,
    ) -> ProviderLinkRecord:
        """Build the persisted row for *link* discovered on *release_id*."""
        stamp = discovered_at or datetime.datetime.now(datetime.timezone.utc)
        metadata: dict[str, Any] = {
            "discoveredFrom": link.discovered_from,
            "discoveredAt": stamp.isoformat(),
            "isrc": isrc,
            "quality": link.quality.value,
        }
        metadata.update(link.extra)
        return cls(
            release_id=release_id,
            provider=link.provider,
            url=link.url,
            external_id=link.provider_id,
            metadata=metadata,
        )


class DiscoveryJob(BaseModel):
    """One release queued for batch discovery."""

    model_config = ConfigDict(frozen=True)

    release_id: str
    existing_providers: list[str] = Field(default_factory=list)


class ReleaseDiscoveryResult(BaseModel):
    """Outcome of discovery for one release.

    ``discovered`` only lists links that were persisted successfully.
    """

    model_config = ConfigDict(frozen=True)

    release_id: str
    discovered: list[ProviderLink] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)

    @property
    def canonical_count(self) -> int:
        return sum(1 for link in self.discovered if link.quality == LinkQuality.CANONICAL)

    @property
    def fallback_count(self) -> int:
        return sum(1 for link in self.discovered if link.quality == LinkQuality.SEARCH_FALLBACK)
