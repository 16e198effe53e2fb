"""MusicFetch aggregator link source.

One call resolves an ISRC on many platforms at once::

    GET https://api.musicfetch.io/isrc?isrc=...&services=spotify,deezer,...
    x-musicfetch-token: <token>

    {"result": {"services": {"amazonMusic": {"link": "https://..."}, ...}}}

Service ids map onto :class:`ProviderKey` through the metadata table;
services LinkScout does not know are ignored.
"""

from __future__ import annotations

from typing import Any

from linkscout.interfaces.link_source import ILinkSource
from linkscout.models.links import AggregatorResult, CanonicalResult
from linkscout.models.providers import PROVIDER_METADATA, ProviderKey, provider_for_musicfetch_service
from linkscout.providers.http.resilient_client import ResilientHttpClient
from linkscout.utils.logging import get_logger
from linkscout.utils.text_normalizer import normalize_isrc

MUSICFETCH_ISRC_URL = "https://api.musicfetch.io/isrc"
SOURCE_TAG = "musicfetch_isrc"

_ALL_SERVICES = ",".join(
    info.musicfetch_service for info in PROVIDER_METADATA.values() if info.musicfetch_service
)


def parse_musicfetch_response(body: Any) -> AggregatorResult | None:
    """Extract ``{provider: link}`` from a MusicFetch body, or ``None``."""
    result = body.get("result") if isinstance(body, dict) else None
    services = result.get("services") if isinstance(result, dict) else None
    if not isinstance(services, dict):
        return None

    links: dict[ProviderKey, str] = {}
    for service_id, entry in services.items():
        provider = provider_for_musicfetch_service(service_id)
        if provider is None or not isinstance(entry, dict):
            continue
        link = entry.get("link")
        if isinstance(link, str) and link and provider not in links:
            links[provider] = link

    if not links:
        return None
    return AggregatorResult(links=links, raw=body)


class MusicFetchProvider(ILinkSource):
    """Multi-platform ISRC lookup through MusicFetch."""

    def __init__(self, http: ResilientHttpClient, api_token: str = "", enabled: bool = True) -> None:
        self._http = http
        self._token = api_token
        self._enabled = enabled
        self._logger = get_logger(__name__)

    def get_source_name(self) -> str:
        return "musicfetch"

    def get_display_name(self) -> str:
        return "Musicfetch"

    def covers(self) -> frozenset[ProviderKey]:
        return frozenset(key for key, info in PROVIDER_METADATA.items() if info.musicfetch_service)

    def is_available(self) -> bool:
        return self._enabled and bool(self._token)

    async def lookup_by_isrc(self, isrc: str) -> AggregatorResult | None:
        normalized = normalize_isrc(isrc)
        if not normalized:
            return None
        body = await self._http.request_json(
            MUSICFETCH_ISRC_URL,
            {"isrc": normalized, "services": _ALL_SERVICES},
            headers={"x-musicfetch-token": self._token},
        )
        result = parse_musicfetch_response(body)
        self._logger.debug(
            "musicfetch_isrc_lookup",
            isrc=normalized,
            providers=sorted(p.value for p in result.links) if result else [],
        )
        return result

    async def find_links(self, isrc: str, storefront: str = "us") -> list[CanonicalResult]:
        result = await self.lookup_by_isrc(isrc)
        if result is None:
            return []
        return [
            CanonicalResult(provider=provider, url=url, discovered_from=SOURCE_TAG)
            for provider, url in result.links.items()
        ]
