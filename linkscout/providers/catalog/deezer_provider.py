"""Deezer link source using the public ISRC track endpoint.

``GET https://api.deezer.com/track/isrc:{ISRC}`` needs no credentials.  An
unknown ISRC does not 404: Deezer answers 200 with
``{"error": {"type": "DataException", ...}}``, so the body decides hit or
miss.  The returned link prefers the album page over the track page.
"""

from __future__ import annotations

from typing import Any

from linkscout.interfaces.link_source import ILinkSource
from linkscout.models.links import CanonicalResult
from linkscout.models.providers import ProviderKey
from linkscout.providers.http.resilient_client import ResilientHttpClient
from linkscout.utils.logging import get_logger
from linkscout.utils.text_normalizer import normalize_isrc

DEEZER_API_BASE = "https://api.deezer.com"
SOURCE_TAG = "deezer_isrc"


def _as_id(value: Any) -> str | None:
    return str(value) if value is not None and value != "" else None


def parse_deezer_track(body: Any) -> CanonicalResult | None:
    """Turn a ``/track/isrc:`` body into a result, or ``None`` for a miss.

    Album URL and album id are preferred independently: a body with an
    album id but no album link yields the track URL with the album id.
    """
    if not isinstance(body, dict) or body.get("error"):
        return None
    track_id = _as_id(body.get("id"))
    track_url = body.get("link")
    if track_id is None or not track_url:
        return None

    album = body.get("album") if isinstance(body.get("album"), dict) else {}
    album_url = album.get("link") or None
    album_id = _as_id(album.get("id"))

    return CanonicalResult(
        provider=ProviderKey.DEEZER,
        url=album_url or track_url,
        provider_id=album_id or track_id,
        discovered_from=SOURCE_TAG,
        extra={"trackUrl": track_url, "trackId": track_id},
    )


class DeezerProvider(ILinkSource):
    """ISRC lookup against the Deezer public API."""

    def __init__(self, http: ResilientHttpClient) -> None:
        self._http = http
        self._logger = get_logger(__name__)

    def get_source_name(self) -> str:
        return "deezer"

    def get_display_name(self) -> str:
        return "Deezer"

    def covers(self) -> frozenset[ProviderKey]:
        return frozenset({ProviderKey.DEEZER})

    def is_available(self) -> bool:
        return True

    async def lookup_by_isrc(self, isrc: str) -> CanonicalResult | None:
        normalized = normalize_isrc(isrc)
        if not normalized:
            return None
        body = await self._http.request_json(f"{DEEZER_API_BASE}/track/isrc:{normalized}")
        result = parse_deezer_track(body)
        if result is None:
            self._logger.debug("deezer_isrc_miss", isrc=normalized)
        return result

    async def find_links(self, isrc: str, storefront: str = "us") -> list[CanonicalResult]:
        result = await self.lookup_by_isrc(isrc)
        return [result] if result is not None else []
