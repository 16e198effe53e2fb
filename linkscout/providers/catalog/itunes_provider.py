"""iTunes lookup API fallback for Apple Music links.

``https://itunes.apple.com/lookup?isrc=...&country=...`` needs no
credentials and answers ``{"resultCount": n, "results": [...]}``.  The ISRC
filter is undocumented but stable; it is only used when MusicKit is not
configured or has nothing.
"""

from __future__ import annotations

from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from linkscout.models.links import CanonicalResult
from linkscout.models.providers import ProviderKey
from linkscout.providers.http.resilient_client import ResilientHttpClient
from linkscout.utils.logging import get_logger
from linkscout.utils.text_normalizer import normalize_isrc

ITUNES_LOOKUP_URL = "https://itunes.apple.com/lookup"
SOURCE_TAG = "itunes_isrc"


def strip_tracking_params(url: str) -> str:
    """Remove the ``uo`` affiliate/tracking parameter from an iTunes URL."""
    parts = urlsplit(url)
    if not parts.query:
        return url
    kept = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k != "uo"]
    return urlunsplit(parts._replace(query=urlencode(kept)))


class ITunesSearchProvider:
    """ISRC lookup against the public iTunes lookup endpoint."""

    def __init__(self, http: ResilientHttpClient) -> None:
        self._http = http
        self._logger = get_logger(__name__)

    async def lookup_by_isrc(self, isrc: str, storefront: str = "us") -> CanonicalResult | None:
        normalized = normalize_isrc(isrc)
        if not normalized:
            return None

        body = await self._http.request_json(
            ITUNES_LOOKUP_URL,
            {"isrc": normalized, "country": storefront.upper()},
        )
        results = body.get("results") if isinstance(body, dict) else None
        if not isinstance(results, list):
            return None

        for item in results:
            if not isinstance(item, dict):
                continue
            view_url = item.get("trackViewUrl") or item.get("collectionViewUrl")
            if not view_url:
                continue
            track_id = item.get("trackId")
            return CanonicalResult(
                provider=ProviderKey.APPLE_MUSIC,
                url=strip_tracking_params(view_url),
                provider_id=str(track_id) if track_id is not None else None,
                discovered_from=SOURCE_TAG,
            )

        self._logger.debug("itunes_isrc_miss", isrc=normalized, storefront=storefront)
        return None
