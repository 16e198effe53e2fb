"""Apple Music API (MusicKit) catalog client.

Talks to ``https://api.music.apple.com/v1`` with a developer token sent as
a bearer header.  Only the two calls link discovery needs are wrapped:
ISRC song lookup and album-by-id.  Both return the raw JSON:API resource
dict (``{"id", "type", "attributes", "relationships"}``) or ``None`` when
the catalog has no match.  A 404 is a miss, not an error.
"""

from __future__ import annotations

from typing import Any

from linkscout.interfaces.cache_provider import ICacheProvider
from linkscout.providers.http.resilient_client import ResilientHttpClient
from linkscout.utils.errors import ProviderRequestError
from linkscout.utils.logging import get_logger
from linkscout.utils.text_normalizer import normalize_isrc

MUSICKIT_API_BASE = "https://api.music.apple.com/v1"


class MusicKitClient:
    """Thin MusicKit catalog client with an ISRC lookup cache.

    Parameters
    ----------
    http:
        Resilient client bound to :data:`MUSICKIT_API_BASE`.
    developer_token:
        Signed MusicKit JWT.  Empty means the client is unavailable.
    cache:
        Optional cache for successful ISRC lookups.
    cache_ttl:
        Seconds to keep a cached lookup.
    """

    def __init__(
        self,
        http: ResilientHttpClient,
        developer_token: str = "",
        cache: ICacheProvider | None = None,
        cache_ttl: int = 86400,
    ) -> None:
        self._http = http
        self._token = developer_token
        self._cache = cache
        self._cache_ttl = cache_ttl
        self._logger = get_logger(__name__)

    def is_available(self) -> bool:
        return bool(self._token)

    def _auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._token}"}

    @staticmethod
    def _cache_key(isrc: str, storefront: str) -> str:
        return f"musickit:isrc:{storefront.lower()}:{isrc}"

    async def _get_resource(self, path: str, params: dict[str, Any] | None = None) -> dict | None:
        try:
            body = await self._http.request_json(path, params, headers=self._auth_headers())
        except ProviderRequestError as exc:
            if exc.status_code == 404:
                return None
            raise
        data = body.get("data") if isinstance(body, dict) else None
        if not isinstance(data, list) or not data:
            return None
        first = data[0]
        return first if isinstance(first, dict) else None

    async def lookup_by_isrc(self, isrc: str, storefront: str = "us") -> dict | None:
        """Return the first catalog song carrying *isrc* in *storefront*."""
        normalized = normalize_isrc(isrc)
        if not normalized:
            return None

        key = self._cache_key(normalized, storefront)
        if self._cache is not None:
            cached = await self._cache.get(key)
            if cached is not None:
                return cached

        song = await self._get_resource(
            f"/catalog/{storefront.lower()}/songs",
            {"filter[isrc]": normalized},
        )
        if song is not None and self._cache is not None:
            await self._cache.set(key, song, ttl=self._cache_ttl)
        self._logger.debug("musickit_isrc_lookup", isrc=normalized, storefront=storefront, found=song is not None)
        return song

    async def get_album(self, album_id: str, storefront: str = "us") -> dict | None:
        """Return the catalog album resource for *album_id*."""
        return await self._get_resource(f"/catalog/{storefront.lower()}/albums/{album_id}")
