"""Apple Music link source: MusicKit first, iTunes lookup as fallback.

Resolution order for one ISRC:

1. MusicKit song lookup (only when a developer token is configured).
   The link points at the album, not the song:

   * a song URL under ``/album/`` becomes the album URL by dropping its
     query (``?i=<song id>``);
   * otherwise the first ``relationships.albums`` id is fetched and its
     ``attributes.url`` used;
   * otherwise the song URL itself.

2. The iTunes lookup endpoint, when MusicKit raised anything or found nothing.
   Errors from iTunes propagate to the resolver.
"""

from __future__ import annotations

from urllib.parse import urlsplit, urlunsplit

from linkscout.interfaces.link_source import ILinkSource
from linkscout.models.links import CanonicalResult
from linkscout.models.providers import ProviderKey
from linkscout.providers.catalog.itunes_provider import ITunesSearchProvider
from linkscout.providers.catalog.musickit_client import MusicKitClient
from linkscout.utils.errors import LinkScoutError
from linkscout.utils.logging import get_logger

SOURCE_TAG = "musickit_isrc"


def derive_album_url(song_url: str) -> str | None:
    """Album URL for a MusicKit ``/album/...?i=`` song URL, else ``None``."""
    if "/album/" not in song_url:
        return None
    parts = urlsplit(song_url)
    if not parts.scheme or not parts.netloc:
        return None
    return urlunsplit(parts._replace(query="", fragment=""))


class AppleMusicProvider(ILinkSource):
    """Composite Apple Music source over :class:`MusicKitClient` and iTunes."""

    def __init__(self, musickit: MusicKitClient, itunes: ITunesSearchProvider) -> None:
        self._musickit = musickit
        self._itunes = itunes
        self._logger = get_logger(__name__)

    def get_source_name(self) -> str:
        return "apple_music"

    def get_display_name(self) -> str:
        return "Apple Music"

    def covers(self) -> frozenset[ProviderKey]:
        return frozenset({ProviderKey.APPLE_MUSIC})

    def is_available(self) -> bool:
        # The iTunes fallback needs no credentials.
        return True

    async def find_links(self, isrc: str, storefront: str = "us") -> list[CanonicalResult]:
        result = None
        if self._musickit.is_available():
            try:
                result = await self._lookup_musickit(isrc, storefront)
            except Exception as exc:
                self._logger.warning(
                    "musickit_lookup_failed_falling_back",
                    isrc=isrc,
                    storefront=storefront,
                    error=str(exc),
                )

        if result is None:
            result = await self._itunes.lookup_by_isrc(isrc, storefront)

        return [result] if result is not None else []

    async def _lookup_musickit(self, isrc: str, storefront: str) -> CanonicalResult | None:
        song = await self._musickit.lookup_by_isrc(isrc, storefront)
        if song is None:
            return None
        song_url = (song.get("attributes") or {}).get("url")
        if not song_url:
            return None

        album_url = derive_album_url(song_url)
        if album_url is None:
            album_url = await self._album_url_from_relationship(song, storefront)

        song_id = song.get("id")
        return CanonicalResult(
            provider=ProviderKey.APPLE_MUSIC,
            url=album_url or song_url,
            provider_id=str(song_id) if song_id is not None else None,
            discovered_from=SOURCE_TAG,
        )

    async def _album_url_from_relationship(self, song: dict, storefront: str) -> str | None:
        albums = ((song.get("relationships") or {}).get("albums") or {}).get("data")
        first = albums[0] if isinstance(albums, list) and albums else None
        album_id = first.get("id") if isinstance(first, dict) else None
        if not album_id:
            return None
        try:
            album = await self._musickit.get_album(album_id, storefront)
        except LinkScoutError as exc:
            # The song URL is still a usable link.
            self._logger.debug("musickit_album_lookup_failed", album_id=album_id, error=str(exc))
            return None
        if album is None:
            return None
        return (album.get("attributes") or {}).get("url")
