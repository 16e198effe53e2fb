"""Unit tests for the catalog link sources (Apple Music, iTunes, Deezer, MusicFetch)."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from linkscout.models.links import CanonicalResult
from linkscout.models.providers import ProviderKey
from linkscout.providers.cache.memory_cache import MemoryCacheProvider
from linkscout.providers.catalog.apple_music_provider import AppleMusicProvider, derive_album_url
from linkscout.providers.catalog.deezer_provider import DeezerProvider, parse_deezer_track
from linkscout.providers.catalog.itunes_provider import ITunesSearchProvider, strip_tracking_params
from linkscout.providers.catalog.musicfetch_provider import MusicFetchProvider, parse_musicfetch_response
from linkscout.providers.catalog.musickit_client import MUSICKIT_API_BASE, MusicKitClient
from linkscout.utils.errors import ProviderUnavailableError

ISRC = "USUM72212345"

_SONG = {
    "id": "1440000001",
    "type": "songs",
    "attributes": {"url": "https://music.apple.com/us/album/strings-of-life/1440000000?i=1440000001"},
}


# ======================================================================
# MusicKit client
# ======================================================================


class TestMusicKitClient:
    def test_unavailable_without_token(self, make_http) -> None:
        http, _ = make_http([])
        assert MusicKitClient(http, developer_token="").is_available() is False
        assert MusicKitClient(http, developer_token="jwt").is_available() is True

    @pytest.mark.asyncio
    async def test_lookup_by_isrc_returns_first_song(self, make_http) -> None:
        http, requests = make_http(
            [httpx.Response(200, json={"data": [_SONG, {"id": "other"}]})],
            base_url=MUSICKIT_API_BASE,
        )
        client = MusicKitClient(http, developer_token="jwt")
        song = await client.lookup_by_isrc("us-um7-22-12345", "GB")
        assert song["id"] == "1440000001"
        assert requests[0].url.path == "/v1/catalog/gb/songs"
        assert requests[0].url.params["filter[isrc]"] == ISRC
        assert requests[0].headers["Authorization"] == "Bearer jwt"

    @pytest.mark.asyncio
    async def test_empty_data_is_a_miss(self, make_http) -> None:
        http, _ = make_http([httpx.Response(200, json={"data": []})], base_url=MUSICKIT_API_BASE)
        assert await MusicKitClient(http, "jwt").lookup_by_isrc(ISRC) is None

    @pytest.mark.asyncio
    async def test_404_is_a_miss(self, make_http) -> None:
        http, _ = make_http([httpx.Response(404, json={"errors": []})], base_url=MUSICKIT_API_BASE)
        assert await MusicKitClient(http, "jwt").get_album("123") is None

    @pytest.mark.asyncio
    async def test_server_error_propagates(self, make_http) -> None:
        http, _ = make_http([httpx.Response(500), httpx.Response(500)], base_url=MUSICKIT_API_BASE)
        with pytest.raises(ProviderUnavailableError):
            await MusicKitClient(http, "jwt").lookup_by_isrc(ISRC)

    @pytest.mark.asyncio
    async def test_successful_lookup_is_cached(self, make_http) -> None:
        http, requests = make_http(lambda r: httpx.Response(200, json={"data": [_SONG]}), base_url=MUSICKIT_API_BASE)
        client = MusicKitClient(http, "jwt", cache=MemoryCacheProvider())
        await client.lookup_by_isrc(ISRC, "us")
        await client.lookup_by_isrc(ISRC.lower(), "us")
        assert len(requests) == 1

    @pytest.mark.asyncio
    async def test_misses_are_not_cached(self, make_http) -> None:
        http, requests = make_http(lambda r: httpx.Response(200, json={"data": []}), base_url=MUSICKIT_API_BASE)
        client = MusicKitClient(http, "jwt", cache=MemoryCacheProvider())
        await client.lookup_by_isrc(ISRC)
        await client.lookup_by_isrc(ISRC)
        assert len(requests) == 2


# ======================================================================
# iTunes fallback
# ======================================================================


class TestITunesSearchProvider:
    def test_strip_tracking_params(self) -> None:
        url = "https://music.apple.com/us/album/x/1?i=2&uo=4"
        assert strip_tracking_params(url) == "https://music.apple.com/us/album/x/1?i=2"
        assert strip_tracking_params("https://music.apple.com/us/album/x/1") == "https://music.apple.com/us/album/x/1"

    @pytest.mark.asyncio
    async def test_prefers_track_view_url(self, make_http) -> None:
        http, requests = make_http([
            httpx.Response(200, json={
                "resultCount": 1,
                "results": [{
                    "trackId": 42,
                    "trackViewUrl": "https://music.apple.com/gb/album/x/1?i=42&uo=4",
                    "collectionViewUrl": "https://music.apple.com/gb/album/x/1?uo=4",
                }],
            })
        ])
        result = await ITunesSearchProvider(http).lookup_by_isrc(ISRC, "gb")
        assert result == CanonicalResult(
            provider=ProviderKey.APPLE_MUSIC,
            url="https://music.apple.com/gb/album/x/1?i=42",
            provider_id="42",
            discovered_from="itunes_isrc",
        )
        assert requests[0].url.params["country"] == "GB"
        assert requests[0].url.params["isrc"] == ISRC

    @pytest.mark.asyncio
    async def test_falls_back_to_collection_url(self, make_http) -> None:
        http, _ = make_http([
            httpx.Response(200, json={"results": [{"collectionViewUrl": "https://music.apple.com/us/album/x/1"}]})
        ])
        result = await ITunesSearchProvider(http).lookup_by_isrc(ISRC)
        assert result.url == "https://music.apple.com/us/album/x/1"
        assert result.provider_id is None

    @pytest.mark.asyncio
    async def test_no_results_is_none(self, make_http) -> None:
        http, _ = make_http([httpx.Response(200, json={"resultCount": 0, "results": []})])
        assert await ITunesSearchProvider(http).lookup_by_isrc(ISRC) is None


# ======================================================================
# Apple Music composite
# ======================================================================


def _musickit(available: bool = True, song=None, album=None, error: Exception | None = None) -> MagicMock:
    musickit = MagicMock(spec=MusicKitClient)
    musickit.is_available.return_value = available
    if error is not None:
        musickit.lookup_by_isrc = AsyncMock(side_effect=error)
    else:
        musickit.lookup_by_isrc = AsyncMock(return_value=song)
    musickit.get_album = AsyncMock(return_value=album)
    return musickit


def _itunes(result: CanonicalResult | None = None, error: Exception | None = None) -> MagicMock:
    itunes = MagicMock(spec=ITunesSearchProvider)
    itunes.lookup_by_isrc = AsyncMock(return_value=result, side_effect=error)
    return itunes


_ITUNES_HIT = CanonicalResult(
    provider=ProviderKey.APPLE_MUSIC,
    url="https://music.apple.com/us/album/x/9",
    provider_id="9",
    discovered_from="itunes_isrc",
)


class TestAppleMusicProvider:
    def test_derive_album_url(self) -> None:
        assert derive_album_url(_SONG["attributes"]["url"]) == (
            "https://music.apple.com/us/album/strings-of-life/1440000000"
        )
        assert derive_album_url("https://music.apple.com/us/song/x/1") is None

    def test_contract(self) -> None:
        provider = AppleMusicProvider(_musickit(), _itunes())
        assert provider.get_display_name() == "Apple Music"
        assert provider.covers() == frozenset({ProviderKey.APPLE_MUSIC})
        assert provider.is_available() is True

    @pytest.mark.asyncio
    async def test_album_url_derived_from_song_url(self) -> None:
        itunes = _itunes(_ITUNES_HIT)
        provider = AppleMusicProvider(_musickit(song=_SONG), itunes)
        [result] = await provider.find_links(ISRC, "us")
        assert result.url == "https://music.apple.com/us/album/strings-of-life/1440000000"
        assert result.provider_id == "1440000001"
        assert result.discovered_from == "musickit_isrc"
        itunes.lookup_by_isrc.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_album_url_from_relationship(self) -> None:
        song = {
            "id": "5",
            "attributes": {"url": "https://music.apple.com/us/song/strings/5"},
            "relationships": {"albums": {"data": [{"id": "77"}]}},
        }
        album = {"id": "77", "attributes": {"url": "https://music.apple.com/us/album/strings/77"}}
        musickit = _musickit(song=song, album=album)
        [result] = await AppleMusicProvider(musickit, _itunes()).find_links(ISRC, "gb")
        assert result.url == "https://music.apple.com/us/album/strings/77"
        musickit.get_album.assert_awaited_once_with("77", "gb")

    @pytest.mark.asyncio
    async def test_song_url_when_album_unresolvable(self) -> None:
        song = {"id": "5", "attributes": {"url": "https://music.apple.com/us/song/strings/5"}}
        [result] = await AppleMusicProvider(_musickit(song=song), _itunes()).find_links(ISRC)
        assert result.url == "https://music.apple.com/us/song/strings/5"

    @pytest.mark.asyncio
    async def test_falls_back_to_itunes_when_musickit_fails(self) -> None:
        musickit = _musickit(error=ProviderUnavailableError("down", provider_name="musickit"))
        [result] = await AppleMusicProvider(musickit, _itunes(_ITUNES_HIT)).find_links(ISRC)
        assert result.discovered_from == "itunes_isrc"

    @pytest.mark.asyncio
    async def test_falls_back_to_itunes_on_unexpected_musickit_error(self) -> None:
        musickit = _musickit(error=KeyError(0))
        itunes = _itunes(_ITUNES_HIT)
        [result] = await AppleMusicProvider(musickit, itunes).find_links(ISRC)
        assert result == _ITUNES_HIT
        itunes.lookup_by_isrc.assert_awaited_once_with(ISRC, "us")

    @pytest.mark.asyncio
    async def test_album_relationship_object_uses_song_url(self) -> None:
        song = {
            "id": "5",
            "attributes": {"url": "https://music.apple.com/us/song/strings/5"},
            "relationships": {"albums": {"data": {"id": "9"}}},
        }
        musickit = _musickit(song=song)
        itunes = _itunes(_ITUNES_HIT)
        [result] = await AppleMusicProvider(musickit, itunes).find_links(ISRC)
        assert result.url == "https://music.apple.com/us/song/strings/5"
        musickit.get_album.assert_not_awaited()
        itunes.lookup_by_isrc.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_falls_back_to_itunes_when_musickit_misses(self) -> None:
        [result] = await AppleMusicProvider(_musickit(song=None), _itunes(_ITUNES_HIT)).find_links(ISRC)
        assert result == _ITUNES_HIT

    @pytest.mark.asyncio
    async def test_skips_musickit_without_token(self) -> None:
        musickit = _musickit(available=False)
        await AppleMusicProvider(musickit, _itunes(_ITUNES_HIT)).find_links(ISRC)
        musickit.lookup_by_isrc.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_itunes_error_propagates(self) -> None:
        itunes = _itunes(error=ProviderUnavailableError("itunes down"))
        with pytest.raises(ProviderUnavailableError):
            await AppleMusicProvider(_musickit(song=None), itunes).find_links(ISRC)

    @pytest.mark.asyncio
    async def test_both_miss_returns_empty(self) -> None:
        assert await AppleMusicProvider(_musickit(song=None), _itunes(None)).find_links(ISRC) == []


# ======================================================================
# Deezer
# ======================================================================


class TestDeezerParsing:
    def test_error_body_is_none(self) -> None:
        assert parse_deezer_track({"error": {"type": "DataException", "code": 800}}) is None

    def test_id_without_link_is_none(self) -> None:
        assert parse_deezer_track({"id": 1}) is None

    def test_link_without_id_is_none(self) -> None:
        assert parse_deezer_track({"link": "https://www.deezer.com/track/1"}) is None

    def test_album_preferred_over_track(self) -> None:
        result = parse_deezer_track({
            "id": 3135556,
            "link": "https://www.deezer.com/track/3135556",
            "album": {"id": 302127, "link": "https://www.deezer.com/album/302127"},
        })
        assert result.url == "https://www.deezer.com/album/302127"
        assert result.provider_id == "302127"
        assert result.extra == {"trackUrl": "https://www.deezer.com/track/3135556", "trackId": "3135556"}
        assert result.discovered_from == "deezer_isrc"

    def test_track_used_without_album(self) -> None:
        result = parse_deezer_track({"id": 7, "link": "https://www.deezer.com/track/7"})
        assert result.url == "https://www.deezer.com/track/7"
        assert result.provider_id == "7"

    def test_album_id_and_link_coalesce_independently(self) -> None:
        result = parse_deezer_track({
            "id": 7,
            "link": "https://www.deezer.com/track/7",
            "album": {"id": 70},
        })
        assert result.url == "https://www.deezer.com/track/7"
        assert result.provider_id == "70"


class TestDeezerProvider:
    @pytest.mark.asyncio
    async def test_find_links_hits_isrc_endpoint(self, make_http) -> None:
        http, requests = make_http([
            httpx.Response(200, json={"id": 7, "link": "https://www.deezer.com/track/7"})
        ])
        [result] = await DeezerProvider(http).find_links("usum72212345")
        assert str(requests[0].url) == f"https://api.deezer.com/track/isrc:{ISRC}"
        assert result.provider == ProviderKey.DEEZER

    @pytest.mark.asyncio
    async def test_miss_returns_empty(self, make_http) -> None:
        http, _ = make_http([httpx.Response(200, json={"error": {"code": 800}})])
        assert await DeezerProvider(http).find_links(ISRC) == []


# ======================================================================
# MusicFetch
# ======================================================================


class TestMusicFetch:
    def test_parse_maps_known_services(self) -> None:
        body = {
            "result": {
                "services": {
                    "amazonMusic": {"link": "https://music.amazon.com/albums/B0"},
                    "tidal": {"link": "https://tidal.com/album/1"},
                    "myspace": {"link": "https://myspace.com/x"},
                    "pandora": {},
                }
            }
        }
        result = parse_musicfetch_response(body)
        assert result.links == {
            ProviderKey.AMAZON_MUSIC: "https://music.amazon.com/albums/B0",
            ProviderKey.TIDAL: "https://tidal.com/album/1",
        }
        assert result.raw == body

    def test_parse_without_services_is_none(self) -> None:
        assert parse_musicfetch_response({"result": {}}) is None
        assert parse_musicfetch_response({"result": {"services": {"myspace": {"link": "x"}}}}) is None

    def test_availability_requires_token_and_flag(self, make_http) -> None:
        http, _ = make_http([])
        assert MusicFetchProvider(http, api_token="", enabled=True).is_available() is False
        assert MusicFetchProvider(http, api_token="t", enabled=False).is_available() is False
        assert MusicFetchProvider(http, api_token="t", enabled=True).is_available() is True

    def test_covers_many_platforms(self, make_http) -> None:
        http, _ = make_http([])
        covers = MusicFetchProvider(http, api_token="t").covers()
        assert ProviderKey.TIDAL in covers
        assert ProviderKey.APPLE_MUSIC in covers

    @pytest.mark.asyncio
    async def test_find_links_sends_token_header(self, make_http) -> None:
        http, requests = make_http([
            httpx.Response(200, json={"result": {"services": {"tidal": {"link": "https://tidal.com/album/1"}}}})
        ])
        results = await MusicFetchProvider(http, api_token="secret").find_links(ISRC)
        assert requests[0].headers["x-musicfetch-token"] == "secret"
        assert requests[0].url.params["isrc"] == ISRC
        assert "tidal" in requests[0].url.params["services"]
        assert results == [
            CanonicalResult(
                provider=ProviderKey.TIDAL,
                url="https://tidal.com/album/1",
                discovered_from="musicfetch_isrc",
            )
        ]
