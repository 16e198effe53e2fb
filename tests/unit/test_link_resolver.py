"""Unit tests for LinkResolver: precedence, fallbacks, error isolation."""

from __future__ import annotations

import asyncio

import pytest

from linkscout.interfaces.link_source import ILinkSource
from linkscout.models.catalog import TrackDescriptor
from linkscout.models.links import CanonicalResult, LinkQuality
from linkscout.models.providers import DEFAULT_DISCOVERY_PROVIDERS, ProviderKey
from linkscout.services.link_resolver import (
    LinkResolver,
    dedupe_providers,
    merge_by_precedence,
    resolve_provider_links,
)
from linkscout.utils.errors import ProviderUnavailableError

ISRC = "USUM72212345"


def _hit(provider: ProviderKey, url: str, source: str) -> CanonicalResult:
    return CanonicalResult(provider=provider, url=url, discovered_from=source)


def _apple(make_source, **kwargs):
    kwargs.setdefault("results", [_hit(ProviderKey.APPLE_MUSIC, "https://music.apple.com/us/album/x/1", "musickit_isrc")])
    return make_source("apple_music", "Apple Music", {ProviderKey.APPLE_MUSIC}, **kwargs)


def _deezer(make_source, **kwargs):
    kwargs.setdefault("results", [_hit(ProviderKey.DEEZER, "https://www.deezer.com/album/2", "deezer_isrc")])
    return make_source("deezer", "Deezer", {ProviderKey.DEEZER}, **kwargs)


def _musicfetch(make_source, **kwargs):
    kwargs.setdefault(
        "results",
        [
            _hit(ProviderKey.APPLE_MUSIC, "https://music.apple.com/us/album/mf", "musicfetch_isrc"),
            _hit(ProviderKey.DEEZER, "https://www.deezer.com/album/mf", "musicfetch_isrc"),
            _hit(ProviderKey.TIDAL, "https://tidal.com/album/3", "musicfetch_isrc"),
            _hit(ProviderKey.SPOTIFY, "https://open.spotify.com/album/4", "musicfetch_isrc"),
        ],
    )
    covers = {ProviderKey.APPLE_MUSIC, ProviderKey.DEEZER, ProviderKey.TIDAL, ProviderKey.SPOTIFY}
    return make_source("musicfetch", "Musicfetch", covers, **kwargs)


# ======================================================================
# Helpers
# ======================================================================


class TestHelpers:
    def test_dedupe_preserves_order(self) -> None:
        assert dedupe_providers(["deezer", ProviderKey.TIDAL, "deezer", "tidal"]) == [
            ProviderKey.DEEZER,
            ProviderKey.TIDAL,
        ]

    def test_merge_first_source_wins(self) -> None:
        merged = merge_by_precedence(
            [
                [_hit(ProviderKey.DEEZER, "a", "deezer_isrc")],
                [_hit(ProviderKey.DEEZER, "b", "musicfetch_isrc"), _hit(ProviderKey.TIDAL, "c", "musicfetch_isrc")],
            ],
            [ProviderKey.DEEZER],
        )
        assert list(merged) == [ProviderKey.DEEZER]
        assert merged[ProviderKey.DEEZER].url == "a"


# ======================================================================
# resolve()
# ======================================================================


class TestResolve:
    @pytest.mark.asyncio
    async def test_no_isrc_gives_fallbacks_without_lookups(self, make_source) -> None:
        apple = _apple(make_source)
        deezer = _deezer(make_source)
        track = TrackDescriptor(title="Strings of Life", artist_name="Rhythim Is Rhythim")
        resolution = await LinkResolver([apple, deezer]).resolve(track, DEFAULT_DISCOVERY_PROVIDERS)

        assert apple.calls == [] and deezer.calls == []
        assert len(resolution.links) == len(DEFAULT_DISCOVERY_PROVIDERS)
        assert all(link.quality == LinkQuality.SEARCH_FALLBACK for link in resolution.links)
        assert all(link.discovered_from == "search_fallback" for link in resolution.links)
        assert resolution.errors == []

    @pytest.mark.asyncio
    async def test_one_link_per_requested_provider(self, make_source, sample_track) -> None:
        sources = [_apple(make_source), _deezer(make_source), _musicfetch(make_source)]
        requested = [ProviderKey.APPLE_MUSIC, ProviderKey.DEEZER, ProviderKey.TIDAL, ProviderKey.YOUTUBE, "deezer"]
        resolution = await LinkResolver(sources).resolve(sample_track, requested)

        providers = [link.provider for link in resolution.links]
        assert providers == [ProviderKey.APPLE_MUSIC, ProviderKey.DEEZER, ProviderKey.TIDAL, ProviderKey.YOUTUBE]
        by_provider = {link.provider: link for link in resolution.links}
        assert by_provider[ProviderKey.TIDAL].quality == LinkQuality.CANONICAL
        assert by_provider[ProviderKey.YOUTUBE].quality == LinkQuality.SEARCH_FALLBACK

    @pytest.mark.asyncio
    async def test_dedicated_sources_beat_aggregator(self, make_source, sample_track) -> None:
        sources = [_apple(make_source), _deezer(make_source), _musicfetch(make_source)]
        resolution = await LinkResolver(sources).resolve(
            sample_track, [ProviderKey.APPLE_MUSIC, ProviderKey.DEEZER]
        )
        by_provider = {link.provider: link for link in resolution.links}
        assert by_provider[ProviderKey.APPLE_MUSIC].discovered_from == "musickit_isrc"
        assert by_provider[ProviderKey.DEEZER].url == "https://www.deezer.com/album/2"

    @pytest.mark.asyncio
    async def test_precedence_independent_of_completion_order(self, make_source, sample_track) -> None:
        class SlowSource(ILinkSource):
            def __init__(self, inner: ILinkSource) -> None:
                self._inner = inner

            def get_source_name(self) -> str:
                return self._inner.get_source_name()

            def get_display_name(self) -> str:
                return self._inner.get_display_name()

            def covers(self):
                return self._inner.covers()

            def is_available(self) -> bool:
                return True

            async def find_links(self, isrc: str, storefront: str = "us"):
                await asyncio.sleep(0.01)
                return await self._inner.find_links(isrc, storefront)

        sources = [SlowSource(_deezer(make_source)), _musicfetch(make_source)]
        resolution = await LinkResolver(sources).resolve(sample_track, [ProviderKey.DEEZER])
        assert resolution.links[0].discovered_from == "deezer_isrc"

    @pytest.mark.asyncio
    async def test_aggregator_fills_gap_when_dedicated_misses(self, make_source, sample_track) -> None:
        sources = [_deezer(make_source, results=[]), _musicfetch(make_source)]
        resolution = await LinkResolver(sources).resolve(sample_track, [ProviderKey.DEEZER])
        assert resolution.links[0].url == "https://www.deezer.com/album/mf"
        assert resolution.links[0].discovered_from == "musicfetch_isrc"

    @pytest.mark.asyncio
    async def test_unrequested_providers_discarded(self, make_source, sample_track) -> None:
        resolution = await LinkResolver([_musicfetch(make_source)]).resolve(sample_track, [ProviderKey.TIDAL])
        assert [link.provider for link in resolution.links] == [ProviderKey.TIDAL]

    @pytest.mark.asyncio
    async def test_failure_recorded_and_siblings_survive(self, make_source, sample_track) -> None:
        deezer = _deezer(make_source, error=ProviderUnavailableError("HTTP 503", provider_name="deezer"))
        apple = _apple(make_source)
        resolution = await LinkResolver([apple, deezer]).resolve(
            sample_track, [ProviderKey.APPLE_MUSIC, ProviderKey.DEEZER]
        )
        assert resolution.errors == ["Deezer lookup failed: HTTP 503"]
        by_provider = {link.provider: link for link in resolution.links}
        assert by_provider[ProviderKey.APPLE_MUSIC].quality == LinkQuality.CANONICAL
        assert by_provider[ProviderKey.DEEZER].quality == LinkQuality.SEARCH_FALLBACK

    @pytest.mark.asyncio
    async def test_unexpected_exception_recorded(self, make_source, sample_track) -> None:
        musicfetch = _musicfetch(make_source, error=RuntimeError("boom"))
        resolution = await LinkResolver([musicfetch]).resolve(sample_track, [ProviderKey.TIDAL])
        assert resolution.errors == ["Musicfetch lookup failed: boom"]

    @pytest.mark.asyncio
    async def test_skips_unavailable_and_irrelevant_sources(self, make_source, sample_track) -> None:
        musicfetch = _musicfetch(make_source, available=False)
        apple = _apple(make_source)
        await LinkResolver([apple, musicfetch]).resolve(sample_track, [ProviderKey.DEEZER])
        assert musicfetch.calls == []
        assert apple.calls == []

    @pytest.mark.asyncio
    async def test_storefront_and_normalised_isrc_passed_through(self, make_source) -> None:
        apple = _apple(make_source)
        track = TrackDescriptor(title="x", artist_name="y", isrc="us-um7-22-12345")
        await LinkResolver([apple]).resolve(track, [ProviderKey.APPLE_MUSIC], storefront="gb")
        assert apple.calls == [(ISRC, "gb")]

    @pytest.mark.asyncio
    async def test_empty_request_returns_empty(self, make_source, sample_track) -> None:
        resolution = await LinkResolver([_apple(make_source)]).resolve(sample_track, [])
        assert resolution.links == [] and resolution.errors == []

    @pytest.mark.asyncio
    async def test_bounded_concurrency_still_resolves(self, make_source, sample_track) -> None:
        sources = [_apple(make_source), _deezer(make_source)]
        resolution = await LinkResolver(sources, max_concurrency=1).resolve(
            sample_track, [ProviderKey.APPLE_MUSIC, ProviderKey.DEEZER]
        )
        assert all(link.quality == LinkQuality.CANONICAL for link in resolution.links)


class TestResolveProviderLinks:
    @pytest.mark.asyncio
    async def test_returns_links_only(self, make_source, sample_track) -> None:
        links = await resolve_provider_links(
            sample_track, ["deezer", "tiktok"], [_deezer(make_source)], storefront="us"
        )
        assert [link.provider for link in links] == [ProviderKey.DEEZER, ProviderKey.TIKTOK]
        assert links[1].url.startswith("https://www.tiktok.com/search?q=")
