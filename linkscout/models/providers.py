"""Streaming-platform vocabulary and its static metadata table.

Every platform LinkScout knows about is a member of :class:`ProviderKey`.
Per-platform facts (display name, search URL template, MusicFetch service
id) live in one table, :data:`PROVIDER_METADATA`, keyed by that enum, so
adding a platform means adding one enum member and one table row.

Search URL templates use ``str.format`` placeholders:

    {query}       -- query string, ``quote_plus``-encoded (for ``?q=`` params)
    {path_query}  -- query string, ``quote``-encoded with no safe chars (for path segments)
    {storefront}  -- lower-case Apple-style storefront code ("us", "gb", ...)
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class ProviderKey(str, Enum):  # noqa: UP042
    """Closed set of streaming platforms a release can link to."""

    APPLE_MUSIC = "apple_music"
    SPOTIFY = "spotify"
    YOUTUBE = "youtube"
    YOUTUBE_MUSIC = "youtube_music"
    SOUNDCLOUD = "soundcloud"
    DEEZER = "deezer"
    TIDAL = "tidal"
    AMAZON_MUSIC = "amazon_music"
    PANDORA = "pandora"
    NAPSTER = "napster"
    AUDIOMACK = "audiomack"
    QOBUZ = "qobuz"
    ANGHAMI = "anghami"
    BOOMPLAY = "boomplay"
    IHEARTRADIO = "iheartradio"
    TIKTOK = "tiktok"


class ProviderInfo(BaseModel):
    """Static facts about one streaming platform."""

    model_config = ConfigDict(frozen=True)

    key: ProviderKey
    display_name: str
    search_url_template: str
    musicfetch_service: str | None = None   # service id in MusicFetch responses
    discoverable: bool = True               # False => never in default discovery


PROVIDER_METADATA: dict[ProviderKey, ProviderInfo] = {
    ProviderKey.APPLE_MUSIC: ProviderInfo(
        key=ProviderKey.APPLE_MUSIC,
        display_name="Apple Music",
        search_url_template="https://music.apple.com/{storefront}/search?term={query}",
        musicfetch_service="appleMusic",
    ),
    # Spotify links come from the initial catalog import, never from discovery.
    ProviderKey.SPOTIFY: ProviderInfo(
        key=ProviderKey.SPOTIFY,
        display_name="Spotify",
        search_url_template="https://open.spotify.com/search/{path_query}",
        musicfetch_service="spotify",
        discoverable=False,
    ),
    ProviderKey.YOUTUBE: ProviderInfo(
        key=ProviderKey.YOUTUBE,
        display_name="YouTube",
        search_url_template="https://www.youtube.com/results?search_query={query}",
        musicfetch_service="youtube",
    ),
    ProviderKey.YOUTUBE_MUSIC: ProviderInfo(
        key=ProviderKey.YOUTUBE_MUSIC,
        display_name="YouTube Music",
        search_url_template="https://music.youtube.com/search?q={query}",
        musicfetch_service="youtubeMusic",
    ),
    ProviderKey.SOUNDCLOUD: ProviderInfo(
        key=ProviderKey.SOUNDCLOUD,
        display_name="SoundCloud",
        search_url_template="https://soundcloud.com/search?q={query}",
        musicfetch_service="soundcloud",
    ),
    ProviderKey.DEEZER: ProviderInfo(
        key=ProviderKey.DEEZER,
        display_name="Deezer",
        search_url_template="https://www.deezer.com/search/{path_query}",
        musicfetch_service="deezer",
    ),
    ProviderKey.TIDAL: ProviderInfo(
        key=ProviderKey.TIDAL,
        display_name="Tidal",
        search_url_template="https://listen.tidal.com/search?q={query}",
        musicfetch_service="tidal",
    ),
    ProviderKey.AMAZON_MUSIC: ProviderInfo(
        key=ProviderKey.AMAZON_MUSIC,
        display_name="Amazon Music",
        search_url_template="https://music.amazon.com/search/{path_query}",
        musicfetch_service="amazonMusic",
    ),
    ProviderKey.PANDORA: ProviderInfo(
        key=ProviderKey.PANDORA,
        display_name="Pandora",
        search_url_template="https://www.pandora.com/search/{path_query}/all",
        musicfetch_service="pandora",
    ),
    ProviderKey.NAPSTER: ProviderInfo(
        key=ProviderKey.NAPSTER,
        display_name="Napster",
        search_url_template="https://play.napster.com/search?query={query}",
        musicfetch_service="napster",
    ),
    ProviderKey.AUDIOMACK: ProviderInfo(
        key=ProviderKey.AUDIOMACK,
        display_name="Audiomack",
        search_url_template="https://audiomack.com/search?q={query}",
        musicfetch_service="audiomack",
    ),
    ProviderKey.QOBUZ: ProviderInfo(
        key=ProviderKey.QOBUZ,
        display_name="Qobuz",
        search_url_template="https://www.qobuz.com/{storefront}-en/search?q={query}",
        musicfetch_service="qobuz",
    ),
    ProviderKey.ANGHAMI: ProviderInfo(
        key=ProviderKey.ANGHAMI,
        display_name="Anghami",
        search_url_template="https://play.anghami.com/search/{path_query}",
        musicfetch_service="anghami",
    ),
    ProviderKey.BOOMPLAY: ProviderInfo(
        key=ProviderKey.BOOMPLAY,
        display_name="Boomplay",
        search_url_template="https://www.boomplay.com/search/default/{path_query}",
        musicfetch_service="boomplay",
    ),
    ProviderKey.IHEARTRADIO: ProviderInfo(
        key=ProviderKey.IHEARTRADIO,
        display_name="iHeartRadio",
        search_url_template="https://www.iheart.com/search/?q={query}",
        musicfetch_service="iHeartRadio",
    ),
    ProviderKey.TIKTOK: ProviderInfo(
        key=ProviderKey.TIKTOK,
        display_name="TikTok",
        search_url_template="https://www.tiktok.com/search?q={query}",
        musicfetch_service="tiktok",
    ),
}

# Every platform except Spotify, in enum order.
DEFAULT_DISCOVERY_PROVIDERS: tuple[ProviderKey, ...] = tuple(
    key for key in ProviderKey if PROVIDER_METADATA[key].discoverable
)

_MUSICFETCH_SERVICE_INDEX: dict[str, ProviderKey] = {
    info.musicfetch_service.lower(): key
    for key, info in PROVIDER_METADATA.items()
    if info.musicfetch_service
}


def get_provider_info(provider: ProviderKey | str) -> ProviderInfo:
    """Return the metadata row for *provider* (enum member or its value)."""
    return PROVIDER_METADATA[ProviderKey(provider)]


def display_name(provider: ProviderKey | str) -> str:
    """Human-readable platform name, falling back to the raw value for unknown keys."""
    try:
        return get_provider_info(provider).display_name
    except ValueError:
        return str(provider)


def parse_provider_key(value: ProviderKey | str) -> ProviderKey | None:
    """Convert *value* to a :class:`ProviderKey`, or ``None`` if unknown."""
    try:
        return ProviderKey(value)
    except ValueError:
        return None


def provider_for_musicfetch_service(service_id: str) -> ProviderKey | None:
    """Map a MusicFetch service id (``"amazonMusic"``) to a :class:`ProviderKey`."""
    return _MUSICFETCH_SERVICE_INDEX.get(service_id.lower())
