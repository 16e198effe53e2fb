"""Catalog link sources: Apple Music (MusicKit + iTunes), Deezer, MusicFetch."""

from linkscout.providers.catalog.apple_music_provider import AppleMusicProvider
from linkscout.providers.catalog.deezer_provider import DeezerProvider
from linkscout.providers.catalog.itunes_provider import ITunesSearchProvider
from linkscout.providers.catalog.musicfetch_provider import MusicFetchProvider
from linkscout.providers.catalog.musickit_client import MusicKitClient

__all__ = [
    "AppleMusicProvider",
    "DeezerProvider",
    "ITunesSearchProvider",
    "MusicFetchProvider",
    "MusicKitClient",
]
