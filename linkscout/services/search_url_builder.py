"""Search-page URLs for platforms no catalog lookup resolved.

Pure and deterministic: the same track, platform and storefront always give
the same URL, and every :class:`ProviderKey` has a template, so this never
fails.  The query is ``"artist title"``; with neither part present it falls
back to the ISRC.
"""

from __future__ import annotations

from urllib.parse import quote, quote_plus

from linkscout.models.catalog import TrackDescriptor
from linkscout.models.providers import ProviderKey, get_provider_info
from linkscout.utils.text_normalizer import build_search_query


def build_search_url(
    provider: ProviderKey | str,
    track: TrackDescriptor,
    *,
    storefront: str = "us",
) -> str:
    """Return the search URL for *track* on *provider*.

    Args:
        provider: Platform to build the URL for.
        track: Track whose artist and title form the query.
        storefront: Country code for storefront-aware platforms
            (Apple Music, Qobuz).

    Returns:
        Absolute ``https://`` URL.
    """
    info = get_provider_info(provider)
    query = build_search_query(track.artist_name, track.title, track.isrc)
    return info.search_url_template.format(
        query=quote_plus(query),
        path_query=quote(query, safe=""),
        storefront=(storefront or "us").lower(),
    )
