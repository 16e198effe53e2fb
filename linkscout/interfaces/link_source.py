"""Abstract base class for catalog link sources.

A link source turns an ISRC into authoritative platform URLs.  Dedicated
sources (Apple Music, Deezer) cover a single platform; the MusicFetch
aggregator covers many.  The resolver in
``linkscout/services/link_resolver.py`` only talks to sources through this
contract, so a new catalog is added by implementing it and registering the
instance in ``linkscout/main.py``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from linkscout.models.links import CanonicalResult
from linkscout.models.providers import ProviderKey


class ILinkSource(ABC):
    """Contract for ISRC-keyed catalog lookups."""

    @abstractmethod
    async def find_links(self, isrc: str, storefront: str = "us") -> list[CanonicalResult]:
        """Look up *isrc* and return every platform link the catalog knows.

        Parameters
        ----------
        isrc:
            Normalised ISRC of the track.
        storefront:
            Two-letter storefront/country code, used by storefront-aware
            catalogs (Apple Music).

        Returns
        -------
        list[CanonicalResult]
            Zero or more hits.  "Not found" is an empty list, never an error.

        Raises
        ------
        linkscout.utils.errors.LinkScoutError
            On transport failures (timeouts, 5xx, rate limiting, bad JSON).
        """

    @abstractmethod
    def covers(self) -> frozenset[ProviderKey]:
        """Return the platforms this source can produce links for."""

    @abstractmethod
    def get_source_name(self) -> str:
        """Return a short machine name (e.g. ``"deezer"``) for logs."""

    @abstractmethod
    def get_display_name(self) -> str:
        """Return the human name used in error strings (e.g. ``"Deezer"``)."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the source is configured and may be queried."""
