"""Abstract base class for the link persistence repository.

The discovery pipeline reads tracks and releases through this contract and
writes one :class:`ProviderLinkRecord` per discovered platform.  A
``(release_id, provider)`` pair holds at most one link; writing the same
pair again replaces it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from linkscout.models.catalog import ReleaseRecord, TrackRecord
from linkscout.models.links import ProviderLinkRecord


class ILinkRepository(ABC):
    """Contract for reading catalog rows and upserting provider links."""

    @abstractmethod
    async def get_tracks_for_release(self, release_id: str) -> list[TrackRecord]:
        """Return the release's tracks ordered by disc number then track number.

        An unknown release yields an empty list.
        """

    @abstractmethod
    async def get_release_by_id(self, release_id: str) -> ReleaseRecord | None:
        """Return the release row, or ``None`` if it does not exist."""

    @abstractmethod
    async def upsert_provider_link(self, record: ProviderLinkRecord) -> None:
        """Insert or replace the link for ``(record.release_id, record.provider)``.

        Raises
        ------
        linkscout.utils.errors.PersistenceError
            If the write fails.
        """

    @abstractmethod
    async def get_provider_links(self, release_id: str) -> list[ProviderLinkRecord]:
        """Return every stored link for *release_id*."""
