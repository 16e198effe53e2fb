"""Dict-backed link repository for tests and dry runs."""

from __future__ import annotations

from linkscout.interfaces.link_repository import ILinkRepository
from linkscout.models.catalog import ReleaseRecord, TrackRecord
from linkscout.models.links import ProviderLinkRecord
from linkscout.models.providers import ProviderKey


class MemoryLinkRepository(ILinkRepository):
    """In-process repository.  Nothing survives the process."""

    def __init__(
        self,
        releases: list[ReleaseRecord] | None = None,
        tracks: list[TrackRecord] | None = None,
    ) -> None:
        self._releases: dict[str, ReleaseRecord] = {}
        self._tracks: dict[str, dict[str, TrackRecord]] = {}
        self._links: dict[str, dict[ProviderKey, ProviderLinkRecord]] = {}
        for release in releases or []:
            self.add_release(release)
        for track in tracks or []:
            self.add_track(track)

    def add_release(self, release: ReleaseRecord) -> None:
        self._releases[release.id] = release

    def add_track(self, track: TrackRecord) -> None:
        self._tracks.setdefault(track.release_id, {})[track.id] = track

    async def get_tracks_for_release(self, release_id: str) -> list[TrackRecord]:
        tracks = self._tracks.get(release_id, {}).values()
        return sorted(tracks, key=lambda t: (t.disc_number, t.track_number))

    async def get_release_by_id(self, release_id: str) -> ReleaseRecord | None:
        return self._releases.get(release_id)

    async def upsert_provider_link(self, record: ProviderLinkRecord) -> None:
        self._links.setdefault(record.release_id, {})[record.provider] = record

    async def get_provider_links(self, release_id: str) -> list[ProviderLinkRecord]:
        return list(self._links.get(release_id, {}).values())
