"""Catalog-side models: the tracks and releases link discovery works from.

These mirror rows in the persistence layer (see
``linkscout/providers/repository/``).  :class:`TrackDescriptor` is the
lookup-facing projection of a track: just enough identity (title, artist,
ISRC) for catalog APIs and search URLs.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class TrackDescriptor(BaseModel):
    """Immutable identity of one track, as handed to every catalog lookup.

    ``isrc`` is the only key the catalog lookups use; ``title`` and
    ``artist_name`` feed the search-URL fallbacks.
    """

    model_config = ConfigDict(frozen=True)

    title: str
    artist_name: str = ""
    isrc: str | None = None
    duration_ms: int | None = None


class TrackRecord(BaseModel):
    """A persisted track row belonging to a release."""

    model_config = ConfigDict(frozen=True)

    id: str
    release_id: str
    title: str
    track_number: int = 1
    disc_number: int = 1
    isrc: str | None = None
    duration_ms: int | None = None

    def to_descriptor(self, artist_name: str = "") -> TrackDescriptor:
        """Project this row into a :class:`TrackDescriptor` for lookups."""
        return TrackDescriptor(
            title=self.title,
            artist_name=artist_name,
            isrc=self.isrc,
            duration_ms=self.duration_ms,
        )


class ReleaseRecord(BaseModel):
    """A persisted release (album, EP or single).

    ``metadata`` holds whatever the catalog import stored alongside the row;
    Spotify imports put the credited artists under ``spotifyArtists``.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    artist_name: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def primary_artist_name(self) -> str:
        """Best available artist name for search context.

        Explicit ``artist_name`` first, then the first entry of
        ``metadata["spotifyArtists"]``, else an empty string.
        """
        if self.artist_name:
            return self.artist_name
        artists = self.metadata.get("spotifyArtists") if isinstance(self.metadata, dict) else None
        if isinstance(artists, list) and artists:
            first = artists[0]
            if isinstance(first, dict):
                name = first.get("name")
                if isinstance(name, str):
                    return name
        return ""
