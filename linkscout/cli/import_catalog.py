"""``import-catalog``: load releases and tracks from a JSON file.

Accepted shapes (the second is a bare list of releases)::

    {"releases": [{"id": "rel-1", "title": "...", "artist_name": "...",
                   "metadata": {...},
                   "tracks": [{"id": "trk-1", "title": "...", "isrc": "...",
                               "track_number": 1, "disc_number": 1}]}]}

    [{"id": "rel-1", ...}]

Tracks inherit ``release_id`` from their enclosing release.  Importing the
same file twice updates rows in place.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from linkscout.models.catalog import ReleaseRecord, TrackRecord
from linkscout.providers.repository.sqlite_repository import SQLiteLinkRepository
from linkscout.utils.errors import ConfigurationError, LinkScoutError
from linkscout.utils.logging import get_logger

_logger = get_logger(__name__)


def parse_catalog(data: Any) -> tuple[list[ReleaseRecord], list[TrackRecord]]:
    """Validate catalog JSON into release and track records.

    Raises
    ------
    ConfigurationError
        If the document is not one of the accepted shapes or a row fails
        validation.
    """
    raw_releases = data.get("releases") if isinstance(data, dict) else data
    if not isinstance(raw_releases, list):
        raise ConfigurationError(message="Catalog must be a list of releases or {'releases': [...]}")

    releases: list[ReleaseRecord] = []
    tracks: list[TrackRecord] = []
    try:
        for raw in raw_releases:
            if not isinstance(raw, dict):
                raise ConfigurationError(message=f"Release entry is not an object: {raw!r}")
            raw_tracks = raw.get("tracks") or []
            if not isinstance(raw_tracks, list):
                raise ConfigurationError(message=f"Tracks of release {raw.get('id')!r} must be a list")
            release = ReleaseRecord.model_validate({k: v for k, v in raw.items() if k != "tracks"})
            releases.append(release)
            for position, raw_track in enumerate(raw_tracks, start=1):
                if not isinstance(raw_track, dict):
                    raise ConfigurationError(message=f"Track entry is not an object: {raw_track!r}")
                track_data = {"track_number": position, **raw_track, "release_id": release.id}
                tracks.append(TrackRecord.model_validate(track_data))
    except ValidationError as exc:
        raise ConfigurationError(message=f"Invalid catalog entry: {exc}") from exc
    return releases, tracks


def load_catalog_file(path: str | Path) -> tuple[list[ReleaseRecord], list[TrackRecord]]:
    with open(path, encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as exc:
            raise ConfigurationError(message=f"{path} is not valid JSON: {exc}") from exc
    return parse_catalog(data)


async def run_import(args: argparse.Namespace) -> int:
    """Handle the ``import-catalog`` subcommand.  Returns the exit code."""
    catalog_path = Path(args.file)
    if not catalog_path.is_file():
        print(f"Error: File not found: {catalog_path}", file=sys.stderr)
        return 1

    try:
        releases, tracks = load_catalog_file(catalog_path)
        repository = SQLiteLinkRepository(args.db)
        await repository.initialize()
        for release in releases:
            await repository.add_release(release)
        for track in tracks:
            await repository.add_track(track)
    except LinkScoutError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    _logger.info("catalog_imported", releases=len(releases), tracks=len(tracks), db=str(args.db))
    print(f"Imported {len(releases)} release(s) and {len(tracks)} track(s) into {args.db}")
    return 0
