"""SQLite-backed link repository.

Persists releases, tracks and discovered provider links to a local SQLite
database (default ``data/linkscout.db``) using ``aiosqlite`` for async I/O.
A ``(release_id, provider)`` pair holds one link; writing it again replaces
the URL, external id and metadata and bumps ``updated_at``.

JSON columns (``metadata``) are stored as text and decoded on read.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import aiosqlite
import structlog

from linkscout.interfaces.link_repository import ILinkRepository
from linkscout.models.catalog import ReleaseRecord, TrackRecord
from linkscout.models.links import ProviderLinkRecord
from linkscout.utils.errors import PersistenceError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/linkscout.db")

_CREATE_RELEASES_TABLE_SQL = """\
CREATE TABLE IF NOT EXISTS releases (
    id           TEXT PRIMARY KEY,
    title        TEXT NOT NULL,
    artist_name  TEXT,
    metadata     TEXT NOT NULL DEFAULT '{}',
    created_at   TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
);
"""

_CREATE_TRACKS_TABLE_SQL = """\
CREATE TABLE IF NOT EXISTS tracks (
    id           TEXT PRIMARY KEY,
    release_id   TEXT    NOT NULL REFERENCES releases(id),
    title        TEXT    NOT NULL,
    track_number INTEGER NOT NULL DEFAULT 1,
    disc_number  INTEGER NOT NULL DEFAULT 1,
    isrc         TEXT,
    duration_ms  INTEGER
);
"""

_CREATE_PROVIDER_LINKS_TABLE_SQL = """\
CREATE TABLE IF NOT EXISTS provider_links (
    id           INTEGER PRIMARY KEY AUTOINCREMENT,
    release_id   TEXT NOT NULL REFERENCES releases(id),
    provider     TEXT NOT NULL,
    url          TEXT NOT NULL,
    external_id  TEXT,
    source_type  TEXT NOT NULL DEFAULT 'ingested',
    metadata     TEXT NOT NULL DEFAULT '{}',
    created_at   TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now')),
    updated_at   TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now')),
    UNIQUE (release_id, provider)
);
"""

_CREATE_INDICES_SQL = [
    "CREATE INDEX IF NOT EXISTS idx_tracks_release ON tracks(release_id);",
    "CREATE INDEX IF NOT EXISTS idx_tracks_isrc ON tracks(isrc);",
    "CREATE INDEX IF NOT EXISTS idx_provider_links_release ON provider_links(release_id);",
]

_UPSERT_RELEASE_SQL = """\
INSERT INTO releases (id, title, artist_name, metadata)
VALUES (?, ?, ?, ?)
ON CONFLICT(id) DO UPDATE SET
    title = excluded.title,
    artist_name = excluded.artist_name,
    metadata = excluded.metadata;
"""

_UPSERT_TRACK_SQL = """\
INSERT INTO tracks (id, release_id, title, track_number, disc_number, isrc, duration_ms)
VALUES (?, ?, ?, ?, ?, ?, ?)
ON CONFLICT(id) DO UPDATE SET
    release_id = excluded.release_id,
    title = excluded.title,
    track_number = excluded.track_number,
    disc_number = excluded.disc_number,
    isrc = excluded.isrc,
    duration_ms = excluded.duration_ms;
"""

_UPSERT_PROVIDER_LINK_SQL = """\
INSERT INTO provider_links (release_id, provider, url, external_id, source_type, metadata)
VALUES (?, ?, ?, ?, ?, ?)
ON CONFLICT(release_id, provider) DO UPDATE SET
    url = excluded.url,
    external_id = excluded.external_id,
    source_type = excluded.source_type,
    metadata = excluded.metadata,
    updated_at = strftime('%Y-%m-%dT%H:%M:%fZ', 'now');
"""

_SELECT_TRACKS_SQL = """\
SELECT id, release_id, title, track_number, disc_number, isrc, duration_ms
FROM tracks
WHERE release_id = ?
ORDER BY disc_number, track_number;
"""

_SELECT_RELEASE_SQL = """\
SELECT id, title, artist_name, metadata
FROM releases
WHERE id = ?;
"""

_SELECT_PROVIDER_LINKS_SQL = """\
SELECT release_id, provider, url, external_id, source_type, metadata
FROM provider_links
WHERE release_id = ?
ORDER BY provider;
"""


def _decode_json(raw: str | None) -> dict[str, Any]:
    if not raw:
        return {}
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("sqlite_repository_bad_metadata_json")
        return {}
    return value if isinstance(value, dict) else {}


class SQLiteLinkRepository(ILinkRepository):
    """SQLite-backed release, track and provider-link persistence."""

    def __init__(self, db_path: str | Path = _DEFAULT_DB_PATH) -> None:
        self._db_path = Path(db_path)

    @property
    def db_path(self) -> Path:
        return self._db_path

    async def initialize(self) -> None:
        """Create the releases, tracks and provider_links tables if they don't exist."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                await db.execute(_CREATE_RELEASES_TABLE_SQL)
                await db.execute(_CREATE_TRACKS_TABLE_SQL)
                await db.execute(_CREATE_PROVIDER_LINKS_TABLE_SQL)
                for idx_sql in _CREATE_INDICES_SQL:
                    await db.execute(idx_sql)
                await db.commit()
        except aiosqlite.Error as exc:
            raise PersistenceError(message=f"Could not initialise database: {exc}", provider_name="sqlite") from exc
        logger.info("link_repository_initialized", path=str(self._db_path))

    # ------------------------------------------------------------------
    # Catalog import helpers
    # ------------------------------------------------------------------

    async def add_release(self, release: ReleaseRecord) -> None:
        await self._write(
            _UPSERT_RELEASE_SQL,
            (release.id, release.title, release.artist_name, json.dumps(release.metadata)),
        )

    async def add_track(self, track: TrackRecord) -> None:
        await self._write(
            _UPSERT_TRACK_SQL,
            (
                track.id,
                track.release_id,
                track.title,
                track.track_number,
                track.disc_number,
                track.isrc,
                track.duration_ms,
            ),
        )

    # ------------------------------------------------------------------
    # ILinkRepository implementation
    # ------------------------------------------------------------------

    async def get_tracks_for_release(self, release_id: str) -> list[TrackRecord]:
        rows = await self._read(_SELECT_TRACKS_SQL, (release_id,))
        return [
            TrackRecord(
                id=row["id"],
                release_id=row["release_id"],
                title=row["title"],
                track_number=row["track_number"],
                disc_number=row["disc_number"],
                isrc=row["isrc"],
                duration_ms=row["duration_ms"],
            )
            for row in rows
        ]

    async def get_release_by_id(self, release_id: str) -> ReleaseRecord | None:
        rows = await self._read(_SELECT_RELEASE_SQL, (release_id,))
        if not rows:
            return None
        row = rows[0]
        return ReleaseRecord(
            id=row["id"],
            title=row["title"],
            artist_name=row["artist_name"],
            metadata=_decode_json(row["metadata"]),
        )

    async def upsert_provider_link(self, record: ProviderLinkRecord) -> None:
        await self._write(
            _UPSERT_PROVIDER_LINK_SQL,
            (
                record.release_id,
                record.provider.value,
                record.url,
                record.external_id,
                record.source_type,
                json.dumps(record.metadata, default=str),
            ),
        )
        logger.debug(
            "provider_link_upserted",
            release_id=record.release_id,
            provider=record.provider.value,
        )

    async def get_provider_links(self, release_id: str) -> list[ProviderLinkRecord]:
        rows = await self._read(_SELECT_PROVIDER_LINKS_SQL, (release_id,))
        return [
            ProviderLinkRecord(
                release_id=row["release_id"],
                provider=row["provider"],
                url=row["url"],
                external_id=row["external_id"],
                source_type=row["source_type"],
                metadata=_decode_json(row["metadata"]),
            )
            for row in rows
        ]

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _write(self, sql: str, params: tuple) -> None:
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                await db.execute(sql, params)
                await db.commit()
        except aiosqlite.Error as exc:
            logger.error("sqlite_write_failed", path=str(self._db_path), error=str(exc))
            raise PersistenceError(message=str(exc), provider_name="sqlite") from exc

    async def _read(self, sql: str, params: tuple) -> list[aiosqlite.Row]:
        try:
            async with aiosqlite.connect(str(self._db_path)) as db:
                db.row_factory = aiosqlite.Row
                cursor = await db.execute(sql, params)
                return list(await cursor.fetchall())
        except aiosqlite.Error as exc:
            logger.error("sqlite_read_failed", path=str(self._db_path), error=str(exc))
            raise PersistenceError(message=str(exc), provider_name="sqlite") from exc
