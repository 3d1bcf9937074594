"""SQLite storage adapter.

Implements the core ClassificationStorePort using a simple SQLite database.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from datetime import datetime, timezone
from typing import Optional

from core.models import CatalogEntry, Classification, ClassificationRecord

LOGGER = logging.getLogger(__name__)


def _to_epoch(value: datetime) -> int:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp())


def _from_epoch(value: int) -> datetime:
    return datetime.fromtimestamp(int(value), tz=timezone.utc)


class SQLiteClassificationStore:
    """Thin SQLite wrapper that satisfies the ClassificationStorePort contract."""

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path
        # Writers are serialized; readers open their own connections.
        self._write_lock = threading.Lock()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def init_db(self) -> None:
        """Create tables if they do not exist.

        Tables:
        - songs: one row per announced catalog entry
        - problematic_urls: download links flagged as broken
        """

        with self._write_lock, self._connect() as conn:
            conn.execute("PRAGMA journal_mode=WAL")
            # songs is keyed by the remote entry id. Only modified_date is ever
            # updated; artist/title/album/url keep their first-seen values.
            # Dates are stored as unix seconds.
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS songs (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    song_id INTEGER UNIQUE NOT NULL,
                    artist TEXT NOT NULL,
                    title TEXT NOT NULL,
                    album TEXT NOT NULL,
                    modified_date INTEGER NOT NULL,
                    creation_date INTEGER NOT NULL,
                    url TEXT NOT NULL
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS problematic_urls (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    url TEXT UNIQUE NOT NULL
                )
                """
            )
        LOGGER.info("Classification database initialized at %s", self._db_path)

    def classify(self, entry_id: int, remote_modified_at: datetime) -> Classification:
        """Compare a remote modification time with the stored one."""

        with self._connect() as conn:
            row = conn.execute(
                "SELECT modified_date FROM songs WHERE song_id = ?",
                (entry_id,),
            ).fetchone()
        if row is None:
            return Classification.NOT_HANDLED
        if _to_epoch(remote_modified_at) > int(row["modified_date"]):
            return Classification.OUTDATED
        return Classification.HANDLED

    def insert(self, entry: CatalogEntry) -> None:
        """Insert an entry unless one with the same id already exists."""

        with self._write_lock, self._connect() as conn:
            conn.execute(
                """
                INSERT OR IGNORE INTO songs (
                    song_id,
                    artist,
                    title,
                    album,
                    modified_date,
                    creation_date,
                    url
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    entry.id,
                    entry.artist or "",
                    entry.title or "",
                    entry.album or "",
                    _to_epoch(entry.modified_at),
                    _to_epoch(entry.created_at),
                    entry.url or "",
                ),
            )

    def update_modified_at(self, entry_id: int, modified_at: datetime) -> None:
        """Overwrite the stored modification time; missing ids are ignored."""

        with self._write_lock, self._connect() as conn:
            conn.execute(
                "UPDATE songs SET modified_date = ? WHERE song_id = ?",
                (_to_epoch(modified_at), entry_id),
            )

    def mark_problematic(self, url: str) -> None:
        with self._write_lock, self._connect() as conn:
            conn.execute("INSERT OR IGNORE INTO problematic_urls (url) VALUES (?)", (url,))

    def is_problematic(self, url: str) -> bool:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT 1 FROM problematic_urls WHERE url = ?",
                (url,),
            ).fetchone()
        return row is not None

    def get_record(self, entry_id: int) -> Optional[ClassificationRecord]:
        """Return the stored record for an entry id, if any."""

        with self._connect() as conn:
            row = conn.execute(
                """
                SELECT song_id, artist, title, album, modified_date, creation_date, url
                FROM songs WHERE song_id = ?
                """,
                (entry_id,),
            ).fetchone()
        if row is None:
            return None
        return ClassificationRecord(
            id=int(row["song_id"]),
            artist=row["artist"],
            title=row["title"],
            album=row["album"],
            modified_at=_from_epoch(row["modified_date"]),
            created_at=_from_epoch(row["creation_date"]),
            url=row["url"],
        )
