"""
Thread-safe SQLite database holding the local library.

This is the device's own copy of the library. Sync reads it in full on
export and proposes inserts/updates on import; it never deletes rows.

Schema:
    watch_history:          One row per watched video (video_id PK)
    watch_positions:        One resume position per video (video_id PK)
    playlist_bookmarks:     One row per bookmarked remote playlist (playlist_id PK)
    search_history:         One row per distinct query (query PK)
    subscription_groups:    One row per group name (name PK, channels JSON array)
    subscriptions:          One row per followed channel (channel_id PK)
    local_playlists:        User playlists (id AUTOINCREMENT, device-local)
    local_playlist_items:   Playlist videos (id AUTOINCREMENT,
                            UNIQUE(playlist_id, video_id))

Flat tables are keyed by the record's merge key, so writing a row with an
existing key replaces it (upsert). Playlist and playlist-item ids are
sequence numbers assigned here and are meaningless on other devices.

Usage:
    db = Database(output_dir / "database.db")

    db.upsert_rows("watch_positions", [{"video_id": "abc", "position": 50}])
    playlist_id = db.find_playlist_id("Road Trip") or db.create_playlist({"name": "Road Trip"})
    db.add_playlist_item(playlist_id, {"video_id": "abc", "title": "..."})
"""

import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Generator

from snapshot_sync.core.exceptions import DatabaseError, DuplicateVideoError


DATABASE_VERSION = 1


_SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY
);

CREATE TABLE IF NOT EXISTS watch_history (
    video_id TEXT PRIMARY KEY,
    title TEXT,
    upload_date TEXT,
    uploader TEXT,
    uploader_url TEXT,
    uploader_avatar TEXT,
    thumbnail_url TEXT,
    duration INTEGER
);

CREATE TABLE IF NOT EXISTS watch_positions (
    video_id TEXT PRIMARY KEY,
    position INTEGER NOT NULL DEFAULT 0
);

CREATE TABLE IF NOT EXISTS playlist_bookmarks (
    playlist_id TEXT PRIMARY KEY,
    playlist_name TEXT,
    thumbnail_url TEXT,
    uploader TEXT,
    uploader_url TEXT,
    uploader_avatar TEXT,
    videos INTEGER
);

CREATE TABLE IF NOT EXISTS search_history (
    query TEXT PRIMARY KEY
);

CREATE TABLE IF NOT EXISTS subscription_groups (
    name TEXT PRIMARY KEY,
    channels TEXT,  -- JSON array of channel ids
    "index" INTEGER
);

CREATE TABLE IF NOT EXISTS subscriptions (
    channel_id TEXT PRIMARY KEY,
    name TEXT,
    avatar TEXT,
    verified INTEGER DEFAULT 0,
    url TEXT
);

CREATE TABLE IF NOT EXISTS local_playlists (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    thumbnail_url TEXT,
    description TEXT
);

CREATE TABLE IF NOT EXISTS local_playlist_items (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    playlist_id INTEGER NOT NULL,
    video_id TEXT NOT NULL,
    title TEXT,
    upload_date TEXT,
    uploader TEXT,
    uploader_url TEXT,
    uploader_avatar TEXT,
    thumbnail_url TEXT,
    duration INTEGER,
    FOREIGN KEY (playlist_id) REFERENCES local_playlists(id) ON DELETE CASCADE,
    UNIQUE(playlist_id, video_id)
);

CREATE INDEX IF NOT EXISTS idx_local_playlists_name ON local_playlists(name);
CREATE INDEX IF NOT EXISTS idx_local_playlist_items_playlist ON local_playlist_items(playlist_id);
"""

# Tables written with insert-or-replace, keyed by their primary key column.
FLAT_TABLES = {
    "watch_history": "video_id",
    "watch_positions": "video_id",
    "playlist_bookmarks": "playlist_id",
    "search_history": "query",
    "subscription_groups": "name",
    "subscriptions": "channel_id",
}

_PLAYLIST_COLUMNS = ("name", "thumbnail_url", "description")
_PLAYLIST_ITEM_COLUMNS = (
    "video_id", "title", "upload_date", "uploader", "uploader_url",
    "uploader_avatar", "thumbnail_url", "duration",
)


class Database:
    """
    Thread-safe SQLite database for the local library.

    Uses a single persistent connection with thread locking for safety.
    All public methods acquire self._lock before executing, so the sync
    runner's worker thread and the CLI thread can share one instance.
    """

    def __init__(self, db_path: Path) -> None:
        self.db_path = db_path
        self._lock = threading.Lock()
        self._conn: sqlite3.Connection | None = None

        if not db_path.parent.exists():
            raise DatabaseError(
                f"Parent directory does not exist: {db_path.parent}",
                details={"path": str(db_path.parent)}
            )

        try:
            self._init_database()
        except sqlite3.Error as e:
            raise DatabaseError(
                f"Failed to initialize database: {e}",
                details={"path": str(db_path)}
            ) from e

    @contextmanager
    def _get_connection(self) -> Generator[sqlite3.Connection, None, None]:
        """
        Get the persistent database connection, translating sqlite errors.

        The connection is created once and reused for all operations.
        Integrity errors propagate unchanged so callers can classify them.
        """
        if self._conn is None:
            self._conn = sqlite3.connect(
                str(self.db_path),
                timeout=30.0,
                check_same_thread=False  # We handle thread safety with _lock
            )
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA foreign_keys = ON")
            self._conn.execute("PRAGMA journal_mode = WAL")
        try:
            yield self._conn
        except sqlite3.IntegrityError:
            self._conn.rollback()
            raise
        except sqlite3.Error as e:
            self._conn.rollback()
            raise DatabaseError(
                f"Database operation failed: {e}",
                details={"path": str(self.db_path), "original_error": str(e)}
            ) from e

    def close(self) -> None:
        """Close the database connection."""
        with self._lock:
            if self._conn is not None:
                self._conn.close()
                self._conn = None

    def _init_database(self) -> None:
        with self._get_connection() as conn:
            conn.executescript(_SCHEMA_SQL)

            cursor = conn.execute("SELECT version FROM schema_version LIMIT 1")
            row = cursor.fetchone()

            if row is None:
                conn.execute("INSERT INTO schema_version (version) VALUES (?)", (DATABASE_VERSION,))
            elif row[0] != DATABASE_VERSION:
                raise DatabaseError(
                    f"Database version mismatch: expected {DATABASE_VERSION}, got {row[0]}",
                    details={"expected": DATABASE_VERSION, "actual": row[0]}
                )
            conn.commit()

    @staticmethod
    def _check_flat_table(table: str) -> None:
        if table not in FLAT_TABLES:
            raise DatabaseError(f"Unknown table: {table}", details={"table": table})

    # =========================================================================
    # Flat collections
    # =========================================================================

    def fetch_all(self, table: str) -> list[dict[str, Any]]:
        """Return every row of a flat table in insertion order."""
        self._check_flat_table(table)
        with self._lock:
            with self._get_connection() as conn:
                cursor = conn.execute(f"SELECT * FROM {table} ORDER BY rowid")
                return [dict(row) for row in cursor.fetchall()]

    def upsert_rows(self, table: str, rows: list[dict[str, Any]]) -> int:
        """
        Insert or replace rows of a flat table in one transaction.

        A row whose primary key already exists replaces the stored row.

        Returns:
            Number of rows written.
        """
        self._check_flat_table(table)
        if not rows:
            return 0

        columns = list(rows[0].keys())
        column_sql = ", ".join(f'"{column}"' for column in columns)
        placeholders = ", ".join("?" for _ in columns)

        with self._lock:
            with self._get_connection() as conn:
                try:
                    conn.executemany(
                        f"INSERT OR REPLACE INTO {table} ({column_sql}) VALUES ({placeholders})",
                        [tuple(row.get(column) for column in columns) for row in rows]
                    )
                except sqlite3.IntegrityError as e:
                    conn.rollback()
                    raise DatabaseError(
                        f"Failed to write {table}: {e}",
                        details={"table": table, "original_error": str(e)}
                    ) from e
                conn.commit()
        return len(rows)

    def count(self, table: str) -> int:
        if table not in FLAT_TABLES and table not in ("local_playlists", "local_playlist_items"):
            raise DatabaseError(f"Unknown table: {table}", details={"table": table})
        with self._lock:
            with self._get_connection() as conn:
                return conn.execute(f"SELECT COUNT(*) FROM {table}").fetchone()[0]

    # =========================================================================
    # Local playlists
    # =========================================================================

    def get_playlists(self) -> list[dict[str, Any]]:
        with self._lock:
            with self._get_connection() as conn:
                cursor = conn.execute("SELECT * FROM local_playlists ORDER BY id")
                return [dict(row) for row in cursor.fetchall()]

    def get_playlist_items(self, playlist_id: int) -> list[dict[str, Any]]:
        """Return the videos of a playlist in the order they were added."""
        with self._lock:
            with self._get_connection() as conn:
                cursor = conn.execute(
                    "SELECT * FROM local_playlist_items WHERE playlist_id = ? ORDER BY id",
                    (playlist_id,)
                )
                return [dict(row) for row in cursor.fetchall()]

    def find_playlist_id(self, name: str) -> int | None:
        """Return the id of the oldest playlist with this exact name, if any."""
        with self._lock:
            with self._get_connection() as conn:
                cursor = conn.execute(
                    "SELECT id FROM local_playlists WHERE name = ? ORDER BY id LIMIT 1",
                    (name,)
                )
                row = cursor.fetchone()
                return row[0] if row else None

    def create_playlist(self, playlist: dict[str, Any]) -> int:
        """
        Create a playlist and return its newly assigned id.

        Any 'id' in the given row is ignored.
        """
        with self._lock:
            with self._get_connection() as conn:
                cursor = conn.execute(
                    "INSERT INTO local_playlists (name, thumbnail_url, description) VALUES (?, ?, ?)",
                    tuple(playlist.get(column) for column in _PLAYLIST_COLUMNS)
                )
                conn.commit()
                return cursor.lastrowid

    def add_playlist_item(self, playlist_id: int, item: dict[str, Any]) -> int:
        """
        Add a video to a playlist and return the new item id.

        Any 'id' or 'playlist_id' in the given row is ignored.

        Raises:
            DuplicateVideoError: If the playlist already contains the video.
            DatabaseError: If the playlist does not exist or the write fails.
        """
        columns = ", ".join(("playlist_id",) + _PLAYLIST_ITEM_COLUMNS)
        placeholders = ", ".join("?" for _ in range(len(_PLAYLIST_ITEM_COLUMNS) + 1))

        with self._lock:
            with self._get_connection() as conn:
                try:
                    cursor = conn.execute(
                        f"INSERT INTO local_playlist_items ({columns}) VALUES ({placeholders})",
                        (playlist_id,) + tuple(item.get(column) for column in _PLAYLIST_ITEM_COLUMNS)
                    )
                except sqlite3.IntegrityError as e:
                    conn.rollback()
                    if "UNIQUE" in str(e):
                        raise DuplicateVideoError(
                            f"Video {item.get('video_id')} already in playlist {playlist_id}",
                            details={"playlist_id": playlist_id, "video_id": item.get("video_id")}
                        ) from e
                    raise DatabaseError(
                        f"Failed to add video to playlist {playlist_id}: {e}",
                        details={"playlist_id": playlist_id, "original_error": str(e)}
                    ) from e
                conn.commit()
                return cursor.lastrowid
