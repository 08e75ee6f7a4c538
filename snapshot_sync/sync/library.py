"""
Record-level access to the local store.

Export and import never touch SQLite directly. They receive a LocalStore,
passed explicitly by the caller, which speaks in terms of the record
dataclasses. Library implements it on top of Database; tests may pass any
object with the same methods.
"""

from typing import Iterable, Protocol

from snapshot_sync.core.database import Database
from snapshot_sync.sync.models import (
    FLAT_COLLECTIONS,
    LocalPlaylist,
    LocalPlaylistItem,
    PlaylistWithVideos,
    Record,
    Snapshot,
)


# Snapshot collection name -> local store table
COLLECTION_TABLES = {
    "watch_history": "watch_history",
    "watch_positions": "watch_positions",
    "playlist_bookmarks": "playlist_bookmarks",
    "search_history": "search_history",
    "groups": "subscription_groups",
    "subscriptions": "subscriptions",
}

_RECORD_TYPES = dict(FLAT_COLLECTIONS)


class LocalStore(Protocol):
    """What export and import need from the device's local store."""

    def load_snapshot(self) -> Snapshot:
        """Return the full current contents of all seven collections."""
        ...

    def upsert(self, collection: str, records: Iterable[Record]) -> int:
        """Insert or replace records of a flat collection by merge key."""
        ...

    def find_playlist(self, name: str) -> int | None:
        ...

    def create_playlist(self, playlist: LocalPlaylist) -> int:
        """Create a playlist and return its newly assigned local id."""
        ...

    def add_video(self, playlist_id: int, video: LocalPlaylistItem) -> int:
        """Add a video to a playlist; raises DuplicateVideoError if present."""
        ...


class Library:
    """LocalStore backed by the SQLite Database."""

    def __init__(self, database: Database) -> None:
        self.database = database

    def load_snapshot(self) -> Snapshot:
        values = {}
        for collection, table in COLLECTION_TABLES.items():
            record_cls = _RECORD_TYPES[collection]
            values[collection] = tuple(record_cls.from_row(row) for row in self.database.fetch_all(table))

        playlists = []
        for row in self.database.get_playlists():
            items = self.database.get_playlist_items(row["id"])
            playlists.append(
                PlaylistWithVideos(
                    playlist=LocalPlaylist.from_row(row),
                    videos=tuple(LocalPlaylistItem.from_row(item) for item in items),
                )
            )
        values["local_playlists"] = tuple(playlists)
        values["playlists"] = ()
        return Snapshot(**values)

    def upsert(self, collection: str, records: Iterable[Record]) -> int:
        table = COLLECTION_TABLES[collection]
        return self.database.upsert_rows(table, [record.to_row() for record in records])

    def find_playlist(self, name: str) -> int | None:
        return self.database.find_playlist_id(name)

    def create_playlist(self, playlist: LocalPlaylist) -> int:
        return self.database.create_playlist(playlist.to_row())

    def add_video(self, playlist_id: int, video: LocalPlaylistItem) -> int:
        return self.database.add_playlist_item(playlist_id, video.to_row())

    def counts(self) -> dict[str, int]:
        """Number of rows per collection, for status output."""
        counts = {collection: self.database.count(table) for collection, table in COLLECTION_TABLES.items()}
        counts["local_playlists"] = self.database.count("local_playlists")
        counts["playlist_videos"] = self.database.count("local_playlist_items")
        return counts
