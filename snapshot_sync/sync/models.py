"""
Data models for the synchronized library.

This module defines immutable dataclasses for every record kind shared
between devices, plus the Snapshot document that carries all of them.

Design Decisions:
    - All dataclasses are frozen (immutable) to prevent accidental modification
    - Every record names its merge key: the field that identifies it across
      devices, as opposed to identities assigned by the local store
    - JSON uses camelCase field names, SQLite rows use snake_case; both are
      derived from the dataclass field names
    - Unknown JSON keys are ignored so newer snapshots still decode

Usage:
    from snapshot_sync.sync.models import Snapshot, WatchPosition

    position = WatchPosition(video_id="dQw4w9WgXcQ", position=50_000)
    snapshot = Snapshot.from_json(json.loads(text))
"""

import json
from dataclasses import dataclass, fields
from typing import Any, ClassVar


def to_camel_case(name: str) -> str:
    """Convert a snake_case field name to its camelCase JSON key."""
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


@dataclass(frozen=True)
class Record:
    """
    Base class for a synchronized record.

    Subclasses set KEY_FIELD to the name of their merge key field. The key
    field is the only one required when decoding; every other field falls
    back to its default.
    """

    KEY_FIELD: ClassVar[str] = ""

    @property
    def merge_key(self) -> Any:
        """Cross-device identity of this record."""
        return getattr(self, self.KEY_FIELD)

    @classmethod
    def from_json(cls, data: Any) -> "Record":
        """
        Create a record from a decoded JSON object.

        Raises:
            ValueError: If data is not an object, lacks the merge key, or
                        has a field whose JSON type does not match.
        """
        if not isinstance(data, dict):
            raise ValueError(f"{cls.__name__} entry must be a JSON object, got {type(data).__name__}")

        values = {}
        for f in fields(cls):
            value = data.get(to_camel_case(f.name))
            if value is not None:
                values[f.name] = value

        key = values.get(cls.KEY_FIELD)
        if not isinstance(key, str) or not key:
            raise ValueError(f"{cls.__name__} entry is missing '{to_camel_case(cls.KEY_FIELD)}'")

        for f in fields(cls):
            if f.name in values and not _matches_type(values[f.name], f.type):
                raise ValueError(
                    f"{cls.__name__} '{key}' has invalid '{to_camel_case(f.name)}': "
                    f"{type(values[f.name]).__name__}"
                )

        return cls(**values)

    def to_json(self) -> dict[str, Any]:
        return {to_camel_case(f.name): getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Record":
        """Create a record from a local store row (snake_case keys)."""
        return cls(**{f.name: row[f.name] for f in fields(cls) if row.get(f.name) is not None})

    def to_row(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class WatchHistoryItem(Record):
    """A watched video. One entry per video."""

    KEY_FIELD: ClassVar[str] = "video_id"

    video_id: str
    title: str = ""
    upload_date: str = ""
    uploader: str = ""
    uploader_url: str = ""
    uploader_avatar: str = ""
    thumbnail_url: str = ""
    duration: int = 0


@dataclass(frozen=True)
class WatchPosition(Record):
    """Resume position of a video, in milliseconds."""

    KEY_FIELD: ClassVar[str] = "video_id"

    video_id: str
    position: int = 0


@dataclass(frozen=True)
class PlaylistBookmark(Record):
    """A bookmarked remote playlist."""

    KEY_FIELD: ClassVar[str] = "playlist_id"

    playlist_id: str
    playlist_name: str = ""
    thumbnail_url: str = ""
    uploader: str = ""
    uploader_url: str = ""
    uploader_avatar: str = ""
    videos: int = 0


@dataclass(frozen=True)
class SearchHistoryItem(Record):
    KEY_FIELD: ClassVar[str] = "query"

    query: str


@dataclass(frozen=True)
class SubscriptionGroup(Record):
    """
    A named group of subscribed channels.

    Attributes:
        name: Group name, unique per device and used as the merge key.
        channels: Channel ids in the group, in display order.
        index: Position of the group in the group list.
    """

    KEY_FIELD: ClassVar[str] = "name"

    name: str
    channels: tuple[str, ...] = ()
    index: int = 0

    @classmethod
    def from_json(cls, data: Any) -> "SubscriptionGroup":
        group = super().from_json(data)
        return cls(name=group.name, channels=tuple(group.channels), index=group.index)

    def to_json(self) -> dict[str, Any]:
        return {"name": self.name, "channels": list(self.channels), "index": self.index}

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "SubscriptionGroup":
        channels = json.loads(row["channels"]) if row.get("channels") else []
        return cls(name=row["name"], channels=tuple(channels), index=row.get("index") or 0)

    def to_row(self) -> dict[str, Any]:
        return {"name": self.name, "channels": json.dumps(list(self.channels)), "index": self.index}


@dataclass(frozen=True)
class Subscription(Record):
    """A followed channel."""

    KEY_FIELD: ClassVar[str] = "channel_id"

    channel_id: str
    name: str = ""
    avatar: str = ""
    verified: bool = False
    url: str = ""

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Subscription":
        return cls(
            channel_id=row["channel_id"],
            name=row.get("name") or "",
            avatar=row.get("avatar") or "",
            verified=bool(row.get("verified")),
            url=row.get("url") or "",
        )

    def to_row(self) -> dict[str, Any]:
        row = super().to_row()
        row["verified"] = 1 if self.verified else 0
        return row


@dataclass(frozen=True)
class LocalPlaylist(Record):
    """
    Metadata of a user-created playlist.

    Attributes:
        name: Playlist name. The merge key across devices.
        id: Identity assigned by the local store. Device-local: it is
            written to snapshots but never reused on import.
    """

    KEY_FIELD: ClassVar[str] = "name"

    name: str
    id: int = 0
    thumbnail_url: str = ""
    description: str = ""


@dataclass(frozen=True)
class LocalPlaylistItem(Record):
    """
    A video inside a local playlist.

    The merge key is video_id, scoped to the parent playlist. id and
    playlist_id are local store identities and are reassigned on import.
    """

    KEY_FIELD: ClassVar[str] = "video_id"

    video_id: str
    id: int = 0
    playlist_id: int = 0
    title: str = ""
    upload_date: str = ""
    uploader: str = ""
    uploader_url: str = ""
    uploader_avatar: str = ""
    thumbnail_url: str = ""
    duration: int = 0


@dataclass(frozen=True)
class PlaylistWithVideos:
    """A local playlist together with its ordered videos."""

    playlist: LocalPlaylist
    videos: tuple[LocalPlaylistItem, ...] = ()

    @property
    def merge_key(self) -> str:
        return self.playlist.name

    @classmethod
    def from_json(cls, data: Any) -> "PlaylistWithVideos":
        if not isinstance(data, dict) or "playlist" not in data:
            raise ValueError("Local playlist entry must be an object with a 'playlist' field")
        videos = data.get("videos") or []
        if not isinstance(videos, list):
            raise ValueError("Local playlist 'videos' must be a list")
        return cls(
            playlist=LocalPlaylist.from_json(data["playlist"]),
            videos=tuple(LocalPlaylistItem.from_json(video) for video in videos),
        )

    def to_json(self) -> dict[str, Any]:
        return {
            "playlist": self.playlist.to_json(),
            "videos": [video.to_json() for video in self.videos],
        }


# Snapshot attribute name -> record class, for the six collections that are
# merged and applied with a single key.
FLAT_COLLECTIONS: tuple[tuple[str, type[Record]], ...] = (
    ("watch_history", WatchHistoryItem),
    ("watch_positions", WatchPosition),
    ("playlist_bookmarks", PlaylistBookmark),
    ("search_history", SearchHistoryItem),
    ("groups", SubscriptionGroup),
    ("subscriptions", Subscription),
)


@dataclass(frozen=True)
class Snapshot:
    """
    The shared document holding every collection at a point in time.

    Each collection is None when absent (or null) in the document, which
    importers must treat as "nothing to apply" rather than "delete all".

    Attributes:
        playlists: Legacy remote playlists field. Kept as raw objects and
                   always written empty.
    """

    watch_history: tuple[WatchHistoryItem, ...] | None = None
    watch_positions: tuple[WatchPosition, ...] | None = None
    playlist_bookmarks: tuple[PlaylistBookmark, ...] | None = None
    search_history: tuple[SearchHistoryItem, ...] | None = None
    groups: tuple[SubscriptionGroup, ...] | None = None
    subscriptions: tuple[Subscription, ...] | None = None
    local_playlists: tuple[PlaylistWithVideos, ...] | None = None
    playlists: tuple[dict[str, Any], ...] | None = None

    @classmethod
    def empty(cls) -> "Snapshot":
        """A snapshot with every collection present and empty."""
        return cls(**{f.name: () for f in fields(cls)})

    @classmethod
    def from_json(cls, data: Any) -> "Snapshot":
        """
        Create a snapshot from the decoded document.

        Raises:
            ValueError: If the document or any record is malformed.
        """
        if not isinstance(data, dict):
            raise ValueError("Snapshot document must be a JSON object")

        values: dict[str, Any] = {}
        for name, record_cls in FLAT_COLLECTIONS:
            values[name] = _decode_collection(data, name, record_cls.from_json)
        values["local_playlists"] = _decode_collection(data, "local_playlists", PlaylistWithVideos.from_json)
        values["playlists"] = _decode_collection(data, "playlists", dict)
        return cls(**values)

    def to_json(self) -> dict[str, Any]:
        document: dict[str, Any] = {}
        for f in fields(self):
            records = getattr(self, f.name)
            if records is None:
                document[to_camel_case(f.name)] = None
            elif f.name == "playlists":
                document["playlists"] = [dict(entry) for entry in records]
            else:
                document[to_camel_case(f.name)] = [record.to_json() for record in records]
        return document

    def counts(self) -> dict[str, int]:
        """Number of records per collection (absent collections count as 0)."""
        return {
            f.name: len(getattr(self, f.name) or ())
            for f in fields(self)
            if f.name != "playlists"
        }


def _matches_type(value: Any, expected: Any) -> bool:
    """Check a decoded JSON value against a record field annotation."""
    if expected is bool:
        return isinstance(value, bool)
    if expected is int:
        return isinstance(value, int) and not isinstance(value, bool)
    if expected is str:
        return isinstance(value, str)
    # tuple[str, ...]: a JSON array of strings
    return isinstance(value, (list, tuple)) and all(isinstance(item, str) for item in value)


def _decode_collection(data: dict[str, Any], name: str, decode) -> tuple | None:
    raw = data.get(to_camel_case(name))
    if raw is None:
        return None
    if not isinstance(raw, list):
        raise ValueError(f"Snapshot field '{to_camel_case(name)}' must be a list")
    return tuple(decode(entry) for entry in raw)
