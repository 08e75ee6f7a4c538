"""
Merge primitives used when exporting the library.

Two functions reconcile an existing snapshot collection ("base") with the
current local one ("incoming"):

    merge_keyed()      Flat collections. One record per merge key.
    merge_playlists()  Playlists. One playlist per name, and the union of
                       every same-named playlist's videos, one per video id.

Which record survives when both sides share a key is an explicit
Precedence rather than a side effect of argument order:

    PREFER_BASE      the earliest occurrence in base + incoming wins
    PREFER_INCOMING  the latest occurrence in base + incoming wins

In both cases the result keeps the order in which each key first appears,
so base records come first, followed by keys that only incoming has.
Neither function ever drops a key present in either input.
"""

from enum import Enum
from typing import Callable, Hashable, Iterable, TypeVar

from snapshot_sync.sync.models import LocalPlaylistItem, PlaylistWithVideos


T = TypeVar("T")


class Precedence(Enum):
    """Which side wins when base and incoming share a merge key."""
    PREFER_BASE = "prefer_base"
    PREFER_INCOMING = "prefer_incoming"


def merge_keyed(
    base: Iterable[T],
    incoming: Iterable[T],
    key: Callable[[T], Hashable],
    precedence: Precedence = Precedence.PREFER_BASE
) -> list[T]:
    """
    Merge two record sequences into one with unique keys.

    Args:
        base: Records already stored (the previous snapshot on export).
        incoming: Records to add (the current local state on export).
        key: Extracts the merge key of a record.
        precedence: Which occurrence survives for a shared key.

    Returns:
        A new list. Duplicates inside a single input are collapsed the same
        way as duplicates across inputs.

    Example:
        merge_keyed([a1, b1], [b2, c2], key=lambda r: r.video_id)
        # -> [a1, b1, c2]
    """
    merged: dict[Hashable, T] = {}
    for source in (base, incoming):
        for record in source:
            record_key = key(record)
            if record_key not in merged or precedence is Precedence.PREFER_INCOMING:
                merged[record_key] = record
    return list(merged.values())


def merge_playlists(
    base: Iterable[PlaylistWithVideos],
    incoming: Iterable[PlaylistWithVideos],
    precedence: Precedence = Precedence.PREFER_BASE
) -> list[PlaylistWithVideos]:
    """
    Merge playlists by name, taking the union of their videos.

    Playlist metadata and videos are merged independently: the metadata of
    one playlist per name survives (chosen by precedence), while the videos
    of every playlist sharing that name are concatenated in order and
    deduplicated by video id. A video added on any device is never lost
    because its playlist's metadata lost the tie-break.

    Example:
        base:     Favorites [A, B]
        incoming: Favorites [B, C]
        result:   Favorites [A, B, C]  (base metadata)
    """
    groups: dict[str, list[PlaylistWithVideos]] = {}
    for source in (base, incoming):
        for entry in source:
            groups.setdefault(entry.merge_key, []).append(entry)

    merged = []
    for members in groups.values():
        winner = members[0] if precedence is Precedence.PREFER_BASE else members[-1]
        videos: list[LocalPlaylistItem] = []
        for member in members:
            videos.extend(member.videos)
        merged.append(
            PlaylistWithVideos(
                playlist=winner.playlist,
                videos=tuple(merge_keyed(videos, (), _video_key, precedence)),
            )
        )
    return merged


def _video_key(video: LocalPlaylistItem) -> str:
    return video.video_id
