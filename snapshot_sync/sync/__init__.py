"""
Snapshot synchronization: merge on export, upsert on import.

Modules:
    models      Record dataclasses and the Snapshot document
    merge       Keyed and playlist merge primitives
    snapshot    Reading/writing the shared snapshot file
    library     LocalStore protocol and its SQLite-backed implementation
    exporter    export_snapshot()
    importer    import_snapshot()
    runner      SyncRunner background worker and exit hook
"""

from snapshot_sync.sync.exporter import export_snapshot, merge_snapshots
from snapshot_sync.sync.importer import import_snapshot
from snapshot_sync.sync.library import Library, LocalStore
from snapshot_sync.sync.merge import Precedence, merge_keyed, merge_playlists
from snapshot_sync.sync.models import (
    LocalPlaylist,
    LocalPlaylistItem,
    PlaylistBookmark,
    PlaylistWithVideos,
    SearchHistoryItem,
    Snapshot,
    Subscription,
    SubscriptionGroup,
    WatchHistoryItem,
    WatchPosition,
)
from snapshot_sync.sync.result import SyncResult, SyncStatus
from snapshot_sync.sync.runner import SyncRunner, wait_for_result
from snapshot_sync.sync.snapshot import SnapshotStore

__all__ = [
    "export_snapshot",
    "merge_snapshots",
    "import_snapshot",
    "Library",
    "LocalStore",
    "Precedence",
    "merge_keyed",
    "merge_playlists",
    "LocalPlaylist",
    "LocalPlaylistItem",
    "PlaylistBookmark",
    "PlaylistWithVideos",
    "SearchHistoryItem",
    "Snapshot",
    "Subscription",
    "SubscriptionGroup",
    "WatchHistoryItem",
    "WatchPosition",
    "SyncResult",
    "SyncStatus",
    "SyncRunner",
    "wait_for_result",
    "SnapshotStore",
]
