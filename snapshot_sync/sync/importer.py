"""
Import: apply the shared snapshot to the local library.

Flat collections are upserted by merge key: a local record with the same
key is replaced, anything else is added. Collections that are absent from
the snapshot are left alone.

Playlists are matched by name. A matching local playlist is reused;
otherwise a new one is created from the snapshot's metadata with a fresh
local id. Every video is then inserted one at a time, and a video the
playlist already has is skipped without affecting the rest. Re-importing
the same snapshot therefore never duplicates videos.

There is no transaction across collections: if the store fails halfway,
what was already applied stays applied.
"""

from typing import Callable

from snapshot_sync.core.exceptions import (
    DatabaseError,
    DuplicateVideoError,
    SnapshotError,
    SnapshotNotFoundError,
)
from snapshot_sync.core.logger import get_logger, log_video_conflict
from snapshot_sync.sync.library import LocalStore
from snapshot_sync.sync.models import FLAT_COLLECTIONS, PlaylistWithVideos
from snapshot_sync.sync.result import SyncResult, SyncStatus
from snapshot_sync.sync.snapshot import SnapshotStore


logger = get_logger(__name__)


def import_snapshot(
    store: LocalStore,
    snapshots: SnapshotStore,
    on_video: Callable[[bool], None] | None = None
) -> SyncResult:
    """
    Apply the snapshot document to the local library.

    Args:
        store: The local library to update.
        snapshots: The shared snapshot document.
        on_video: Optional callback invoked once per playlist video with
                  True if it was added, False if it was skipped.

    Returns:
        SyncResult: SKIPPED if there is no document to import, IO_ERROR if
                    it cannot be decoded (nothing applied) or the store
                    fails (earlier changes kept), SUCCESS otherwise.
    """
    if not snapshots.is_configured:
        logger.info("Import skipped: no sync location configured")
        return SyncResult(SyncStatus.SKIPPED, "no sync location configured")

    if not snapshots.exists():
        logger.info(f"Import skipped: no snapshot at {snapshots.path}")
        return SyncResult(SyncStatus.SKIPPED, f"no snapshot at {snapshots.path}")

    try:
        snapshot = snapshots.read()
    except SnapshotNotFoundError:
        logger.info(f"Import skipped: snapshot at {snapshots.path} disappeared before reading")
        return SyncResult(SyncStatus.SKIPPED, f"no snapshot at {snapshots.path}")
    except SnapshotError as e:
        logger.error(f"Import failed: {e.message}")
        return SyncResult(SyncStatus.IO_ERROR, e.message)

    counts: dict[str, int] = {}
    try:
        for name, _ in FLAT_COLLECTIONS:
            records = getattr(snapshot, name)
            if records is None:
                logger.debug(f"Snapshot has no {name}, leaving local records unchanged")
                continue
            counts[name] = store.upsert(name, records)

        added = skipped = 0
        for entry in snapshot.local_playlists or ():
            entry_added, entry_skipped = _import_playlist(store, entry, on_video)
            added += entry_added
            skipped += entry_skipped
        counts["local_playlists"] = len(snapshot.local_playlists or ())
        counts["videos_added"] = added
        counts["videos_skipped"] = skipped
    except DatabaseError as e:
        logger.error(f"Import aborted, changes so far are kept: {e.message}", exc_info=True)
        return SyncResult(SyncStatus.IO_ERROR, e.message, counts)

    logger.info(
        f"Imported snapshot from {snapshots.path}: "
        f"{added} playlist videos added, {skipped} already present"
    )
    logger.debug(f"Import counts: {counts}")
    return SyncResult(SyncStatus.SUCCESS, f"read {snapshots.path}", counts)


def _import_playlist(
    store: LocalStore,
    entry: PlaylistWithVideos,
    on_video: Callable[[bool], None] | None
) -> tuple[int, int]:
    """Find or create the playlist, then insert its videos one by one."""
    name = entry.playlist.name
    playlist_id = store.find_playlist(name)
    if playlist_id is None:
        playlist_id = store.create_playlist(entry.playlist)
        logger.debug(f"Created local playlist '{name}' (id {playlist_id})")

    added = skipped = 0
    for video in entry.videos:
        try:
            store.add_video(playlist_id, video)
        except DuplicateVideoError:
            log_video_conflict(logger, name, video.video_id, video.title)
            skipped += 1
            if on_video is not None:
                on_video(False)
            continue
        added += 1
        if on_video is not None:
            on_video(True)
    return added, skipped
