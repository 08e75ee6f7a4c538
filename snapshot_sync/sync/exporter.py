"""
Export: merge the local library into the shared snapshot.

Steps:
    1. Skip if no sync location is configured or it is not writable
    2. Read the existing snapshot (empty if missing or undecodable)
    3. Load the full local library
    4. Merge each flat collection by merge key, existing snapshot first
    5. Merge playlists by name, taking the union of their videos
    6. Write all collections back in one document

Export is additive: a record in the existing snapshot is never dropped
because the local library lacks it. Running it twice without local
changes produces the same collections.
"""

from snapshot_sync.core.exceptions import DatabaseError, SnapshotWriteError
from snapshot_sync.core.logger import get_logger
from snapshot_sync.sync.library import LocalStore
from snapshot_sync.sync.merge import Precedence, merge_keyed, merge_playlists
from snapshot_sync.sync.models import FLAT_COLLECTIONS, Snapshot
from snapshot_sync.sync.result import SyncResult, SyncStatus
from snapshot_sync.sync.snapshot import SnapshotStore


logger = get_logger(__name__)


def export_snapshot(
    store: LocalStore,
    snapshots: SnapshotStore,
    precedence: Precedence = Precedence.PREFER_BASE
) -> SyncResult:
    """
    Merge the local library into the snapshot document.

    Args:
        store: The local library to read.
        snapshots: The shared snapshot document.
        precedence: Which side wins a shared key. The default keeps the
                    record already in the snapshot.

    Returns:
        SyncResult: SKIPPED without a usable location, IO_ERROR if the
                    library cannot be read or the document cannot be
                    written, SUCCESS otherwise (counts = records written).
    """
    if not snapshots.is_configured:
        logger.info("Export skipped: no sync location configured")
        return SyncResult(SyncStatus.SKIPPED, "no sync location configured")

    if not snapshots.is_writable():
        logger.error(f"Export skipped: sync folder not accessible: {snapshots.directory}")
        return SyncResult(SyncStatus.SKIPPED, f"sync folder not accessible: {snapshots.directory}")

    base = snapshots.read_or_empty()

    try:
        local = store.load_snapshot()
    except DatabaseError as e:
        logger.error(f"Export failed reading local library: {e.message}", exc_info=True)
        return SyncResult(SyncStatus.IO_ERROR, e.message)

    merged = merge_snapshots(base, local, precedence)

    try:
        path = snapshots.write(merged)
    except SnapshotWriteError as e:
        logger.error(f"Export failed: {e.message}")
        return SyncResult(SyncStatus.IO_ERROR, e.message)

    counts = merged.counts()
    logger.info(f"Exported {sum(counts.values())} records to {path}")
    logger.debug(f"Export counts: {counts}")
    return SyncResult(SyncStatus.SUCCESS, f"wrote {path}", counts)


def merge_snapshots(
    base: Snapshot,
    local: Snapshot,
    precedence: Precedence = Precedence.PREFER_BASE
) -> Snapshot:
    """
    Merge every collection of two snapshots.

    Absent collections on either side count as empty. The legacy remote
    playlists field is always emptied.
    """
    values = {}
    for name, _ in FLAT_COLLECTIONS:
        values[name] = tuple(
            merge_keyed(
                getattr(base, name) or (),
                getattr(local, name) or (),
                key=_merge_key,
                precedence=precedence,
            )
        )
    values["local_playlists"] = tuple(
        merge_playlists(base.local_playlists or (), local.local_playlists or (), precedence)
    )
    values["playlists"] = ()
    return Snapshot(**values)


def _merge_key(record):
    return record.merge_key
