"""
snapshot-sync: share a video library between devices through one file.

The library (watch history, watch positions, playlist bookmarks, search
history, subscription groups, subscriptions and local playlists) lives in
a local SQLite database on each device. Devices exchange it through a
single JSON snapshot in a shared folder, without any server.

Architecture:
    EXPORT (sync/exporter.py)
        - Read the existing snapshot (empty if missing or unreadable)
        - Merge each collection with the local library by merge key,
          keeping what the snapshot already had
        - Merge playlists by name, uniting their videos
        - Atomically replace the snapshot file

    IMPORT (sync/importer.py)
        - Read the snapshot (fail without changes if unreadable)
        - Upsert each collection into the local library
        - Find or create each playlist by name, add its videos one by one,
          skipping videos already present

Modules:
    core/       - Configuration, database, logging, exceptions, progress
    sync/       - Models, merge primitives, snapshot file, export/import, runner
    cli.py      - Command-line interface

Usage:
    Command Line:
        snapsync set-location ~/Sync/video-library
        snapsync import
        snapsync export

    Python API:
        from snapshot_sync.core import load_config, Database, setup_logging
        from snapshot_sync.sync import Library, SnapshotStore, SyncRunner

        config = load_config()
        setup_logging(config.output.directory)
        database = Database(config.output.directory / "database.db")
        snapshots = SnapshotStore(config.sync.directory, config.sync.filename)

        runner = SyncRunner(Library(database), snapshots)
        runner.submit_import()
        runner.install_exit_hook(config.sync.exit_timeout)

Dependencies:
    - click / rich-click: CLI framework and colors
    - rich: Progress bars
    - tqdm: Progress-bar-safe console logging
    - pyyaml: Configuration file parsing
"""

__version__ = "0.1.0"
__author__ = "snapshot-sync"
__license__ = "MIT"

# Convenience imports for common usage
from snapshot_sync.core import (
    Config,
    ConfigError,
    Database,
    DatabaseError,
    SnapshotError,
    SnapshotSyncError,
    get_logger,
    load_config,
    setup_logging,
)
from snapshot_sync.sync import (
    Library,
    Snapshot,
    SnapshotStore,
    SyncResult,
    SyncRunner,
    SyncStatus,
    export_snapshot,
    import_snapshot,
)

__all__ = [
    # Version
    "__version__",
    # Core
    "Config",
    "load_config",
    "Database",
    "setup_logging",
    "get_logger",
    # Exceptions
    "SnapshotSyncError",
    "ConfigError",
    "DatabaseError",
    "SnapshotError",
    # Sync
    "Library",
    "Snapshot",
    "SnapshotStore",
    "SyncResult",
    "SyncRunner",
    "SyncStatus",
    "export_snapshot",
    "import_snapshot",
]
