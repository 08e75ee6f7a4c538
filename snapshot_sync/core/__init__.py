"""
Core module for snapshot-sync.

This module provides the foundational components used throughout the application:
    - exceptions: Custom exception classes for error handling
    - config: Configuration loading, validation and the persisted sync location
    - database: Thread-safe SQLite store holding the local library
    - logger: Logging system with multiple outputs

Usage:
    from snapshot_sync.core import (
        Config, load_config,
        Database,
        setup_logging, get_logger,
        SnapshotSyncError, ConfigError, DatabaseError
    )
"""

from snapshot_sync.core.config import (
    Config,
    OutputConfig,
    SyncConfig,
    load_config,
    save_sync_directory,
)
from snapshot_sync.core.database import Database
from snapshot_sync.core.exceptions import (
    ConfigError,
    DatabaseError,
    DuplicateVideoError,
    SnapshotDecodeError,
    SnapshotError,
    SnapshotNotFoundError,
    SnapshotSyncError,
    SnapshotWriteError,
)
from snapshot_sync.core.logger import (
    get_logger,
    log_video_conflict,
    setup_logging,
    shutdown_logging,
)

__all__ = [
    # Config
    "Config",
    "OutputConfig",
    "SyncConfig",
    "load_config",
    "save_sync_directory",
    # Database
    "Database",
    # Exceptions
    "SnapshotSyncError",
    "ConfigError",
    "DatabaseError",
    "DuplicateVideoError",
    "SnapshotError",
    "SnapshotNotFoundError",
    "SnapshotDecodeError",
    "SnapshotWriteError",
    # Logger
    "setup_logging",
    "get_logger",
    "log_video_conflict",
    "shutdown_logging",
]
