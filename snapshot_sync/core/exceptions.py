"""
Exception classes for snapshot-sync.

This module defines all custom exceptions used throughout the application.
Each exception carries a human-readable message plus an optional details
dictionary, so callers can log context without parsing strings.

Exception Hierarchy:
    SnapshotSyncError (base)
        ConfigError - Configuration file issues
        DatabaseError - Local SQLite store issues
            DuplicateVideoError - Video already present in a local playlist
        SnapshotError - Shared snapshot document issues
            SnapshotNotFoundError - No snapshot document at the sync location
            SnapshotDecodeError - Document is empty, not JSON, or malformed
            SnapshotWriteError - Document could not be written

Export and import never raise these to their trigger: they translate them
into a SyncResult status. Only the CLI turns them into exit codes.
"""


class SnapshotSyncError(Exception):
    """
    Base exception for all snapshot-sync errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context (paths, keys).

    Example:
        try:
            # some operation
        except SnapshotSyncError as e:
            logger.error(f"Operation failed: {e.message}")
            if e.details:
                logger.debug(f"Details: {e.details}")
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        """
        Initialize the base exception.

        Args:
            message: Human-readable error description that will be shown to the user.
            details: Optional dictionary containing additional context about the error.
                     Common keys include:
                     - 'path': File involved in the error
                     - 'table': Local store table involved in the error
                     - 'original_error': The underlying exception if wrapping another error
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return the error message for display."""
        return self.message


class ConfigError(SnapshotSyncError):
    """
    Raised when there's an issue with the configuration file.

    This is a CRITICAL error that should stop program execution.

    Common causes:
        - config.yaml not found
        - config.yaml has invalid YAML syntax
        - Required 'output' section missing
        - Invalid field values (e.g., negative exit timeout)
    """
    pass


class DatabaseError(SnapshotSyncError):
    """
    Raised when there's an issue with the local SQLite store.

    During export this aborts the run before anything is written. During
    import, changes already applied to earlier collections stay applied.

    Common causes:
        - database.db is locked or corrupted
        - Permission denied when reading/writing
        - Schema version mismatch
    """
    pass


class DuplicateVideoError(DatabaseError):
    """
    Raised when a video is inserted into a local playlist that already has it.

    This is a NON-CRITICAL error: the importer catches it per video and
    carries on with the remaining videos and playlists.

    Example:
        raise DuplicateVideoError(
            "Video already in playlist",
            details={'playlist_id': 3, 'video_id': 'dQw4w9WgXcQ'}
        )
    """
    pass


class SnapshotError(SnapshotSyncError):
    """Base class for problems with the shared snapshot document."""
    pass


class SnapshotNotFoundError(SnapshotError):
    """Raised when the snapshot document does not exist yet."""
    pass


class SnapshotDecodeError(SnapshotError):
    """
    Raised when the snapshot document cannot be decoded.

    Export treats this as "no prior snapshot" and continues with an empty
    base. Import treats it as fatal for the run and mutates nothing.

    Common causes:
        - Zero-length file (e.g. a write interrupted by another tool)
        - Invalid JSON syntax
        - A record missing its merge key field
    """
    pass


class SnapshotWriteError(SnapshotError):
    """
    Raised when the snapshot document cannot be written.

    The previous document is left untouched because writes go through a
    temporary file that is only moved into place once complete.
    """
    pass
