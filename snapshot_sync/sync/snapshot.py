"""
Reading and writing the shared snapshot document.

The snapshot is a single JSON file inside a folder shared between devices.
SnapshotStore owns two policies around it:

    Reading:  read() raises on a missing or undecodable document.
              read_or_empty() substitutes an empty snapshot instead, for
              callers (export) that would rather succeed than fail.
    Writing:  the new document goes to a temporary file in the same folder,
              is flushed to disk, then atomically moved over the old one.
              A crash mid-write leaves the previous snapshot intact.

The store performs no locking: callers must not run two writers against
the same document at once (SyncRunner serializes its own jobs).
"""

import json
import os
from pathlib import Path

from snapshot_sync.core.config import DEFAULT_SNAPSHOT_FILENAME
from snapshot_sync.core.exceptions import (
    SnapshotDecodeError,
    SnapshotNotFoundError,
    SnapshotWriteError,
)
from snapshot_sync.core.logger import get_logger
from snapshot_sync.sync.models import Snapshot


logger = get_logger(__name__)


class SnapshotStore:
    """
    The snapshot document at a configured sync location.

    Attributes:
        directory: Shared folder, or None when no location is configured.
        filename: Name of the document inside the folder.
    """

    def __init__(self, directory: Path | None, filename: str = DEFAULT_SNAPSHOT_FILENAME) -> None:
        self.directory = directory
        self.filename = filename

    @property
    def is_configured(self) -> bool:
        return self.directory is not None

    @property
    def path(self) -> Path | None:
        """Full path of the snapshot document, or None when unconfigured."""
        if self.directory is None:
            return None
        return self.directory / self.filename

    def is_writable(self) -> bool:
        """True if the sync folder exists and this process may write into it."""
        return (
            self.directory is not None
            and self.directory.is_dir()
            and os.access(self.directory, os.W_OK | os.X_OK)
        )

    def exists(self) -> bool:
        path = self.path
        return path is not None and path.is_file()

    def read(self) -> Snapshot:
        """
        Read and decode the snapshot document.

        Raises:
            SnapshotNotFoundError: If no location is configured or the file is missing.
            SnapshotDecodeError: If the file is empty, unreadable, not JSON,
                                 or contains malformed records.
        """
        path = self.path
        if path is None or not path.is_file():
            raise SnapshotNotFoundError(
                "Snapshot document not found",
                details={"path": str(path) if path else None}
            )

        try:
            with open(path, "r", encoding="utf-8") as f:
                content = f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise SnapshotDecodeError(
                f"Failed to read snapshot: {e}",
                details={"path": str(path), "original_error": str(e)}
            ) from e

        if not content.strip():
            raise SnapshotDecodeError("Snapshot document is empty", details={"path": str(path)})

        try:
            return Snapshot.from_json(json.loads(content))
        except json.JSONDecodeError as e:
            raise SnapshotDecodeError(
                f"Invalid JSON in snapshot: {e}",
                details={"path": str(path), "line": e.lineno}
            ) from e
        except (ValueError, TypeError) as e:
            raise SnapshotDecodeError(
                f"Malformed snapshot: {e}",
                details={"path": str(path), "original_error": str(e)}
            ) from e

    def read_or_empty(self) -> Snapshot:
        """
        Read the snapshot, falling back to an empty one.

        A missing document is normal on the first export. A document that
        cannot be decoded is logged as a warning and treated the same way.
        """
        try:
            return self.read()
        except SnapshotNotFoundError:
            logger.debug(f"No existing snapshot at {self.path}, starting from empty")
        except SnapshotDecodeError as e:
            logger.warning(f"Ignoring unreadable snapshot: {e.message}")
        return Snapshot.empty()

    def write(self, snapshot: Snapshot) -> Path:
        """
        Replace the snapshot document with the given snapshot.

        Returns:
            Path: The written document.

        Raises:
            SnapshotWriteError: If no location is configured or any step of
                                the write fails. The previous document is
                                left as it was.
        """
        path = self.path
        if path is None:
            raise SnapshotWriteError("No sync location configured")

        content = json.dumps(snapshot.to_json(), ensure_ascii=False, indent=2)
        tmp_path = path.with_name(f".{path.name}.tmp")

        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, path)
        except OSError as e:
            try:
                tmp_path.unlink()
            except OSError:
                pass
            raise SnapshotWriteError(
                f"Failed to write snapshot: {e}",
                details={"path": str(path), "original_error": str(e)}
            ) from e

        logger.debug(f"Wrote snapshot ({len(content)} bytes) to {path}")
        return path
