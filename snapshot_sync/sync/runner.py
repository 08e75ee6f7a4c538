"""
Background execution of export and import.

SyncRunner runs jobs on a single worker thread, off the caller's thread.
Because there is only one worker, an export and an import submitted to the
same runner never overlap on the snapshot document.

Callers that only want to trigger a sync can ignore the returned future;
every result is logged when the job completes. Teardown is different: the
final export is awaited (within a bounded timeout) so the process does not
exit halfway through writing the snapshot.

Usage:
    runner = SyncRunner(Library(database), SnapshotStore(directory))
    runner.submit_import()                 # fire-and-forget
    runner.install_exit_hook(timeout=10)   # export on interpreter exit
"""

import atexit
from concurrent.futures import Future, ThreadPoolExecutor, wait
from typing import Callable

from snapshot_sync.core.logger import get_logger
from snapshot_sync.sync.exporter import export_snapshot
from snapshot_sync.sync.importer import import_snapshot
from snapshot_sync.sync.library import LocalStore
from snapshot_sync.sync.result import SyncResult, SyncStatus
from snapshot_sync.sync.snapshot import SnapshotStore


logger = get_logger(__name__)


class SyncRunner:
    """
    Serialized background worker for export and import jobs.

    Attributes:
        store: Local library passed to every job.
        snapshots: Snapshot document passed to every job.
    """

    def __init__(self, store: LocalStore, snapshots: SnapshotStore) -> None:
        self.store = store
        self.snapshots = snapshots
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="snapshot-sync")
        self._pending: set[Future] = set()
        self._closed = False
        self._exit_hook: Callable[[], None] | None = None

    def submit_export(self) -> Future:
        """Queue an export. The future resolves to its SyncResult."""
        return self._submit("export", lambda: export_snapshot(self.store, self.snapshots))

    def submit_import(self, on_video: Callable[[bool], None] | None = None) -> Future:
        """Queue an import. The future resolves to its SyncResult."""
        return self._submit("import", lambda: import_snapshot(self.store, self.snapshots, on_video))

    def _submit(self, operation: str, job: Callable[[], SyncResult]) -> Future:
        if self._closed:
            raise RuntimeError("SyncRunner has been shut down")

        future = self._executor.submit(job)
        self._pending.add(future)
        future.add_done_callback(lambda done: self._finished(operation, done))
        logger.debug(f"Queued {operation}")
        return future

    def _finished(self, operation: str, future: Future) -> None:
        self._pending.discard(future)
        if future.cancelled():
            logger.warning(f"{operation.capitalize()} cancelled before it started")
            return
        error = future.exception()
        if error is not None:
            logger.error(f"{operation.capitalize()} crashed: {error}", exc_info=error)
            return
        result = future.result()
        logger.info(f"{operation.capitalize()} finished: {result.status.value} ({result.message})")

    def shutdown(self, timeout: float | None = None) -> bool:
        """
        Wait for queued jobs, then stop the worker.

        Args:
            timeout: Maximum seconds to wait. None waits indefinitely.

        Returns:
            True if every job finished in time. Jobs still queued after the
            timeout are cancelled; a job already running cannot be stopped
            and keeps the worker thread busy until it returns.
        """
        if self._closed:
            return True
        self._closed = True

        done, not_done = wait(list(self._pending), timeout=timeout)
        if not_done:
            logger.warning(f"{len(not_done)} sync job(s) still running after {timeout}s, giving up")
        self._executor.shutdown(wait=False, cancel_futures=True)
        return not not_done

    def export_on_exit(self, timeout: float) -> SyncResult | None:
        """
        Run a final export and block until it completes or times out.

        This is the teardown trigger. Returns the export result, or None if
        it did not finish within the timeout.
        """
        if self._closed:
            logger.debug("Runner already shut down, no exit export")
            return None

        logger.info("Exporting library before exit")
        try:
            future = self.submit_export()
        except RuntimeError:
            # Interpreter shutdown already joined the worker thread.
            self._closed = True
            return export_snapshot(self.store, self.snapshots)
        done, _ = wait([future], timeout=timeout)
        result = future.result() if future in done and future.exception() is None else None
        self.shutdown(timeout=0)
        if result is None:
            logger.error(f"Exit export did not complete within {timeout}s")
        return result

    def install_exit_hook(self, timeout: float) -> None:
        """Register export_on_exit() to run when the interpreter exits."""
        if self._exit_hook is not None:
            return
        self._exit_hook = lambda: self.export_on_exit(timeout)
        atexit.register(self._exit_hook)

    def remove_exit_hook(self) -> None:
        if self._exit_hook is not None:
            atexit.unregister(self._exit_hook)
            self._exit_hook = None


def wait_for_result(future: Future) -> SyncResult:
    """Block on a submitted job, turning a crash into an IO_ERROR result."""
    try:
        return future.result()
    except Exception as e:
        return SyncResult(SyncStatus.IO_ERROR, f"unexpected error: {e}")
