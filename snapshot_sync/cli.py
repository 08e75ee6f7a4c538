"""
Command-line interface for snapshot-sync.

This module implements the CLI using Click, with rich-click for help
formatting and colors.

Commands:
    snapsync export                 Merge the local library into the snapshot
    snapsync import                 Apply the snapshot to the local library
    snapsync set-location <dir>     Choose the shared folder for the snapshot
    snapsync status                 Show location, snapshot and local counts
    snapsync session                Import now, export when the session ends

Options:
    --config <path>                 Use a config.yaml other than ./config.yaml

Usage:
    # Choose the shared folder once
    snapsync set-location ~/Sync/video-library

    # Pull changes from other devices, then push ours
    snapsync import
    snapsync export

    # Import at start, export on Ctrl+C / SIGTERM
    snapsync session

Exit Codes:
    0   success, or skipped because no location is configured
    1   configuration error
    2   database error
    3   snapshot I/O error
    130 interrupted
"""

import signal
import sys
import threading
from pathlib import Path

import rich_click as click

click.rich_click.USE_RICH_MARKUP = True
click.rich_click.SHOW_ARGUMENTS = True
click.rich_click.STYLE_ERRORS_SUGGESTION = "magenta italic"
click.rich_click.MAX_WIDTH = 100

from snapshot_sync import __version__
from snapshot_sync.core import (
    Config,
    ConfigError,
    Database,
    DatabaseError,
    SnapshotError,
    get_logger,
    load_config,
    save_sync_directory,
    setup_logging,
    shutdown_logging,
)
from snapshot_sync.core.logger import format_result_message
from snapshot_sync.core.progress import ImportProgressBar
from snapshot_sync.sync import (
    Library,
    SnapshotStore,
    SyncResult,
    SyncRunner,
    SyncStatus,
    wait_for_result,
)

logger = get_logger(__name__)


EXIT_CONFIG_ERROR = 1
EXIT_DATABASE_ERROR = 2
EXIT_IO_ERROR = 3
EXIT_INTERRUPTED = 130


@click.group()
@click.option(
    "--config", "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    metavar="<config.yaml>",
    help="Configuration file (default: ./config.yaml)"
)
@click.version_option(__version__, prog_name="snapshot-sync")
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None) -> None:
    """
    snapshot-sync: share a video library between devices through one file.

    \b
    The snapshot lives in a folder every device can reach (Syncthing,
    a cloud drive, a USB stick). Export merges this device's library into
    it without removing anything; import applies it to this device.
    """
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


@cli.command("export")
@click.pass_context
def export_command(ctx: click.Context) -> None:
    """Merge the local library into the shared snapshot."""
    def run(runner: SyncRunner) -> SyncResult:
        return wait_for_result(runner.submit_export())

    _run_operation(ctx, "Export", run)


@cli.command("import")
@click.pass_context
def import_command(ctx: click.Context) -> None:
    """Apply the shared snapshot to the local library."""
    def run(runner: SyncRunner) -> SyncResult:
        total = _count_snapshot_videos(runner.snapshots)
        with ImportProgressBar(total=total) as progress:
            return wait_for_result(runner.submit_import(on_video=progress.update))

    _run_operation(ctx, "Import", run)


@cli.command("session")
@click.pass_context
def session_command(ctx: click.Context) -> None:
    """
    Import now, then export when the session ends.

    \b
    The session ends on Ctrl+C or SIGTERM. The final export is awaited for
    at most sync.exit_timeout seconds.
    """
    def run(runner: SyncRunner) -> SyncResult:
        config: Config = ctx.obj["config"]
        imported = wait_for_result(runner.submit_import())
        click.echo(format_result_message("Import", imported.status.value, imported.message))

        stop = threading.Event()
        previous = signal.signal(signal.SIGTERM, lambda signum, frame: stop.set())
        click.echo("Session running, press Ctrl+C to export and exit")
        try:
            while not stop.wait(timeout=1.0):
                pass
        except KeyboardInterrupt:
            pass
        finally:
            signal.signal(signal.SIGTERM, previous)

        result = runner.export_on_exit(config.sync.exit_timeout)
        if result is None:
            return SyncResult(SyncStatus.IO_ERROR, f"export did not finish within {config.sync.exit_timeout}s")
        return result

    _run_operation(ctx, "Export", run)


@cli.command("set-location")
@click.argument("directory", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.pass_context
def set_location_command(ctx: click.Context, directory: Path) -> None:
    """Choose the shared folder that holds the snapshot."""
    try:
        config = save_sync_directory(directory, ctx.obj["config_path"])
    except ConfigError as e:
        click.echo(f"Configuration error: {e.message}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)
    click.echo(f"Sync location set to {config.sync.directory}")


@cli.command("status")
@click.pass_context
def status_command(ctx: click.Context) -> None:
    """Show the sync location, the snapshot and local record counts."""
    try:
        config = load_config(ctx.obj["config_path"])
        config.output.directory.mkdir(parents=True, exist_ok=True)
        database = Database(config.output.directory / "database.db")
    except ConfigError as e:
        click.echo(f"Configuration error: {e.message}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)
    except DatabaseError as e:
        click.echo(f"Database error: {e.message}", err=True)
        sys.exit(EXIT_DATABASE_ERROR)

    try:
        snapshots = SnapshotStore(config.sync.directory, config.sync.filename)
        if not snapshots.is_configured:
            click.echo("Sync location: not set (use 'snapsync set-location')")
        else:
            state = "writable" if snapshots.is_writable() else "not accessible"
            click.echo(f"Sync location: {snapshots.directory} ({state})")
            click.echo(f"Snapshot:      {'present' if snapshots.exists() else 'missing'}")

        click.echo("Local library:")
        for collection, count in Library(database).counts().items():
            click.echo(f"  {collection:<20} {count}")
    except DatabaseError as e:
        click.echo(f"Database error: {e.message}", err=True)
        sys.exit(EXIT_DATABASE_ERROR)
    finally:
        database.close()


def _run_operation(ctx: click.Context, operation: str, run) -> None:
    """
    Set up configuration, logging, database and runner, then run one job.

    Args:
        ctx: Click context carrying the --config option.
        operation: Name shown in the final summary line.
        run: Callable receiving the SyncRunner and returning a SyncResult.

    Raises:
        SystemExit: With one of the EXIT_* codes on failure.
    """
    database: Database | None = None
    runner: SyncRunner | None = None

    try:
        config = load_config(ctx.obj["config_path"])
        ctx.obj["config"] = config

        config.output.directory.mkdir(parents=True, exist_ok=True)
        setup_logging(config.output.directory)
        logger.info(f"snapshot-sync {__version__} starting")

        database = Database(config.output.directory / "database.db")
        snapshots = SnapshotStore(config.sync.directory, config.sync.filename)
        runner = SyncRunner(Library(database), snapshots)

        result = run(runner)
        click.echo(format_result_message(operation, result.status.value, result.message))

        if result.status is SyncStatus.IO_ERROR:
            sys.exit(EXIT_IO_ERROR)

    except ConfigError as e:
        click.echo(f"Configuration error: {e.message}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)

    except DatabaseError as e:
        click.echo(f"Database error: {e.message}", err=True)
        logger.error(f"Database error: {e.message}", exc_info=True)
        sys.exit(EXIT_DATABASE_ERROR)

    except KeyboardInterrupt:
        click.echo("\nInterrupted by user", err=True)
        logger.info("Interrupted by user")
        sys.exit(EXIT_INTERRUPTED)

    finally:
        if runner is not None:
            runner.shutdown(timeout=ctx.obj["config"].sync.exit_timeout)
        if database is not None:
            database.close()
        shutdown_logging()


def _count_snapshot_videos(snapshots: SnapshotStore) -> int:
    """Number of playlist videos in the snapshot, or 0 if it cannot be read."""
    try:
        snapshot = snapshots.read()
    except SnapshotError:
        return 0
    return sum(len(entry.videos) for entry in snapshot.local_playlists or ())


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
