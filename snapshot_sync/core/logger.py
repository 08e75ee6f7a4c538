"""
Logging configuration for snapshot-sync.

This module sets up the logging system with multiple outputs:
    - Console: Colored, tqdm-compatible messages (INFO and above)
    - log_full_<ts>.log: Complete log of all events (DEBUG and above)
    - log_errors_<ts>.log: Only ERROR and CRITICAL level messages
    - import_conflicts_<ts>.log: Playlist videos skipped during import
      because the local playlist already contained them

Everything printed to screen is also saved to file, then filtered into
specialized files.

Log File Locations:
    All log files are created in <output directory>/logs. Each run gets
    its own timestamped files.

Usage:
    from snapshot_sync.core.logger import setup_logging, get_logger

    setup_logging(output_dir)  # Call once at startup
    logger = get_logger(__name__)  # Get logger for each module

    logger.info("Starting export")
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import TextIO

from tqdm import tqdm


# Log format for file output (detailed with timestamp)
FILE_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(threadName)s | %(name)s | %(message)s"
FILE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class Colors:
    """ANSI color codes for terminal output."""
    RESET = "\033[0m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    CYAN = "\033[36m"
    WHITE = "\033[37m"
    BOLD = "\033[1m"


class ColoredConsoleFormatter(logging.Formatter):
    """
    Formatter that adds colors to console output.

    Colors:
        - DEBUG: Blue
        - INFO: Green
        - WARNING: Yellow
        - ERROR: Red
        - CRITICAL: Bold Red
    """

    LEVEL_COLORS = {
        logging.DEBUG: Colors.BLUE,
        logging.INFO: Colors.GREEN,
        logging.WARNING: Colors.YELLOW,
        logging.ERROR: Colors.RED,
        logging.CRITICAL: Colors.BOLD + Colors.RED,
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno, Colors.WHITE)
        return f"{color}{record.levelname}{Colors.RESET}: {record.getMessage()}"


class TqdmLoggingHandler(logging.Handler):
    """
    Logging handler that writes to console without breaking progress bars.

    Uses tqdm.write(), which prints above any active bar instead of
    interleaving with its carriage-return updates.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        super().__init__()
        self.stream = stream

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
            # sys.stderr is looked up per record so redirection is honored
            tqdm.write(msg, file=self.stream or sys.stderr)
        except Exception:
            self.handleError(record)


class VideoConflictHandler(logging.Handler):
    """
    Handler that captures playlist videos skipped during import.

    This handler listens for log records that carry conflict information
    and writes them to import_conflicts_<ts>.log in a simple, human-readable
    format:

        Road Trip
        dQw4w9WgXcQ  Never Gonna Give You Up
        Video already in local playlist

    The handler looks for specific extra fields in log records:
        - 'conflict_video_id': The video that was skipped
        - 'conflict_playlist_name': The local playlist it was meant for
        - 'conflict_video_title': The video title (optional)
        - 'conflict_reason': Why it was skipped

    Only records containing these fields are written to the report.

    Usage:
        log_video_conflict(logger, "Road Trip", "dQw4w9WgXcQ", "Never Gonna...")
    """

    def __init__(self, report_path: Path) -> None:
        super().__init__()
        self.report_path = report_path
        self.report_file: TextIO | None = None

    def open(self) -> None:
        """
        Open the report file for writing.

        Called by setup_logging() after handler is created.
        File is opened in write mode (overwrites existing content).
        """
        self.report_file = open(self.report_path, "w", encoding="utf-8")

    def emit(self, record: logging.LogRecord) -> None:
        if not hasattr(record, "conflict_video_id"):
            return

        if self.report_file is None:
            return

        try:
            playlist_name = getattr(record, "conflict_playlist_name", "Unknown")
            video_id = getattr(record, "conflict_video_id", "")
            title = getattr(record, "conflict_video_title", "") or ""
            reason = getattr(record, "conflict_reason", "")

            self.acquire()
            try:
                self.report_file.write(f"{playlist_name}\n")
                self.report_file.write(f"{video_id}  {title}".rstrip() + "\n")
                self.report_file.write(f"{reason}\n\n")
                self.report_file.flush()
            finally:
                self.release()
        except Exception:
            self.handleError(record)

    def close(self) -> None:
        """
        Close the report file handle.

        Safe to call multiple times.
        """
        if self.report_file is not None:
            try:
                self.report_file.close()
            except OSError:
                pass
            self.report_file = None
        super().close()


class ErrorOnlyFilter(logging.Filter):
    """Filter that only allows ERROR and CRITICAL level records."""

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= logging.ERROR


def setup_logging(output_dir: Path, console_level: int = logging.INFO) -> Path:
    """
    Configure the logging system for the application.

    This function should be called ONCE at application startup, after
    the configuration is loaded but before any other operations.

    Args:
        output_dir: Directory where log files will be created.
                    Logs are stored in a 'logs' subdirectory.
        console_level: Minimum level shown on the console.

    Returns:
        Path: The logs directory that was used.

    Behavior:
        1. Create output_dir/logs if it doesn't exist
        2. Configure root logger level to DEBUG, replacing existing handlers
        3. Console handler (TqdmLoggingHandler, colored)
        4. Full log file handler (DEBUG)
        5. Error log file handler (ERROR+ via ErrorOnlyFilter)
        6. Import conflict report handler

    Thread Safety:
        This function is NOT thread-safe. Call it once from the main
        thread before starting the sync runner.
    """
    logs_dir = output_dir / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    console_handler = TqdmLoggingHandler()
    console_handler.setLevel(console_level)
    console_handler.setFormatter(ColoredConsoleFormatter())
    root_logger.addHandler(console_handler)

    full_handler = logging.FileHandler(logs_dir / f"log_full_{timestamp}.log", mode="w", encoding="utf-8")
    full_handler.setLevel(logging.DEBUG)
    full_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, FILE_DATE_FORMAT))
    root_logger.addHandler(full_handler)

    error_handler = logging.FileHandler(logs_dir / f"log_errors_{timestamp}.log", mode="w", encoding="utf-8")
    error_handler.setLevel(logging.DEBUG)  # Filter handles the level restriction
    error_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, FILE_DATE_FORMAT))
    error_handler.addFilter(ErrorOnlyFilter())
    root_logger.addHandler(error_handler)

    conflict_handler = VideoConflictHandler(logs_dir / f"import_conflicts_{timestamp}.log")
    conflict_handler.open()
    root_logger.addHandler(conflict_handler)

    return logs_dir


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Loggers obtained before setup_logging() is called will have no
    handlers and will not produce output.

    Args:
        name: The logger name, typically __name__ of the calling module.
    """
    return logging.getLogger(name)


def log_video_conflict(
    logger: logging.Logger,
    playlist_name: str,
    video_id: str,
    title: str | None = None,
    reason: str = "Video already in local playlist"
) -> None:
    """
    Log a playlist video that was skipped during import.

    Attaches the extra fields VideoConflictHandler uses to write to
    import_conflicts_<ts>.log. Logged at DEBUG: re-importing an unchanged
    snapshot skips every video, which should not flood the console.

    Example:
        log_video_conflict(logger, "Road Trip", "dQw4w9WgXcQ", "Never Gonna Give You Up")
    """
    logger.debug(
        f"Skipped video {video_id} in playlist '{playlist_name}': {reason}",
        extra={
            "conflict_playlist_name": playlist_name,
            "conflict_video_id": video_id,
            "conflict_video_title": title,
            "conflict_reason": reason,
        }
    )


def format_result_message(operation: str, status: str, message: str) -> str:
    """Format a colored one-line summary of an export or import run."""
    color = {
        "success": Colors.GREEN,
        "skipped": Colors.YELLOW,
        "io_error": Colors.RED,
    }.get(status, Colors.WHITE)
    return f"{operation}: {color}{status}{Colors.RESET} ({message})"


def shutdown_logging() -> None:
    """
    Flush, close and detach every handler on the root logger.

    Typically called in a finally block at application exit.
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        try:
            handler.flush()
            handler.close()
        except (OSError, ValueError):
            pass
        root_logger.removeHandler(handler)
