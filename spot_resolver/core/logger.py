"""
Logging configuration for spot-resolver.

This module sets up the logging system with multiple outputs:
    - Console: Colored, tqdm-compatible output
    - log_full.log: Complete log of all events (DEBUG and above)
    - log_errors.log: Only ERROR and CRITICAL level messages
    - match_failures.log: Spotify tracks that could not be matched on the
      search backend and were dropped from a response

File outputs are only created when a log directory is given. A library
host that configures logging itself never needs to call setup_logging();
every module logs through get_logger(__name__).

Usage:
    from spot_resolver.core.logger import setup_logging, get_logger

    setup_logging(Path("./logs"))  # Call once at startup
    logger = get_logger(__name__)

    logger.info("Token renewed")
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import TextIO

from tqdm import tqdm


# Log file name prefixes (suffixed with the run timestamp)
LOG_FULL_FILENAME = "log_full"
LOG_ERRORS_FILENAME = "log_errors"
MATCH_FAILURES_FILENAME = "match_failures"

# Log format for file output (detailed with timestamp)
FILE_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
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
    Formatter that colors the level name for console output.

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
        message = f"{color}{record.levelname}{Colors.RESET}: {record.getMessage()}"
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        return message


class TqdmLoggingHandler(logging.Handler):
    """
    Logging handler that writes through tqdm.write().

    Keeps log lines from breaking any progress bar the CLI has on screen.

    Attributes:
        stream: The output stream (defaults to sys.stderr).
    """

    def __init__(self, stream: TextIO = sys.stderr) -> None:
        super().__init__()
        self.stream = stream

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
            tqdm.write(msg, file=self.stream)
        except Exception:
            self.handleError(record)


class MatchFailedTrackHandler(logging.Handler):
    """
    Handler that writes dropped tracks to the match failures report.

    Listens for log records carrying match failure extras and writes
    them in a simple, human-readable format:

        Artist Name - Song Title
        Query: ytsearch:Artist Name - Song Title
        Reason: No matches found

    The handler looks for these extra fields in log records:
        - 'match_failed_track_name': The Spotify track title
        - 'match_failed_track_artist': The primary artist
        - 'match_failed_query': The backend search identifier
        - 'match_failed_reason': Why the match failed

    Only records containing these fields are written to the report.

    Attributes:
        report_path: Path to the match_failures log file.
        report_file: Open file handle (set by open()).
    """

    def __init__(self, report_path: Path) -> None:
        super().__init__()
        self.report_path = report_path
        self.report_file: TextIO | None = None

    def open(self) -> None:
        """Open the report file for writing (overwrites existing content)."""
        self.report_file = open(self.report_path, "w", encoding="utf-8")

    def emit(self, record: logging.LogRecord) -> None:
        if not hasattr(record, "match_failed_track_name"):
            return

        if self.report_file is None:
            return

        try:
            track_name = getattr(record, "match_failed_track_name", "Unknown")
            artist = getattr(record, "match_failed_track_artist", "Unknown")
            query = getattr(record, "match_failed_query", "")
            reason = getattr(record, "match_failed_reason", "")

            self.report_file.write(f"{artist} - {track_name}\n")
            self.report_file.write(f"Query: {query}\n")
            self.report_file.write(f"Reason: {reason}\n\n")
            self.report_file.flush()
        except Exception:
            self.handleError(record)

    def close(self) -> None:
        """Close the report file handle. Safe to call multiple times."""
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


def setup_logging(log_dir: Path | None = None, level: int = logging.INFO) -> None:
    """
    Configure the logging system for the application.

    This function should be called ONCE at application startup, after
    the configuration is loaded but before the provider is started.

    Args:
        log_dir: Directory for log files. If None, only the console
                 handler is installed.
        level: Minimum level shown on the console.

    Behavior:
        1. Configure root logger level to DEBUG and drop existing handlers
        2. Add console handler (TqdmLoggingHandler + ColoredConsoleFormatter)
        3. If log_dir is given:
           a. Create it if it doesn't exist
           b. Add full log file handler (DEBUG)
           c. Add error-only log file handler (ErrorOnlyFilter)
           d. Add match failures report handler
        4. Quiet aiohttp's access/internal loggers to WARNING
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    for handler in root_logger.handlers[:]:
        handler.close()
    root_logger.handlers.clear()

    console_handler = TqdmLoggingHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(ColoredConsoleFormatter())
    root_logger.addHandler(console_handler)

    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")

        full_handler = logging.FileHandler(
            log_dir / f"{LOG_FULL_FILENAME}_{timestamp}.log", mode="w", encoding="utf-8"
        )
        full_handler.setLevel(logging.DEBUG)
        full_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, FILE_DATE_FORMAT))
        root_logger.addHandler(full_handler)

        error_handler = logging.FileHandler(
            log_dir / f"{LOG_ERRORS_FILENAME}_{timestamp}.log", mode="w", encoding="utf-8"
        )
        error_handler.setLevel(logging.DEBUG)  # Filter handles the level restriction
        error_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, FILE_DATE_FORMAT))
        error_handler.addFilter(ErrorOnlyFilter())
        root_logger.addHandler(error_handler)

        match_handler = MatchFailedTrackHandler(log_dir / f"{MATCH_FAILURES_FILENAME}_{timestamp}.log")
        match_handler.open()
        root_logger.addHandler(match_handler)

    logging.getLogger("aiohttp").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: The logger name, typically __name__ of the calling module.

    Returns:
        logging.Logger: A logger in the spot_resolver hierarchy.
    """
    return logging.getLogger(name)


def format_matched_message(artist: str, title: str, candidate_title: str, rule: str) -> str:
    """Format a 'Matched' message with colors."""
    return (
        f"{Colors.GREEN}Matched{Colors.RESET}: "
        f"{artist} - {title} -> "
        f"{Colors.CYAN}{candidate_title}{Colors.RESET} ({rule})"
    )


def log_match_failure(
    logger: logging.Logger,
    track_name: str,
    artist: str,
    query: str,
    reason: str
) -> None:
    """
    Log a track that was dropped because it could not be matched.

    Attaches the extra fields MatchFailedTrackHandler uses to write
    the match failures report.

    Example:
        log_match_failure(
            logger,
            track_name="Song Title",
            artist="Artist Name",
            query="ytsearch:Artist Name - Song Title",
            reason="No matches found"
        )
    """
    logger.warning(
        f"{Colors.RED}No match{Colors.RESET}: {artist} - {track_name} ({reason})",
        extra={
            "match_failed_track_name": track_name,
            "match_failed_track_artist": artist,
            "match_failed_query": query,
            "match_failed_reason": reason,
        }
    )


def shutdown_logging() -> None:
    """
    Flush and close every handler on the root logger, then remove them.

    Typically called in a finally block at CLI exit.
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        try:
            handler.flush()
            handler.close()
        except OSError:
            pass
        root_logger.removeHandler(handler)
