"""
Logging configuration for teisho-downloader.

This module sets up the logging system with multiple outputs:
    - Console: Real-time progress with tqdm-compatible formatting
    - log_full.log: Complete log of all events (DEBUG and above)
    - log_errors.log: Only ERROR and CRITICAL level messages
    - download_failures.log: Episodes that could not be downloaded, with
      their source URL and the reason, for manual follow-up

Everything shown on screen is also saved to file, then filtered into the
specialized files.

Log File Locations:
    All log files are created in {output_dir}/logs with a per-run timestamp.

Usage:
    from teisho_downloader.core.logger import setup_logging, get_logger

    setup_logging(output_dir)  # Call once at startup
    logger = get_logger(__name__)  # Get logger for each module

    logger.info("Starting download")
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import TextIO

from tqdm import tqdm


# Log file name prefixes (created in output_dir/logs)
LOG_FULL_FILENAME = "log_full"
LOG_ERRORS_FILENAME = "log_errors"
DOWNLOAD_FAILURES_FILENAME = "download_failures"

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
        colored_levelname = f"{color}{record.levelname}{Colors.RESET}"
        return f"{colored_levelname}: {record.getMessage()}"


class TqdmLoggingHandler(logging.Handler):
    """
    Logging handler that writes to console without breaking progress bars.

    Uses tqdm.write(), which prints above any active progress bar instead of
    through it.

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


class DownloadFailedEpisodeHandler(logging.Handler):
    """
    Handler that captures download failures for the download report file.

    This handler listens for log records that carry episode failure
    information and writes them to download_failures.log in a simple,
    human-readable format:

        2009-3-talk.mp3
        http://example.org/podcasts/2009-3-talk.mp3
        Access denied to http://example.org/podcasts/2009-3-talk.mp3

    The handler looks for specific extra fields in log records:
        - 'download_failed_episode_name': The episode filename
        - 'download_failed_episode_url': The last URL tried
        - 'download_failed_reason': Why the download failed

    Only records containing these fields are written to the report.

    Attributes:
        report_path: Path to the download_failures.log file.
        report_file: Open file handle (opened by open()).
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
        if not hasattr(record, "download_failed_episode_name"):
            return

        if self.report_file is None:
            return

        try:
            name = getattr(record, "download_failed_episode_name", "Unknown")
            url = getattr(record, "download_failed_episode_url", "")
            reason = getattr(record, "download_failed_reason", "")

            self.report_file.write(f"{name}\n")
            self.report_file.write(f"{url}\n")
            self.report_file.write(f"{reason}\n\n")
            self.report_file.flush()
        except Exception:
            self.handleError(record)

    def close(self) -> None:
        """
        Close the report file handle.

        Called automatically when logging is shut down.
        Safe to call multiple times.
        """
        if self.report_file is not None:
            try:
                self.report_file.close()
            except Exception:
                pass
            self.report_file = None
        super().close()


class ErrorOnlyFilter(logging.Filter):
    """
    Filter that only allows ERROR and CRITICAL level records.

    Used by the error log file handler to exclude DEBUG, INFO, and WARNING.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= logging.ERROR


def setup_logging(output_dir: Path) -> None:
    """
    Configure the logging system for the application.

    This function should be called ONCE at application startup, after
    the configuration is loaded but before any other operations.

    Args:
        output_dir: Directory where log files will be created.
                    Logs are stored in a 'logs' subdirectory.

    Behavior:
        1. Create output_dir/logs if it doesn't exist
        2. Configure root logger level to DEBUG
        3. Console handler (TqdmLoggingHandler), level INFO, colored
        4. Full log file handler, level DEBUG
        5. Error log file handler, filtered to ERROR+ by ErrorOnlyFilter
        6. Download failures handler (DownloadFailedEpisodeHandler)
    """
    logs_dir = output_dir / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers.clear()

    # Console handler (tqdm-compatible) with colors
    console_handler = TqdmLoggingHandler()
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(ColoredConsoleFormatter())
    root_logger.addHandler(console_handler)

    # Full log file handler
    full_log_path = logs_dir / f"{LOG_FULL_FILENAME}_{timestamp}.log"
    full_handler = logging.FileHandler(full_log_path, mode="w", encoding="utf-8")
    full_handler.setLevel(logging.DEBUG)
    full_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, FILE_DATE_FORMAT))
    root_logger.addHandler(full_handler)

    # Error-only log file handler
    error_log_path = logs_dir / f"{LOG_ERRORS_FILENAME}_{timestamp}.log"
    error_handler = logging.FileHandler(error_log_path, mode="w", encoding="utf-8")
    error_handler.setLevel(logging.DEBUG)  # Filter handles the level restriction
    error_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, FILE_DATE_FORMAT))
    error_handler.addFilter(ErrorOnlyFilter())
    root_logger.addHandler(error_handler)

    # Download failures handler
    download_failures_path = logs_dir / f"{DOWNLOAD_FAILURES_FILENAME}_{timestamp}.log"
    download_handler = DownloadFailedEpisodeHandler(download_failures_path)
    download_handler.open()
    root_logger.addHandler(download_handler)

    # urllib3 logs every connection at DEBUG; keep the full log readable
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: The logger name, typically __name__ of the calling module.

    Returns:
        logging.Logger: A logger instance configured by setup_logging().

    Note:
        Loggers obtained before setup_logging() is called will have no
        handlers and will not produce output.
    """
    return logging.getLogger(name)


def log_download_failure(
    logger: logging.Logger,
    name: str,
    url: str,
    error_message: str
) -> None:
    """
    Log an episode whose download failed.

    Attaches the extra fields DownloadFailedEpisodeHandler picks up, so the
    failure also lands in download_failures.log.

    Args:
        logger: The logger to use for the message.
        name: The episode filename.
        url: The last URL that was tried.
        error_message: Description of why the download failed.

    Example:
        log_download_failure(
            logger,
            name="2009-3-talk.mp3",
            url="http://example.org/2009-3-talk.mp3",
            error_message="Access denied to http://example.org/2009-3-talk.mp3"
        )
    """
    logger.error(
        f"Download failed: {name} - {error_message}",
        extra={
            "download_failed_episode_name": name,
            "download_failed_episode_url": url,
            "download_failed_reason": error_message,
        }
    )


def shutdown_logging() -> None:
    """
    Flush and close every handler on the root logger, then detach them.

    Called from a finally block at application exit.
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        try:
            handler.flush()
            handler.close()
        except Exception:
            pass
        root_logger.removeHandler(handler)
