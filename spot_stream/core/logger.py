"""
Logging configuration for spot-stream.

The library itself only obtains loggers through get_logger() and never
installs handlers. Applications (and the bundled CLI) call setup_logging()
once at startup to get:
    - Console: coloured, tqdm-compatible output
    - Optional log file: every record at DEBUG and above with timestamps

Usage:
    from spot_stream.core.logger import setup_logging, get_logger

    setup_logging("DEBUG", log_file=Path("spot-stream.log"))
    logger = get_logger(__name__)
    logger.info("Resolving track")
"""

import logging
import sys
from pathlib import Path
from typing import TextIO

from tqdm import tqdm


# Log format for file output (detailed with timestamp)
FILE_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
FILE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that are far too chatty at DEBUG
NOISY_LOGGERS = ("urllib3", "asyncio", "yt_dlp", "ytmusicapi", "aiohttp")


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
    Formatter that prefixes each message with a coloured level name.

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
        message = f"{colored_levelname}: {record.getMessage()}"
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        return message


class TqdmLoggingHandler(logging.Handler):
    """
    Logging handler that writes through tqdm.write().

    The CLI shows a byte progress bar while a stream is saved to disk.
    Writing log lines straight to stderr would tear that bar apart;
    tqdm.write() prints above any active bar instead.

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


def setup_logging(level: str | int = "INFO", log_file: Path | None = None) -> None:
    """
    Configure the root logger for an application using spot-stream.

    Should be called ONCE at application startup. Calling it again
    replaces the previously installed handlers.

    Args:
        level: Console log level name or number (e.g. "DEBUG", logging.INFO).
        log_file: Optional path of a log file. When given, every record at
                  DEBUG and above is also written there (overwritten per run).
                  Parent directories are created as needed.

    Behavior:
        1. Set root logger level to DEBUG (handlers filter individually)
        2. Remove existing handlers
        3. Add TqdmLoggingHandler with ColoredConsoleFormatter at `level`
        4. Add a FileHandler with the detailed format if log_file is set
        5. Quieten noisy third-party loggers
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    console_handler = TqdmLoggingHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(ColoredConsoleFormatter())
    root_logger.addHandler(console_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, FILE_DATE_FORMAT))
        root_logger.addHandler(file_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: The logger name, typically __name__ of the calling module.
              This creates a hierarchy like 'spot_stream.resolver'.

    Returns:
        logging.Logger: A logger instance. Until setup_logging() (or the
        host application's own logging setup) runs, records only reach
        Python's last-resort handler (WARNING and above).
    """
    return logging.getLogger(name)


def format_matched_message(artist: str, title: str, url: str) -> str:
    """Format a coloured 'Matched' line for console output."""
    return (
        f"{Colors.GREEN}Matched{Colors.RESET}: "
        f"{artist} - {title} -> "
        f"{Colors.CYAN}{url}{Colors.RESET}"
    )


def shutdown_logging() -> None:
    """
    Flush and close every handler on the root logger.

    Typically called in a finally block at application exit.
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        try:
            handler.flush()
            handler.close()
        except Exception:
            pass
        root_logger.removeHandler(handler)
