"""
Logging configuration module.

Colored console output on stdout plus an optional plain-text log file.
"""

import logging
import os
import re
import sys
from pathlib import Path


class Colors:
    """ANSI escape sequences for terminal colors."""
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"
    WHITE = "\033[37m"
    CYAN = "\033[36m"
    YELLOW = "\033[33m"
    BRIGHT_RED = "\033[91m"
    BG_RED = "\033[41m"


class ColoredFormatter(logging.Formatter):
    """
    Formatter that colors the level name and dims the logger name.

    Colors:
        DEBUG    - Dim
        INFO     - Cyan
        WARNING  - Yellow
        ERROR    - Red
        CRITICAL - Bold white on red
    """

    LEVEL_COLORS = {
        logging.DEBUG: Colors.DIM + Colors.WHITE,
        logging.INFO: Colors.CYAN,
        logging.WARNING: Colors.YELLOW,
        logging.ERROR: Colors.BRIGHT_RED,
        logging.CRITICAL: Colors.BOLD + Colors.WHITE + Colors.BG_RED,
    }

    def __init__(self, fmt: str, datefmt: str | None = None, use_colors: bool = True):
        super().__init__(fmt, datefmt)
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        if not self.use_colors:
            return super().format(record)

        # Other handlers share the record, so restore it afterwards
        levelname, name = record.levelname, record.name
        color = self.LEVEL_COLORS.get(record.levelno, Colors.WHITE)
        record.levelname = f"{color}{record.levelname:8}{Colors.RESET}"
        record.name = f"{Colors.DIM}{record.name}{Colors.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname, record.name = levelname, name


class PasswordMaskFilter(logging.Filter):
    """Masks PWD=... values in case a connection string reaches a log call."""

    PATTERN = re.compile(r"(PWD=)(\{(?:[^}]|\}\})*\}|[^;\s]*)", re.IGNORECASE)

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        masked = self.PATTERN.sub(r"\1***", message)
        if masked != message:
            record.msg = masked
            record.args = None
        return True


def _use_colors() -> bool:
    """Colors only on a real terminal and when NO_COLOR is not set."""
    if os.environ.get("NO_COLOR"):
        return False
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def setup_logging(level: int = logging.INFO, log_file: str | None = None) -> None:
    """
    Configure application-wide logging.

    Args:
        level: Console logging level (logging.DEBUG with --verbose)
        log_file: Optional path to log file; always written at DEBUG
    """
    mask = PasswordMaskFilter()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(ColoredFormatter(
        fmt='[%(asctime)s] %(levelname)s [%(name)s] %(message)s',
        datefmt='%H:%M:%S',
        use_colors=_use_colors()
    ))
    console_handler.setLevel(level)
    console_handler.addFilter(mask)

    handlers: list[logging.Handler] = [console_handler]

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding='utf-8')
        file_handler.setFormatter(logging.Formatter(
            fmt='[%(asctime)s] %(levelname)-8s [%(name)s] %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        file_handler.setLevel(logging.DEBUG)
        file_handler.addFilter(mask)
        handlers.append(file_handler)

    logging.basicConfig(
        level=logging.DEBUG,  # Capture all levels, handlers filter
        handlers=handlers,
        force=True
    )

    # Reduce noise from libraries
    logging.getLogger('pyodbc').setLevel(logging.WARNING)

    logger = logging.getLogger(__name__)
    logger.debug("Log level: %s", logging.getLevelName(level))
    if log_file:
        logger.debug("Log file: %s", log_file)
