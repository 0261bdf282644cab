"""Structured logging infrastructure.

Usage:
    from live_football.utils import get_logger

    logger = get_logger(__name__)
    logger.info("Polling match 1234")
    logger.error("Odds fetch failed", exc_info=True)
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from ..config import get_settings

# Track if logging has been set up
_logging_configured = False


class ColoredFormatter(logging.Formatter):
    """Formatter that adds colors for terminal output."""

    COLORS = {
        "DEBUG": "\033[36m",     # Cyan
        "INFO": "\033[32m",      # Green
        "WARNING": "\033[33m",   # Yellow
        "ERROR": "\033[31m",     # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, "")
        record.levelname_colored = f"{color}{record.levelname:8}{self.RESET}"
        return super().format(record)


def setup_logging(
    name: str = "live_football",
    level: Optional[str] = None,
    log_to_file: Optional[bool] = None,
    log_dir: Optional[Path] = None,
) -> logging.Logger:
    """Configure logging with console and optional daily file output.

    Args:
        name: Logger name (usually module __name__)
        level: Log level (DEBUG, INFO, WARNING, ERROR). Defaults to settings.
        log_to_file: Whether to write to file. Defaults to settings.
        log_dir: Directory for log files. Defaults to settings.

    Returns:
        Configured logger instance
    """
    global _logging_configured

    settings = get_settings()

    level = level or settings.log_level
    log_to_file = log_to_file if log_to_file is not None else settings.log_to_file
    log_dir = log_dir or settings.logs_dir

    logger = logging.getLogger(name)

    if not _logging_configured:
        root_logger = logging.getLogger()
        root_logger.setLevel(logging.DEBUG)  # Capture all, filter at handler level

        # Console goes to stderr so CLI tables on stdout stay clean
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(getattr(logging, level.upper()))
        console_handler.setFormatter(ColoredFormatter(
            "%(asctime)s | %(levelname_colored)s | %(name)s | %(message)s",
            datefmt="%H:%M:%S"
        ))
        root_logger.addHandler(console_handler)

        if log_to_file:
            log_dir.mkdir(parents=True, exist_ok=True)
            log_file = log_dir / f"live_football_{datetime.now():%Y-%m-%d}.log"

            file_handler = logging.FileHandler(log_file, encoding="utf-8")
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(logging.Formatter(
                "%(asctime)s | %(levelname)-8s | %(name)s | %(funcName)s:%(lineno)d | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S"
            ))
            root_logger.addHandler(file_handler)

        _logging_configured = True
    elif level:
        # Re-running setup (e.g. CLI --verbose) only adjusts console verbosity
        for handler in logging.getLogger().handlers:
            if isinstance(handler, logging.StreamHandler) and not isinstance(handler, logging.FileHandler):
                handler.setLevel(getattr(logging, level.upper()))

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger for the given module name.

    This is the primary interface for getting loggers throughout the codebase.
    It ensures logging is set up before returning the logger.
    """
    if not _logging_configured:
        setup_logging()

    return logging.getLogger(name)
