"""
Structured Logging for CookieSec

One JSON object per line in ~/.cookiesec/logs/cookiesec.log (rotated), so a
run can be traced page by page without touching the report itself. With
--verbose, INFO and above are echoed to stderr as plain text.
"""

import json
import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional

LOG_FILE_NAME = "cookiesec.log"
LOG_MAX_BYTES = 5 * 1024 * 1024
LOG_BACKUP_COUNT = 3

# `extra=` keys copied into the JSON record when present
EXTRA_FIELDS = ("url", "cookie_count", "attribute_source", "format")

_CONSOLE_FORMAT = "[%(levelname)s] %(name)s: %(message)s"


class JSONFormatter(logging.Formatter):
    """Format logs as JSON for machine parsing."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in EXTRA_FIELDS:
            if hasattr(record, field):
                log_data[field] = getattr(record, field)
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def default_log_dir() -> Path:
    return Path.home() / ".cookiesec" / "logs"


def _file_handler(log_dir: Path) -> logging.Handler:
    """Rotating JSON file handler. Raises OSError if the directory is unusable."""
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        log_dir / LOG_FILE_NAME,
        maxBytes=LOG_MAX_BYTES,
        backupCount=LOG_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(JSONFormatter())
    return handler


def _stderr_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
    return handler


def setup_logging(verbose: bool = False, log_dir: Optional[Path] = None) -> logging.Logger:
    """
    Configure the "cookiesec" logger tree.

    Args:
        verbose: Also echo INFO and above to stderr (--verbose)
        log_dir: Directory for the log file (default: ~/.cookiesec/logs)

    Returns:
        The "cookiesec" logger

    If the log file can't be opened, warnings still reach stderr and the run
    carries on.
    """
    root_logger = logging.getLogger("cookiesec")
    root_logger.handlers.clear()
    console_level = logging.INFO if verbose else logging.WARNING

    try:
        root_logger.addHandler(_file_handler(log_dir or default_log_dir()))
    except OSError as e:
        root_logger.setLevel(console_level)
        root_logger.addHandler(_stderr_handler(console_level))
        if verbose:
            root_logger.warning(f"Could not open log file, logging to stderr only: {e}")
        return root_logger

    root_logger.setLevel(logging.DEBUG)
    if verbose:
        root_logger.addHandler(_stderr_handler(console_level))

    root_logger.debug("CookieSec logging initialized")
    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a specific module."""
    return logging.getLogger(f"cookiesec.{name}")
