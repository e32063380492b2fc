"""Logging setup for the work hours tracker."""

from __future__ import annotations

import logging
import os
from pathlib import Path

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-9s :: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _get_log_path() -> Path:
    """Get log file path from environment variable or default location."""
    if env_path := os.environ.get("WORKHOURS_LOG"):
        return Path(env_path)
    return Path(__file__).parent / "data" / "workhours.log"


def debug_enabled() -> bool:
    return os.environ.get("WORKHOURS_DEBUG", "").lower() in ("1", "true", "yes")


def setup_logger(name: str, debug: bool = False) -> logging.Logger:
    """Configure a named logger writing to the log file.

    The terminal belongs to the TUI, so records go to a file rather than a
    stream handler.

    Args:
        name: Logger name (e.g., "WorkHours", "Storage")
        debug: Whether to enable DEBUG level logging

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    # Only configure if not already configured
    if not logger.handlers:
        log_path = _get_log_path()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_path, encoding="utf-8")
        handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
        logger.addHandler(handler)

    logger.setLevel(logging.DEBUG if debug else logging.INFO)
    return logger
