"""Logging bootstrap for the torctl namespace."""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

logger = logging.getLogger(__name__)


def configure_logging(
    level: int = logging.WARNING,
    log_file: Path | None = None,
    file_level: int = logging.DEBUG,
) -> None:
    """Configure handlers for the ``torctl`` logger namespace.

    Library code only ever calls ``logging.getLogger(__name__)``; this is for
    entry points (the CLI) that want output.

    Args:
        level: Level for the stderr handler.
        log_file: Optional path for a rotating log file (max 5MB, 3 backups).
            Its parent directory is created if missing.
        file_level: Level for the file handler.
    """
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    ))

    torctl_logger = logging.getLogger("torctl")

    # Remove any existing handlers to avoid duplicates on reconfigure
    torctl_logger.handlers.clear()
    torctl_logger.addHandler(console_handler)
    effective_level = level

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=5 * 1024 * 1024,  # 5MB
            backupCount=3,
            encoding="utf-8",
        )
        file_handler.setLevel(file_level)
        file_handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        ))
        torctl_logger.addHandler(file_handler)
        effective_level = min(level, file_level)

    torctl_logger.setLevel(effective_level)

    # Don't propagate to root logger
    torctl_logger.propagate = False

    if log_file is not None:
        logger.info("Logging to file: %s", log_file)
