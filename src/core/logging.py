"""Logging: console configuration."""

from __future__ import annotations

import logging
import os
from typing import Optional


def configure_logging(log_level: Optional[str] = None) -> None:
    """Configure console logging for the watcher process.

    Args:
        log_level: Optional log level override (e.g., "INFO", "DEBUG").
    """
    level_name = (log_level or os.getenv("LOG_LEVEL", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        force=True,
    )

    # watchdog logs every inotify event at DEBUG
    logging.getLogger("watchdog").setLevel(max(level, logging.INFO))


__all__ = ["configure_logging"]
