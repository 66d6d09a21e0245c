"""Core module: logging and exceptions."""

from buildwatch.core.exceptions import BuildWatchException
from buildwatch.core.logging import configure_logging

__all__ = ["BuildWatchException", "configure_logging"]
