"""Config-specific exceptions."""

from __future__ import annotations

from buildwatch.core.exceptions import BuildWatchException


class ConfigError(BuildWatchException):
    """Raised when project configuration load, parsing, or validation fails."""

    pass


ConfigLoadError = ConfigError

__all__ = ["ConfigError", "ConfigLoadError"]
