"""Watcher-specific exceptions."""

from __future__ import annotations

from buildwatch.core.exceptions import BuildWatchException


class ArtifactParseError(BuildWatchException):
    """An artifact file could not be read or is not a JSON object."""


class WatchInstallError(BuildWatchException):
    """The OS refused to install a watch on a directory."""


__all__ = ["ArtifactParseError", "WatchInstallError"]
