"""Base exception for the build artifact watcher."""

from __future__ import annotations

from typing import Optional


class BuildWatchException(Exception):
    """Root of every error raised by buildwatch.

    Most failures concern one filesystem location (a config file, an
    artifact, a directory that can't be watched), so the offending path
    travels with the error for log context.

    Attributes:
        path: Filesystem path the error is about, when there is one
        original_error: Lower-level exception (OSError, JSON or validation
            error) that triggered this one
    """

    def __init__(
        self,
        message: str,
        original_error: Exception | None = None,
        *,
        path: Optional[str] = None,
    ):
        super().__init__(message)
        self.original_error = original_error
        self.path = path


__all__ = ["BuildWatchException"]
