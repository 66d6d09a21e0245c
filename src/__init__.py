"""buildwatch: keep a live in-memory view of a project's compiled build artifacts."""

from buildwatch.watcher import PROJECT_DETAILS_UPDATE, ProjectFsWatcher, ProjectWatcherService

__all__ = ["PROJECT_DETAILS_UPDATE", "ProjectFsWatcher", "ProjectWatcherService"]
