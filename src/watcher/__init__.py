"""Cascading filesystem watcher for compiled build artifacts."""

from buildwatch.watcher.events import LevelState, WatchEventKind, WatchFactory, WatchHandle
from buildwatch.watcher.exceptions import ArtifactParseError, WatchInstallError
from buildwatch.watcher.levels import (
    BuildDirectoryWatcher,
    ContractDirectoryWatcher,
    ParentDirectoryWatcher,
)
from buildwatch.watcher.project_watcher import PROJECT_DETAILS_UPDATE, ConfigWatcher, ProjectFsWatcher
from buildwatch.watcher.registry import PLACEHOLDER, ArtifactRegistry, read_artifact
from buildwatch.watcher.service import ProjectWatcherService

__all__ = [
    "PLACEHOLDER",
    "PROJECT_DETAILS_UPDATE",
    "ArtifactParseError",
    "ArtifactRegistry",
    "BuildDirectoryWatcher",
    "ConfigWatcher",
    "ContractDirectoryWatcher",
    "LevelState",
    "ParentDirectoryWatcher",
    "ProjectFsWatcher",
    "ProjectWatcherService",
    "WatchEventKind",
    "WatchFactory",
    "WatchHandle",
    "WatchInstallError",
    "read_artifact",
]
