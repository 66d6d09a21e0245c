"""Configuration module for the build artifact watcher."""

from buildwatch.config.exceptions import ConfigError, ConfigLoadError
from buildwatch.config.project import ProjectConfig, ProjectDescriptor, load_project
from buildwatch.config.settings import WatcherSettings, load_settings

__all__ = [
    "ConfigError",
    "ConfigLoadError",
    "ProjectConfig",
    "ProjectDescriptor",
    "WatcherSettings",
    "load_project",
    "load_settings",
]
