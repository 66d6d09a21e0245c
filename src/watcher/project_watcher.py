"""Top of the cascade: configuration watch, orchestration and snapshot fan-out."""

from __future__ import annotations

import logging
import os
from typing import Any, Callable, List, Optional, Protocol

from buildwatch.config.exceptions import ConfigError
from buildwatch.config.project import ProjectDescriptor, load_project

from .events import WatchEventKind, WatchFactory
from .levels import (
    BuildDirectoryWatcher,
    ContractDirectoryWatcher,
    ParentDirectoryWatcher,
    WatchLevel,
)
from .registry import ArtifactRegistry

logger = logging.getLogger(__name__)

PROJECT_DETAILS_UPDATE = "project-details-update"

Listener = Callable[[ProjectDescriptor], None]
ConfigLoader = Callable[[str], ProjectDescriptor]


class Cancellable(Protocol):
    def cancel(self) -> Any: ...


# asyncio's loop.call_later fits this signature
Scheduler = Callable[[float, Callable[[], None]], Cancellable]


class ConfigWatcher(WatchLevel):
    """
    Watches the project configuration file.

    The watch sits on the file's directory so deletions and atomic replaces
    are seen too. Each burst of events triggers one ``on_change`` call after
    ``debounce_seconds`` when a scheduler is given, or one call per event
    otherwise.
    """

    level_name = "config"

    def __init__(
        self,
        config_file: str,
        watch_factory: WatchFactory,
        on_change: Callable[[], None],
        scheduler: Optional[Scheduler] = None,
        debounce_seconds: float = 0.0,
    ):
        config_file = os.path.abspath(config_file)
        super().__init__(os.path.dirname(config_file), watch_factory)
        self.config_file = config_file
        self.filename = os.path.basename(config_file)
        self.on_change = on_change
        self.scheduler = scheduler
        self.debounce_seconds = debounce_seconds
        self._pending: Optional[Cancellable] = None

    def start(self) -> None:
        self.stop()
        self._install(self._on_event)
        if self.child is not None:
            self.child.start()

    def stop(self) -> None:
        self._cancel_pending()
        super().stop()

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _on_event(self, kind: WatchEventKind, filename: str) -> None:
        if filename != self.filename:
            return
        logger.info("config_file_changed", extra={"file": self.config_file, "event": kind.value})

        if self.scheduler is None or self.debounce_seconds <= 0:
            self.on_change()
            return

        self._cancel_pending()
        self._pending = self.scheduler(self.debounce_seconds, self._fire)

    def _fire(self) -> None:
        self._pending = None
        if self.active:
            self.on_change()


class ProjectFsWatcher:
    """
    Live view of a project's compiled artifacts.

    Owns the project descriptor, the artifact registry and the cascade
    config → parent directory → build directory → artifacts directory.
    All callbacks are expected in one execution context; nothing here locks.
    """

    def __init__(
        self,
        project: ProjectDescriptor,
        network_id: Optional[str] = None,
        watch_factory: Optional[WatchFactory] = None,
        loader: ConfigLoader = load_project,
        scheduler: Optional[Scheduler] = None,
        config_debounce_seconds: float = 0.0,
        artifact_extension: str = ".json",
    ):
        """
        Initialize the watcher. Nothing is watched until ``start()``.

        Args:
            project: Initial project descriptor
            network_id: Network used to decorate artifacts with address/tx hash
            watch_factory: Watch primitive (watchdog-backed by default)
            loader: Configuration loader used on config file changes
            scheduler: ``call_later``-style scheduler for config debouncing
            config_debounce_seconds: Debounce delay for config reloads
            artifact_extension: Extension of artifact files
        """
        if watch_factory is None:
            from .backend import WatchdogWatchFactory

            watch_factory = WatchdogWatchFactory()

        self.project = project
        self.network_id = None if network_id is None else str(network_id)
        self.watch_factory = watch_factory
        self.loader = loader
        self.registry = ArtifactRegistry(self.network_id, artifact_extension)
        self._listeners: List[Listener] = []

        self.config_watcher = ConfigWatcher(
            project.config_file,
            watch_factory,
            self.reload_config,
            scheduler=scheduler,
            debounce_seconds=config_debounce_seconds,
        )
        self.config_watcher.child = self._build_cascade(project)

    def _build_cascade(self, project: ProjectDescriptor) -> WatchLevel:
        config = project.config
        contracts = ContractDirectoryWatcher(
            config.contracts_build_directory, self.registry, self.watch_factory, self._emit
        )
        build = BuildDirectoryWatcher(
            config.build_directory, config.contracts_build_directory, self.watch_factory, contracts
        )
        return ParentDirectoryWatcher(config.build_directory, self.watch_factory, build)

    @property
    def parent_watcher(self) -> ParentDirectoryWatcher:
        return self.config_watcher.child

    @property
    def build_watcher(self) -> BuildDirectoryWatcher:
        return self.parent_watcher.child

    @property
    def contracts_watcher(self) -> ContractDirectoryWatcher:
        return self.build_watcher.child

    def start(self) -> None:
        """Run the whole cascade once; restarts it if already running."""
        logger.info(
            "project_watcher_started",
            extra={"config_file": self.project.config_file, "network_id": self.network_id},
        )
        self.config_watcher.start()

    def stop(self) -> None:
        """Tear down every level. Safe to call more than once."""
        self.config_watcher.stop()
        logger.info("project_watcher_stopped", extra={"config_file": self.project.config_file})

    def live_handles(self) -> int:
        return self.config_watcher.live_handles()

    def reload_config(self) -> None:
        """
        Reload the configuration and rebuild the cascade below the config level.

        A failing load keeps the previous descriptor and the running cascade.
        """
        try:
            project = self.loader(self.project.config_file)
        except ConfigError as e:
            logger.warning(
                "config_reload_failed",
                extra={"config_file": self.project.config_file, "error": str(e)},
            )
            return

        self.config_watcher.child.stop()
        self.project = project
        self.config_watcher.child = self._build_cascade(project)
        logger.info(
            "config_reloaded",
            extra={
                "config_file": project.config_file,
                "build_directory": project.config.build_directory,
            },
        )
        self.config_watcher.child.start()

    def get_snapshot(self) -> ProjectDescriptor:
        """Deep copy of the descriptor holding only successfully parsed artifacts."""
        return self.project.model_copy(deep=True, update={"contracts": self.registry.artifacts()})

    def subscribe(self, listener: Listener, event: str = PROJECT_DETAILS_UPDATE) -> Callable[[], None]:
        """
        Register ``listener`` for snapshot updates.

        Returns:
            Callable that removes the listener
        """
        if event != PROJECT_DETAILS_UPDATE:
            raise ValueError(f"Unknown event '{event}', expected '{PROJECT_DETAILS_UPDATE}'")
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self) -> None:
        logger.debug(
            PROJECT_DETAILS_UPDATE,
            extra={"slots": len(self.registry), "listeners": len(self._listeners)},
        )
        for listener in list(self._listeners):
            # each listener owns its copy
            try:
                listener(self.get_snapshot())
            except Exception as e:
                logger.exception("snapshot_listener_failed", extra={"error": str(e)})


__all__ = ["PROJECT_DETAILS_UPDATE", "ConfigWatcher", "ProjectFsWatcher"]
