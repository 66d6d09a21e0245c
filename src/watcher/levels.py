"""
Cascade levels: each watches one directory and gates the level below it.

Watching a path that doesn't exist yet isn't possible, so every level
watches one directory up and restarts its child when the child's name shows
up in an event. Starting a level always stops it (and everything below)
first, so there's at most one live watch per level.
"""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from typing import Callable, Optional

from .events import LevelState, WatchEventKind, WatchFactory, WatchHandle
from .exceptions import WatchInstallError
from .registry import ArtifactRegistry

logger = logging.getLogger(__name__)


class WatchLevel(ABC):
    """Base for one level of the cascade: an Idle/Active watch on ``path``."""

    level_name = "level"

    def __init__(self, path: str, watch_factory: WatchFactory, child: Optional["WatchLevel"] = None):
        self.path = path
        self.watch_factory = watch_factory
        self.child = child
        self.state = LevelState.IDLE
        self._handle: Optional[WatchHandle] = None

    @property
    def active(self) -> bool:
        return self.state is LevelState.ACTIVE

    @abstractmethod
    def start(self) -> None:
        """Stop this level, then activate it if its path can be watched."""

    def idle(self) -> None:
        """Stop this level and everything below without reactivating."""
        self.stop()
        if self.child is not None:
            self.child.idle()

    def stop(self) -> None:
        """Stop every level below, then this one. Idempotent."""
        if self.child is not None:
            self.child.stop()
        if self._handle is not None:
            self._handle.close()
            self._handle = None
            logger.debug("watch_level_stopped", extra={"level": self.level_name, "path": self.path})
        self.state = LevelState.IDLE

    def live_handles(self) -> int:
        """Open handles at this level and below."""
        own = 1 if self._handle is not None and not self._handle.closed else 0
        return own + (self.child.live_handles() if self.child is not None else 0)

    def _install(self, callback: Callable[[WatchEventKind, str], None]) -> bool:
        try:
            self._handle = self.watch_factory.watch(self.path, callback)
        except WatchInstallError as e:
            logger.warning(
                "watch_install_failed",
                extra={"level": self.level_name, "path": self.path, "error": str(e)},
            )
            return False
        self.state = LevelState.ACTIVE
        logger.debug("watch_level_started", extra={"level": self.level_name, "path": self.path})
        return True


class GatingDirectoryWatcher(WatchLevel):
    """
    Watches a directory and (re)starts its child whenever an entry named
    ``trigger_name`` is created, removed or changed.
    """

    require_exists = True

    def __init__(self, path: str, trigger_name: str, watch_factory: WatchFactory, child: WatchLevel):
        super().__init__(path, watch_factory, child)
        self.trigger_name = trigger_name

    def start(self) -> None:
        self.stop()

        if self.require_exists and not os.path.isdir(self.path):
            logger.info("watch_level_idle", extra={"level": self.level_name, "path": self.path})
            # the leaf reports the now-empty registry
            self.child.idle()
            return

        self._install(self._on_event)
        self.child.start()

    def _on_event(self, kind: WatchEventKind, filename: str) -> None:
        if filename != self.trigger_name:
            return
        logger.info(
            "watch_level_trigger",
            extra={"level": self.level_name, "entry": filename, "event": kind.value},
        )
        self.child.start()


class ParentDirectoryWatcher(GatingDirectoryWatcher):
    """Watches the directory holding the build directory."""

    level_name = "parent"
    # the build level checks existence itself, so start it even if this watch fails
    require_exists = False

    def __init__(self, build_directory: str, watch_factory: WatchFactory, child: WatchLevel):
        build_directory = os.path.normpath(build_directory)
        super().__init__(
            os.path.dirname(build_directory),
            os.path.basename(build_directory),
            watch_factory,
            child,
        )


class BuildDirectoryWatcher(GatingDirectoryWatcher):
    """Watches the build directory for the artifacts subdirectory."""

    level_name = "build"

    def __init__(
        self,
        build_directory: str,
        contracts_build_directory: str,
        watch_factory: WatchFactory,
        child: WatchLevel,
    ):
        super().__init__(
            os.path.normpath(build_directory),
            os.path.basename(os.path.normpath(contracts_build_directory)),
            watch_factory,
            child,
        )


class ContractDirectoryWatcher(WatchLevel):
    """
    Leaf level: keeps the artifact registry in sync with the artifacts directory.

    Every activation re-derives the registry from a full scan, then file
    events apply creations, removals and modifications one at a time.
    ``on_change`` is called once per activation and once per handled event.
    """

    level_name = "contracts"

    def __init__(
        self,
        contracts_build_directory: str,
        registry: ArtifactRegistry,
        watch_factory: WatchFactory,
        on_change: Callable[[], None],
    ):
        super().__init__(os.path.normpath(contracts_build_directory), watch_factory)
        self.registry = registry
        self.on_change = on_change

    def start(self) -> None:
        self.stop()

        if os.path.isdir(self.path):
            try:
                self.registry.scan(self.path)
            except OSError as e:
                logger.warning("artifact_scan_failed", extra={"path": self.path, "error": str(e)})
                self.registry.clear()
            else:
                if not self._install(self._on_event):
                    self.registry.clear()
        else:
            logger.info("watch_level_idle", extra={"level": self.level_name, "path": self.path})

        self.on_change()

    def stop(self) -> None:
        super().stop()
        self.registry.clear()

    def idle(self) -> None:
        self.stop()
        self.on_change()

    def _exists(self, filename: str) -> bool:
        return os.path.isfile(os.path.join(self.path, filename))

    def handle_event(self, kind: WatchEventKind, filename: str) -> bool:
        """
        Apply one file event to the registry.

        Creation and removal events are re-checked against the disk, since
        the OS may coalesce or reorder them.

        Returns:
            True if the registry was touched
        """
        if not self.registry.is_artifact_file(filename):
            return False

        exists = self._exists(filename)
        indexed = filename in self.registry

        if exists and not indexed:
            pos = self.registry.load_file(self.path, filename)
            logger.info("artifact_created", extra={"file": filename, "position": pos})
        elif exists:
            pos = self.registry.load_file(self.path, filename)
            logger.info("artifact_modified", extra={"file": filename, "position": pos})
        elif indexed:
            pos = self.registry.remove(filename)
            logger.info("artifact_deleted", extra={"file": filename, "position": pos})
        else:
            return False
        return True

    def _on_event(self, kind: WatchEventKind, filename: str) -> None:
        if self.handle_event(kind, filename):
            self.on_change()


__all__ = [
    "BuildDirectoryWatcher",
    "ContractDirectoryWatcher",
    "GatingDirectoryWatcher",
    "ParentDirectoryWatcher",
    "WatchLevel",
]
