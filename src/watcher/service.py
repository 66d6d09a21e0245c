"""
Runtime service: runs a ProjectFsWatcher on the asyncio event loop.

watchdog delivers events on its observer thread; the service hands them to
the loop with ``call_soon_threadsafe`` so the cascade and the registry are
only ever touched from the loop.
"""

import asyncio
import logging
from typing import Optional

from buildwatch.config.exceptions import ConfigError
from buildwatch.config.project import load_project
from buildwatch.config.settings import WatcherSettings, load_settings
from buildwatch.core.logging import configure_logging

from .backend import WatchdogWatchFactory
from .project_watcher import Listener, ProjectFsWatcher

logger = logging.getLogger(__name__)


class ProjectWatcherService:
    """
    Service that runs the project watcher.
    """

    def __init__(self, settings: Optional[WatcherSettings] = None, listener: Optional[Listener] = None):
        """
        Initialize watcher service.

        Args:
            settings: Watcher settings (loaded from the environment by default)
            listener: Optional snapshot listener subscribed on start
        """
        self.settings = settings or load_settings()
        self.listener = listener
        self.factory: Optional[WatchdogWatchFactory] = None
        self.watcher: Optional[ProjectFsWatcher] = None
        self._stopped: Optional[asyncio.Event] = None

    @property
    def running(self) -> bool:
        return self.watcher is not None

    async def start(self) -> None:
        """Start the cascade.

        Raises:
            ConfigError: If the initial configuration can't be loaded
        """
        if not self.settings.watcher_enabled:
            logger.info("watcher_disabled")
            return

        loop = asyncio.get_running_loop()
        self._stopped = asyncio.Event()

        try:
            project = load_project(self.settings.config_file)
        except ConfigError as e:
            logger.error(
                "project_load_failed",
                extra={"config_file": self.settings.config_file, "error": str(e)},
            )
            raise

        self.factory = WatchdogWatchFactory(dispatch=loop.call_soon_threadsafe)
        self.factory.start()

        self.watcher = ProjectFsWatcher(
            project,
            network_id=self.settings.network_id,
            watch_factory=self.factory,
            scheduler=loop.call_later,
            config_debounce_seconds=self.settings.config_debounce_seconds,
            artifact_extension=self.settings.artifact_extension,
        )
        if self.listener is not None:
            self.watcher.subscribe(self.listener)
        self.watcher.start()

        logger.info(
            "watcher_service_started",
            extra={"config_file": project.config_file, "network_id": self.settings.network_id},
        )

    async def stop(self) -> None:
        """Stop the cascade and the observer thread."""
        if self.watcher is not None:
            self.watcher.stop()
            self.watcher = None

        if self.factory is not None:
            # join() blocks until the observer thread exits
            await asyncio.get_running_loop().run_in_executor(None, self.factory.stop)
            self.factory = None

        if self._stopped is not None:
            self._stopped.set()

        logger.info("watcher_service_stopped")

    async def run_forever(self) -> None:
        """Configure logging, start, and wait until ``stop()`` is called."""
        configure_logging(self.settings.log_level)
        await self.start()
        if self._stopped is None:
            return
        try:
            await self._stopped.wait()
        finally:
            if self.running:
                await self.stop()


__all__ = ["ProjectWatcherService"]
