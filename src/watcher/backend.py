"""watchdog-backed implementation of the watch primitive."""

from __future__ import annotations

import logging
import os
import threading
from typing import Callable, Dict, List, Optional, Set, Tuple

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer
from watchdog.observers.api import ObservedWatch

from .events import WatchCallback, WatchEventKind
from .exceptions import WatchInstallError

logger = logging.getLogger(__name__)

Dispatch = Callable[[Callable[[], None]], None]

_KIND_BY_EVENT_TYPE = {
    "created": WatchEventKind.CREATED,
    "deleted": WatchEventKind.REMOVED,
    "modified": WatchEventKind.CHANGED,
}


def _entry_name(path, directory: str) -> Optional[str]:
    """Return the filename of ``path`` if it is a direct entry of ``directory``."""
    if not path:
        return None
    path = os.path.normpath(os.fsdecode(path))
    if path == directory or os.path.dirname(path) != directory:
        return None
    return os.path.basename(path)


def translate_event(event: FileSystemEvent, directory: str) -> List[Tuple[WatchEventKind, str]]:
    """
    Map a watchdog event to ``(kind, filename)`` pairs for a watched directory.

    Args:
        event: Raw watchdog event
        directory: Normalized absolute path of the watched directory

    Returns:
        Zero, one or two pairs (moves produce a removal and a creation)
    """
    if event.event_type == "moved":
        pairs = []
        src = _entry_name(event.src_path, directory)
        if src is not None:
            pairs.append((WatchEventKind.REMOVED, src))
        dest = _entry_name(getattr(event, "dest_path", ""), directory)
        if dest is not None:
            pairs.append((WatchEventKind.CREATED, dest))
        return pairs

    kind = _KIND_BY_EVENT_TYPE.get(event.event_type)
    name = _entry_name(event.src_path, directory)
    if kind is None or name is None:
        return []
    return [(kind, name)]


class WatchdogHandle:
    """One subscriber on a shared directory watch."""

    def __init__(self, factory: "WatchdogWatchFactory", directory: str, callback: WatchCallback):
        self._factory = factory
        self.directory = directory
        self._callback = callback
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def deliver(self, kind: WatchEventKind, filename: str) -> None:
        # events queued before close() must not reach a torn-down level
        if self._closed:
            return
        self._callback(kind, filename)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._factory._release(self)


class _DirectoryEventHandler(FileSystemEventHandler):
    """Fans watchdog events for one directory out to its handles."""

    def __init__(self, factory: "WatchdogWatchFactory", directory: str):
        super().__init__()
        self.factory = factory
        self.directory = directory

    def on_any_event(self, event: FileSystemEvent) -> None:
        pairs = translate_event(event, self.directory)
        if not pairs:
            return
        for handle in self.factory._handles_for(self.directory):
            for kind, name in pairs:
                self.factory.dispatch(lambda h=handle, k=kind, n=name: h.deliver(k, n))


class WatchdogWatchFactory:
    """
    Watch factory backed by a single watchdog observer.

    Every directory is scheduled at most once, non-recursively; handles on the
    same directory share that watch, which is unscheduled when the last one
    closes. Events arrive on the observer thread and are handed to
    ``dispatch`` (``loop.call_soon_threadsafe`` in the service) so callbacks run
    in the owner's execution context.
    """

    def __init__(self, dispatch: Optional[Dispatch] = None, observer: Optional[Observer] = None):
        """
        Initialize factory.

        Args:
            dispatch: Callable that schedules a zero-arg callback; defaults to
                calling it immediately on the observer thread
            observer: watchdog observer to use (a new one by default)
        """
        self.dispatch: Dispatch = dispatch or (lambda fn: fn())
        self.observer = observer or Observer()
        self._lock = threading.Lock()
        self._watches: Dict[str, ObservedWatch] = {}
        self._handles: Dict[str, Set[WatchdogHandle]] = {}

    def start(self) -> None:
        if not self.observer.is_alive():
            self.observer.start()

    def stop(self) -> None:
        """Unschedule everything and stop the observer thread."""
        with self._lock:
            handles = [h for hs in self._handles.values() for h in hs]
        for handle in handles:
            handle.close()
        if self.observer.is_alive():
            self.observer.stop()
            self.observer.join()

    def watch(self, path: str, callback: WatchCallback) -> WatchdogHandle:
        directory = os.path.normpath(os.path.abspath(path))
        if not os.path.isdir(directory):
            raise WatchInstallError(f"Cannot watch missing directory: {directory}", path=directory)

        self.start()
        handle = WatchdogHandle(self, directory, callback)

        with self._lock:
            if directory not in self._watches:
                try:
                    self._watches[directory] = self.observer.schedule(
                        _DirectoryEventHandler(self, directory), directory, recursive=False
                    )
                except OSError as e:
                    raise WatchInstallError(
                        f"Failed to watch {directory}: {e}", e, path=directory
                    ) from e
                self._handles[directory] = set()
            self._handles[directory].add(handle)

        logger.debug("watch_installed", extra={"path": directory})
        return handle

    def live_handle_count(self) -> int:
        with self._lock:
            return sum(len(hs) for hs in self._handles.values())

    def _handles_for(self, directory: str) -> List[WatchdogHandle]:
        with self._lock:
            return list(self._handles.get(directory, ()))

    def _release(self, handle: WatchdogHandle) -> None:
        with self._lock:
            handles = self._handles.get(handle.directory)
            if handles is None:
                return
            handles.discard(handle)
            if handles:
                return
            del self._handles[handle.directory]
            watch = self._watches.pop(handle.directory)

        try:
            self.observer.unschedule(watch)
        except (KeyError, OSError) as e:
            # the emitter is already gone when the directory itself was removed
            logger.debug("watch_unschedule_skipped", extra={"path": handle.directory, "error": str(e)})
        logger.debug("watch_removed", extra={"path": handle.directory})


__all__ = ["WatchdogHandle", "WatchdogWatchFactory", "translate_event"]
