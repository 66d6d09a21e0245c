"""Watch primitives shared by every level of the cascade."""

from __future__ import annotations

from enum import Enum
from typing import Callable, Protocol


class WatchEventKind(str, Enum):
    """Kind of change reported for an entry of a watched directory."""

    CREATED = "created"
    REMOVED = "removed"
    CHANGED = "changed"


class LevelState(str, Enum):
    """Lifecycle of one cascade level."""

    IDLE = "idle"
    ACTIVE = "active"


WatchCallback = Callable[[WatchEventKind, str], None]


class WatchHandle(Protocol):
    """Live watch on one directory."""

    @property
    def closed(self) -> bool: ...

    def close(self) -> None:
        """Stop delivering events. Safe to call more than once."""
        ...


class WatchFactory(Protocol):
    """Installs non-recursive directory watches.

    Callbacks receive the event kind and the bare filename of the affected
    entry, and are delivered in the owner's single execution context.
    Implementations raise ``WatchInstallError`` when the path can't be watched.
    """

    def watch(self, path: str, callback: WatchCallback) -> WatchHandle: ...


__all__ = ["LevelState", "WatchCallback", "WatchEventKind", "WatchFactory", "WatchHandle"]
