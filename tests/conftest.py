"""Shared fixtures: an in-memory watch factory and on-disk project trees."""

import json
import os

import pytest

from buildwatch.config.project import load_project
from buildwatch.watcher.exceptions import WatchInstallError


class FakeHandle:
    def __init__(self, factory, path, callback):
        self.factory = factory
        self.path = path
        self.callback = callback
        self._closed = False

    @property
    def closed(self):
        return self._closed

    def close(self):
        self._closed = True


class FakeWatchFactory:
    """Records every handle; tests fire events synchronously with ``fire``."""

    def __init__(self):
        self.handles = []
        self.fail_paths = set()

    def watch(self, path, callback):
        path = os.path.normpath(path)
        if path in self.fail_paths:
            raise WatchInstallError(f"Permission denied: {path}", path=path)
        if not os.path.isdir(path):
            raise WatchInstallError(f"Cannot watch missing directory: {path}", path=path)
        handle = FakeHandle(self, path, callback)
        self.handles.append(handle)
        return handle

    def live(self, path=None):
        return [
            h
            for h in self.handles
            if not h.closed and (path is None or h.path == os.path.normpath(str(path)))
        ]

    def fire(self, path, kind, filename):
        for handle in self.live(path):
            if not handle.closed:
                handle.callback(kind, filename)


class FakeScheduler:
    """``call_later`` stand-in; timers run only when ``run_all`` is called."""

    class Timer:
        def __init__(self, delay, fn):
            self.delay = delay
            self.fn = fn
            self.cancelled = False

        def cancel(self):
            self.cancelled = True

    def __init__(self):
        self.timers = []

    def __call__(self, delay, fn):
        timer = self.Timer(delay, fn)
        self.timers.append(timer)
        return timer

    def pending(self):
        return [t for t in self.timers if not t.cancelled]

    def run_all(self):
        for timer in self.pending():
            timer.cancelled = True
            timer.fn()


def write_artifact(directory, filename, networks=None, **fields):
    """Write an artifact JSON file and return its path."""
    os.makedirs(directory, exist_ok=True)
    data = {"contractName": os.path.splitext(filename)[0], "networks": networks or {}}
    data.update(fields)
    path = os.path.join(directory, filename)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f)
    return path


def write_config(path, **values):
    with open(path, "w", encoding="utf-8") as f:
        json.dump(values, f)
    return str(path)


@pytest.fixture
def factory():
    return FakeWatchFactory()


@pytest.fixture
def scheduler():
    return FakeScheduler()


@pytest.fixture
def project_root(tmp_path):
    """Project directory with a config file and no build output yet."""
    write_config(tmp_path / "truffle-config.json")
    return tmp_path


@pytest.fixture
def project(project_root):
    return load_project(str(project_root / "truffle-config.json"))


@pytest.fixture
def contracts_dir(project_root):
    return str(project_root / "build" / "contracts")
