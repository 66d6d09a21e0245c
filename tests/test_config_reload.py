"""Tests for configuration reloads at the top of the cascade."""

import os

from buildwatch.config.exceptions import ConfigError
from buildwatch.watcher import LevelState, ProjectFsWatcher, WatchEventKind

from conftest import write_artifact, write_config

CONFIG_NAME = "truffle-config.json"


def _names(snapshot):
    return [c["contractName"] for c in snapshot.contracts]


def test_reload_rebuilds_cascade_on_new_build_directory(project, project_root, factory):
    write_artifact(str(project_root / "build" / "contracts"), "Old.json")
    write_artifact(str(project_root / "out" / "artifacts"), "New.json")

    watcher = ProjectFsWatcher(project, watch_factory=factory)
    updates = []
    watcher.subscribe(updates.append)
    watcher.start()
    assert _names(updates[-1]) == ["Old"]

    write_config(
        project_root / CONFIG_NAME,
        build_directory="out",
        contracts_build_directory="out/artifacts",
    )
    factory.fire(project_root, WatchEventKind.CHANGED, CONFIG_NAME)

    assert watcher.project.config.build_directory == str(project_root / "out")
    assert _names(updates[-1]) == ["New"]
    assert _names(watcher.get_snapshot()) == ["New"]
    assert factory.live(project_root / "build") == []
    assert factory.live(project_root / "build" / "contracts") == []
    assert len(factory.live(project_root / "out" / "artifacts")) == 1
    # config + parent + build + contracts
    assert watcher.live_handles() == 4


def test_reload_failure_keeps_previous_descriptor(project, project_root, factory):
    contracts_dir = str(project_root / "build" / "contracts")
    write_artifact(contracts_dir, "A.json")

    watcher = ProjectFsWatcher(project, watch_factory=factory)
    watcher.start()
    live_before = factory.live()

    with open(project_root / CONFIG_NAME, "w") as f:
        f.write("{ nope")
    factory.fire(project_root, WatchEventKind.CHANGED, CONFIG_NAME)

    assert watcher.project is project
    assert factory.live() == live_before
    assert _names(watcher.get_snapshot()) == ["A"]


def test_config_deleted_keeps_cascade_running(project, project_root, factory):
    contracts_dir = str(project_root / "build" / "contracts")
    write_artifact(contracts_dir, "A.json")
    watcher = ProjectFsWatcher(project, watch_factory=factory)
    watcher.start()

    os.remove(project_root / CONFIG_NAME)
    factory.fire(project_root, WatchEventKind.REMOVED, CONFIG_NAME)

    assert watcher.contracts_watcher.active
    assert _names(watcher.get_snapshot()) == ["A"]

    write_config(project_root / CONFIG_NAME)
    factory.fire(project_root, WatchEventKind.CREATED, CONFIG_NAME)

    assert watcher.project is not project
    assert _names(watcher.get_snapshot()) == ["A"]


def test_other_files_next_to_config_are_ignored(project, project_root, factory):
    calls = []

    def loader(path):
        calls.append(path)
        return project

    watcher = ProjectFsWatcher(project, watch_factory=factory, loader=loader)
    watcher.start()

    factory.fire(project_root, WatchEventKind.CHANGED, "package.json")

    assert calls == []


def test_loader_receives_same_config_path(project, factory):
    calls = []

    def loader(path):
        calls.append(path)
        raise ConfigError("broken")

    watcher = ProjectFsWatcher(project, watch_factory=factory, loader=loader)
    watcher.start()

    factory.fire(os.path.dirname(project.config_file), WatchEventKind.CHANGED, CONFIG_NAME)

    assert calls == [project.config_file]


def test_reload_debounced_with_scheduler(project, project_root, factory, scheduler):
    calls = []

    def loader(path):
        calls.append(path)
        return project

    watcher = ProjectFsWatcher(
        project,
        watch_factory=factory,
        loader=loader,
        scheduler=scheduler,
        config_debounce_seconds=0.5,
    )
    watcher.start()

    for _ in range(3):
        factory.fire(project_root, WatchEventKind.CHANGED, CONFIG_NAME)

    assert calls == []
    assert len(scheduler.timers) == 3
    assert len(scheduler.pending()) == 1
    assert scheduler.pending()[0].delay == 0.5

    scheduler.run_all()

    assert calls == [project.config_file]


def test_stop_cancels_pending_reload(project, project_root, factory, scheduler):
    calls = []
    watcher = ProjectFsWatcher(
        project,
        watch_factory=factory,
        loader=lambda path: calls.append(path) or project,
        scheduler=scheduler,
        config_debounce_seconds=0.5,
    )
    watcher.start()
    factory.fire(project_root, WatchEventKind.CHANGED, CONFIG_NAME)

    watcher.stop()

    assert scheduler.pending() == []
    assert calls == []
    assert watcher.config_watcher.state is LevelState.IDLE


def test_reload_to_missing_build_directory_notifies_empty(project, project_root, factory):
    write_artifact(str(project_root / "build" / "contracts"), "A.json")
    watcher = ProjectFsWatcher(project, watch_factory=factory)
    updates = []
    watcher.subscribe(updates.append)
    watcher.start()
    assert _names(updates[-1]) == ["A"]

    write_config(project_root / CONFIG_NAME, build_directory="not-built-yet")
    factory.fire(project_root, WatchEventKind.CHANGED, CONFIG_NAME)

    assert watcher.build_watcher.state is LevelState.IDLE
    assert updates[-1].contracts == []
    assert updates[-1] == watcher.get_snapshot()
