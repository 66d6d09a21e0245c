"""Tests for project configuration loading and watcher settings."""

import pytest

from buildwatch.config import (
    ConfigError,
    ConfigLoadError,
    ProjectDescriptor,
    WatcherSettings,
    load_project,
)

from conftest import write_config


def test_load_project_defaults(tmp_path):
    """Empty config resolves build/ and build/contracts next to the file."""
    config_file = write_config(tmp_path / "truffle-config.json")

    project = load_project(config_file)

    assert isinstance(project, ProjectDescriptor)
    assert project.config_file == str(tmp_path / "truffle-config.json")
    assert project.config.build_directory == str(tmp_path / "build")
    assert project.config.contracts_build_directory == str(tmp_path / "build" / "contracts")
    assert project.name == tmp_path.name
    assert project.contracts == []


def test_load_project_relative_paths(tmp_path):
    config_file = write_config(
        tmp_path / "truffle-config.json",
        name="tokens",
        build_directory="dist",
        contracts_build_directory="./dist/abi",
    )

    project = load_project(config_file)

    assert project.name == "tokens"
    assert project.config.build_directory == str(tmp_path / "dist")
    assert project.config.contracts_build_directory == str(tmp_path / "dist" / "abi")


def test_custom_build_directory_moves_default_contracts_directory(tmp_path):
    config_file = write_config(tmp_path / "truffle-config.json", build_directory="out")

    project = load_project(config_file)

    assert project.config.contracts_build_directory == str(tmp_path / "out" / "contracts")


def test_load_project_keeps_extra_keys(tmp_path):
    config_file = write_config(tmp_path / "truffle-config.json", compilers={"solc": "0.8.20"})

    project = load_project(config_file)

    assert project.config.model_extra["compilers"] == {"solc": "0.8.20"}


def test_missing_config_file(tmp_path):
    with pytest.raises(ConfigError) as exc_info:
        load_project(str(tmp_path / "missing.json"))

    assert isinstance(exc_info.value.original_error, FileNotFoundError)


def test_malformed_config_file(tmp_path):
    path = tmp_path / "truffle-config.json"
    path.write_text("{ not json")

    with pytest.raises(ConfigLoadError):
        load_project(str(path))


def test_config_must_be_object(tmp_path):
    path = tmp_path / "truffle-config.json"
    path.write_text('["build"]')

    with pytest.raises(ConfigError):
        load_project(str(path))


def test_config_directories_must_be_strings(tmp_path):
    config_file = write_config(tmp_path / "truffle-config.json", build_directory=42)

    with pytest.raises(ConfigError):
        load_project(config_file)


def test_descriptor_is_frozen(tmp_path):
    project = load_project(write_config(tmp_path / "truffle-config.json"))

    with pytest.raises(Exception):
        project.config_file = "elsewhere.json"


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("BUILDWATCH_CONFIG_FILE", "/srv/app/truffle-config.json")
    monkeypatch.setenv("BUILDWATCH_NETWORK_ID", "5")
    monkeypatch.setenv("BUILDWATCH_ARTIFACT_EXTENSION", "abi")

    settings = WatcherSettings(_env_file=None)

    assert settings.config_file == "/srv/app/truffle-config.json"
    assert settings.network_id == "5"
    assert settings.artifact_extension == ".abi"


def test_settings_defaults(monkeypatch):
    for name in ("CONFIG_FILE", "NETWORK_ID", "ARTIFACT_EXTENSION", "WATCHER_ENABLED"):
        monkeypatch.delenv(f"BUILDWATCH_{name}", raising=False)

    settings = WatcherSettings(_env_file=None)

    assert settings.config_file == "truffle-config.json"
    assert settings.network_id is None
    assert settings.artifact_extension == ".json"
    assert settings.watcher_enabled is True


def test_settings_network_id_coerced_to_string():
    settings = WatcherSettings(_env_file=None, network_id=1337)

    assert settings.network_id == "1337"
