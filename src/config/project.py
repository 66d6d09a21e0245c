"""Project descriptor models and the default configuration loader."""

from __future__ import annotations

import json
import logging
import os
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from .exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_BUILD_DIRECTORY = "build"
DEFAULT_CONTRACTS_SUBDIRECTORY = "contracts"


class ProjectConfig(BaseModel):
    """Parsed project configuration: where the build output lives."""

    model_config = ConfigDict(extra="allow", frozen=True)

    build_directory: str = Field(..., description="Directory that receives build output")
    contracts_build_directory: str = Field(
        ..., description="Directory holding one compiled artifact file per contract"
    )

    @model_validator(mode="after")
    def check_paths(self) -> "ProjectConfig":
        if not self.build_directory.strip():
            raise ValueError("build_directory must not be empty")
        if not self.contracts_build_directory.strip():
            raise ValueError("contracts_build_directory must not be empty")
        return self


class ProjectDescriptor(BaseModel):
    """Configuration path, parsed configuration and current artifact list.

    Snapshots handed to listeners are deep copies of this model with
    ``contracts`` holding only successfully parsed artifacts.
    """

    model_config = ConfigDict(frozen=True)

    config_file: str = Field(..., description="Path of the project configuration file")
    config: ProjectConfig
    name: Optional[str] = Field(None, description="Project display name")
    contracts: List[Dict[str, Any]] = Field(default_factory=list)


def _resolve(base_dir: str, value: str) -> str:
    return os.path.normpath(os.path.join(base_dir, os.path.expanduser(value)))


def load_project(config_file: str) -> ProjectDescriptor:
    """
    Load the project configuration file into a descriptor.

    The file is a JSON object. ``build_directory`` and
    ``contracts_build_directory`` are optional and resolved against the
    directory of the configuration file.

    Args:
        config_file: Path to the configuration file

    Returns:
        Project descriptor with an empty artifact list

    Raises:
        ConfigError: If the file is missing, unreadable or invalid
    """
    config_file = os.path.abspath(config_file)
    project_dir = os.path.dirname(config_file)

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"Configuration file not found: {config_file}", e, path=config_file) from e
    except (OSError, ValueError) as e:
        raise ConfigError(f"Could not read configuration file {config_file}: {e}", e, path=config_file) from e

    if not isinstance(raw, dict):
        raise ConfigError(f"Configuration file {config_file} must contain a JSON object", path=config_file)

    build_directory = raw.get("build_directory") or DEFAULT_BUILD_DIRECTORY
    contracts_build_directory = raw.get("contracts_build_directory")
    if not isinstance(build_directory, str) or not (
        contracts_build_directory is None or isinstance(contracts_build_directory, str)
    ):
        raise ConfigError(f"Build directories in {config_file} must be strings", path=config_file)

    build_directory = _resolve(project_dir, build_directory)
    if contracts_build_directory:
        contracts_build_directory = _resolve(project_dir, contracts_build_directory)
    else:
        contracts_build_directory = os.path.join(build_directory, DEFAULT_CONTRACTS_SUBDIRECTORY)

    try:
        config = ProjectConfig(
            **{
                **raw,
                "build_directory": build_directory,
                "contracts_build_directory": contracts_build_directory,
            }
        )
        descriptor = ProjectDescriptor(
            config_file=config_file,
            config=config,
            name=raw.get("name") or os.path.basename(project_dir),
        )
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {config_file}: {e}", e, path=config_file) from e

    logger.debug(
        "project_config_loaded",
        extra={
            "config_file": config_file,
            "build_directory": build_directory,
            "contracts_build_directory": contracts_build_directory,
        },
    )
    return descriptor


__all__ = ["ProjectConfig", "ProjectDescriptor", "load_project"]
