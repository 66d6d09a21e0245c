"""Watcher settings with environment variable support."""

from __future__ import annotations

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class WatcherSettings(BaseSettings):
    """Runtime settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        env_prefix="BUILDWATCH_",
        extra="ignore",
    )

    # === Project ===
    config_file: str = Field(
        default="truffle-config.json", description="Path to the project configuration file"
    )
    network_id: Optional[str] = Field(
        default=None, description="Network id used to decorate artifacts with address/tx hash"
    )

    # === Watcher ===
    watcher_enabled: bool = Field(default=True, description="Enable the filesystem watcher")
    artifact_extension: str = Field(
        default=".json", description="File extension of compiled artifacts"
    )
    config_debounce_seconds: float = Field(
        default=0.25, ge=0, description="Debounce delay for configuration file changes"
    )

    # === Logging ===
    log_level: str = Field(default="INFO", description="Console log level")

    @field_validator("artifact_extension")
    @classmethod
    def normalize_extension(cls, v: str) -> str:
        """Ensure the extension carries its leading dot."""
        if not v:
            raise ValueError("artifact_extension must not be empty")
        return v if v.startswith(".") else f".{v}"

    @field_validator("network_id", mode="before")
    @classmethod
    def coerce_network_id(cls, v):
        """Network ids are keys of the artifact's networks map, always strings."""
        if v is None or v == "":
            return None
        return str(v)


def load_settings() -> WatcherSettings:
    """Load settings from environment."""
    return WatcherSettings()


__all__ = ["WatcherSettings", "load_settings"]
