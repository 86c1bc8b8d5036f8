"""Configuration management for squadlens.

Loads configuration from:
1. squadlens.yaml in current directory
2. ~/.config/squadlens/squadlens.yaml
3. Environment variables (SQUADLENS_* prefix)
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class WorkspaceConfig(BaseModel):
    """Where the squad lives."""

    root: Path = Field(default_factory=Path.cwd)
    # None means auto-detect (.squad first, then legacy .ai-team)
    squad_folder: str | None = None


class LogsConfig(BaseModel):
    """Log discovery configuration."""

    status_directory: str = Field(
        default="orchestration-log",
        description="The only directory whose logs may affect current member status",
    )
    session_directories: list[str] = Field(
        default_factory=lambda: ["log"],
        description="Historical session logs, used for display and reporting only",
    )
    extensions: list[str] = Field(default_factory=lambda: [".md"])
    ignore_prefixes: list[str] = Field(default_factory=lambda: ["readme"])


class RosterConfig(BaseModel):
    """Roster resolution configuration."""

    team_file: str = "team.md"
    agents_directory: str = "agents"
    charter_file: str = "charter.md"
    reserved_agent_directories: list[str] = Field(
        default_factory=lambda: ["_alumni", "scribe"]
    )
    coordinator_role: str = "Coordinator"
    default_role: str = "Squad Member"
    retry_delay_seconds: float = 1.5


class StatusConfig(BaseModel):
    """Status engine configuration."""

    markers_directory: str = "active-work"
    marker_extension: str = ".md"
    staleness_seconds: int = 300


class TasksConfig(BaseModel):
    """Task derivation configuration."""

    title_max_length: int = 60
    completion_keywords: list[str] = Field(
        default_factory=lambda: ["completed", "done", "✅", "pass", "succeeds"]
    )


class DecisionsConfig(BaseModel):
    """Decision record configuration."""

    file: str = "decisions.md"
    directory: str = "decisions"
    # How many lines below a decision heading are scanned for Date/Author metadata
    metadata_window: int = 20


class ApiConfig(BaseModel):
    """Local API server configuration."""

    host: str = "127.0.0.1"
    port: int = 8765


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: Path | None = None


class Config(BaseSettings):
    """Main configuration for squadlens."""

    model_config = SettingsConfigDict(
        env_prefix="SQUADLENS_",
        env_nested_delimiter="__",
    )

    workspace: WorkspaceConfig = Field(default_factory=WorkspaceConfig)
    logs: LogsConfig = Field(default_factory=LogsConfig)
    roster: RosterConfig = Field(default_factory=RosterConfig)
    status: StatusConfig = Field(default_factory=StatusConfig)
    tasks: TasksConfig = Field(default_factory=TasksConfig)
    decisions: DecisionsConfig = Field(default_factory=DecisionsConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def find_config_file() -> Path | None:
    """Find the configuration file.

    Searches in order:
    1. ./squadlens.yaml
    2. ~/.config/squadlens/squadlens.yaml
    """
    locations = [
        Path.cwd() / "squadlens.yaml",
        Path.home() / ".config" / "squadlens" / "squadlens.yaml",
    ]

    for path in locations:
        if path.exists():
            return path

    return None


def load_config() -> Config:
    """Load configuration from file and environment.

    Returns:
        Config: The loaded configuration.
    """
    config_data: dict[str, Any] = {}

    config_file = find_config_file()
    if config_file:
        with open(config_file) as f:
            config_data = yaml.safe_load(f) or {}

    # Environment overrides for common settings
    env_overrides = {
        "SQUADLENS_ROOT": ("workspace", "root"),
        "SQUADLENS_SQUAD_FOLDER": ("workspace", "squad_folder"),
        "SQUADLENS_LOG_LEVEL": ("logging", "level"),
    }

    for env_var, path in env_overrides.items():
        value = os.environ.get(env_var)
        if value:
            section, key = path
            if section not in config_data:
                config_data[section] = {}
            config_data[section][key] = value

    return Config(**config_data)


# Global config instance (lazy loaded)
_config: Config | None = None


def get_config() -> Config:
    """Get the global configuration instance.

    Returns:
        Config: The configuration instance.
    """
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Reset the global configuration (useful for testing)."""
    global _config
    _config = None
