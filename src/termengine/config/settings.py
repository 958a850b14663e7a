"""Configuration management for termengine.

Loads settings from a YAML configuration file with environment variable
overrides (``TERMENGINE_`` prefix, ``__`` for nested sections). Supports
.env files.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config/termengine.yaml")


class EngineConfig(BaseModel):
    core_version: str = Field(default="1.0.0", description="Version checked by requiredCoreVersion")
    cli_version: str = Field(default="1.0.0", description="Version checked by requiredCliVersion")
    history_limit: int = Field(default=500, gt=0)
    prompt: str = Field(default="$ ")


class StorageConfig(BaseModel):
    backend: Literal["memory", "file"] = Field(default="memory")
    path: str = Field(default="~/.termengine/storage.json")


class EndpointConfig(BaseModel):
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8080, ge=1, le=65535)
    scrollback_lines: int = Field(default=1000, gt=0)


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO")
    format: str = Field(
        default="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    file: str | None = Field(default=None)


class Settings(BaseSettings):
    """Root configuration for the termengine system.

    Loads from YAML file and supports environment variable overrides.
    Reads .env files automatically.
    """

    model_config = {
        "env_prefix": "TERMENGINE_",
        "env_nested_delimiter": "__",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    engine: EngineConfig = Field(default_factory=EngineConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    endpoint: EndpointConfig = Field(default_factory=EndpointConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def load_settings(config_path: Path | str | None = None) -> Settings:
    """Load settings from YAML + .env + environment variables.

    Priority: env vars > .env file > YAML file > defaults
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    yaml_data = {}
    if path.exists():
        with open(path) as f:
            yaml_data = yaml.safe_load(f) or {}
        logger.info("Loaded configuration from %s", path)
    else:
        logger.warning("Config file %s not found, using defaults + env vars", path)

    _apply_env_overrides(yaml_data)

    return Settings(**yaml_data)


def _apply_env_overrides(yaml_data: dict) -> None:
    """Let TERMENGINE_* variables win over values read from YAML.

    Init kwargs outrank the environment in pydantic-settings, so sections
    present in the YAML file would otherwise shadow the env overrides.
    """
    prefix = Settings.model_config["env_prefix"]
    delimiter = Settings.model_config["env_nested_delimiter"]
    for key, value in os.environ.items():
        if not key.startswith(prefix):
            continue
        parts = key[len(prefix):].lower().split(delimiter)
        if len(parts) != 2:
            continue
        section, field = parts
        if isinstance(yaml_data.get(section), dict):
            yaml_data[section][field] = value
