"""Config Loader - Loads client configuration.

Handles loading YAML config files with environment variable substitution, so
that credentials in default headers can stay out of the file.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from hyperdrive.models import ClientConfig


class ConfigError(Exception):
    """Raised when configuration loading fails."""


_ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")


def load_client_config(config_path: Path) -> ClientConfig:
    """Load client configuration from YAML with ${ENV_VAR} substitution."""
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            raw_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in config file: {e}") from e

    if raw_config is None:
        raw_config = {}
    if not isinstance(raw_config, dict):
        raise ConfigError("Config file must be a YAML mapping")

    raw_config = _substitute_env_vars(raw_config)

    try:
        return ClientConfig.model_validate(raw_config)
    except ValidationError as e:
        raise ConfigError(f"Invalid config structure: {e}") from e


def _substitute_env_vars(data: Any, location: str = "") -> Any:
    """Return data with ${ENV_VAR} references replaced in every string.

    location is the dotted path of data within the document, used in the
    error raised for an unset variable.
    """
    if isinstance(data, dict):
        return {
            key: _substitute_env_vars(value, f"{location}.{key}" if location else str(key))
            for key, value in data.items()
        }
    if isinstance(data, list):
        return [_substitute_env_vars(item, f"{location}[{i}]") for i, item in enumerate(data)]
    if isinstance(data, str):
        return _ENV_VAR_PATTERN.sub(lambda match: _env_value(match.group(1), location), data)
    return data


def _env_value(name: str, location: str) -> str:
    try:
        return os.environ[name]
    except KeyError:
        raise ConfigError(f"Environment variable '{name}' is not set (referenced at {location})") from None
