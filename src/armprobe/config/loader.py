"""YAML configuration file loading with Pydantic validation."""

from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import ProbeConfig

DEFAULT_CONFIG_PATH = Path.home() / ".armprobe" / "config.yaml"


class ConfigError(Exception):
    """Raised when configuration loading or validation fails."""


def load_yaml(path: Path) -> dict:
    """Load a YAML file and return its contents as a dict.

    Args:
        path: Path to the YAML file.

    Returns:
        Parsed YAML contents.

    Raises:
        ConfigError: If the file cannot be read or parsed.
    """
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise ConfigError(f"Configuration file not found: {path}") from None
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration in {path} must be a mapping")
    return data


def load_probe_config(path: Path | None = None) -> ProbeConfig:
    """Load the probe configuration.

    With no path, ``~/.armprobe/config.yaml`` is used if it exists and
    defaults otherwise. An explicit path must exist.

    Raises:
        ConfigError: If the file is missing, unparseable or invalid.
    """
    if path is None:
        if not DEFAULT_CONFIG_PATH.exists():
            return ProbeConfig()
        path = DEFAULT_CONFIG_PATH

    data = load_yaml(path)
    try:
        return ProbeConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Configuration validation failed for {path}: {e}") from e
