"""
Configuration loading for c3bridge.

Settings are resolved from several sources:
1. Environment variables (highest precedence)
2. Explicit config file passed by the caller
3. Config file in the current directory
4. User's XDG config directory
5. Default values (lowest precedence)
"""

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from c3bridge.config.settings import C3BridgeSettings
from c3bridge.core.errors import ConfigError


logger = logging.getLogger(__name__)


def config_search_paths(config_path: str | Path | None = None) -> list[Path]:
    """Generate a list of config paths to search in order of precedence."""
    paths: list[Path] = []

    if config_path:
        paths.append(Path(config_path).expanduser().resolve())

    paths.extend([Path.cwd() / "c3bridge.yaml", Path.cwd() / ".c3bridge.yml"])

    xdg_config_home = os.environ.get("XDG_CONFIG_HOME")
    config_root = (
        Path(xdg_config_home) if xdg_config_home else Path.home() / ".config"
    )
    paths.extend(
        [config_root / "c3bridge" / "config.yaml", config_root / "c3bridge" / "config.yml"]
    )
    return paths


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to read config file {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping at top level")
    return data


def load_settings(config_path: str | Path | None = None) -> C3BridgeSettings:
    """Load settings from the first config file found, merged with env vars.

    Args:
        config_path: Optional explicit config file. It must exist.

    Returns:
        Validated settings

    Raises:
        ConfigError: If the explicit file is missing, or a file is invalid
    """
    if config_path and not Path(config_path).expanduser().exists():
        raise ConfigError(f"Config file not found: {config_path}")

    config_data: dict[str, Any] = {}
    for path in config_search_paths(config_path):
        if path.is_file():
            config_data = _read_yaml(path)
            logger.debug("Loaded configuration from %s", path)
            break
    else:
        logger.debug("No configuration file found, using defaults and environment")

    try:
        return C3BridgeSettings(**config_data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
