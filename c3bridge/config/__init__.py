"""Configuration for c3bridge."""

from c3bridge.config.loader import config_search_paths, load_settings
from c3bridge.config.settings import (
    DEFAULT_ENV_ALLOWLIST,
    DEFAULT_MIN_VERSION,
    C3BridgeSettings,
)


__all__ = [
    "C3BridgeSettings",
    "DEFAULT_ENV_ALLOWLIST",
    "DEFAULT_MIN_VERSION",
    "config_search_paths",
    "load_settings",
]
