"""Configuration loading."""

from extkit.config.loader import (
    config_layers,
    get_extension_config_path,
    get_user_config_path,
    load_config,
    save_config,
)
from extkit.config.schema import DEFAULT_CONFIG, ExtkitConfig

__all__ = [
    "DEFAULT_CONFIG",
    "ExtkitConfig",
    "config_layers",
    "get_extension_config_path",
    "get_user_config_path",
    "load_config",
    "save_config",
]
