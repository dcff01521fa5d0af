"""Configuration file loading and merging."""

import logging
from pathlib import Path

import yaml

from extkit.config.schema import DEFAULT_CONFIG, ExtkitConfig

logger = logging.getLogger(__name__)

CONFIG_DIRNAME = ".extkit"
CONFIG_FILENAME = "config.yaml"


def get_user_config_path() -> Path:
    """Get path to the per-user config: ~/.extkit/config.yaml."""
    return Path.home() / CONFIG_DIRNAME / CONFIG_FILENAME


def get_extension_config_path(root: Path) -> Path:
    """Get path to an extension's own config: <root>/.extkit/config.yaml."""
    return root / CONFIG_DIRNAME / CONFIG_FILENAME


def config_layers(root: Path) -> list[tuple[str, Path]]:
    """Config files consulted for an extension, lowest precedence first."""
    return [
        ("User", get_user_config_path()),
        ("Extension", get_extension_config_path(root)),
    ]


def load_yaml_config(path: Path) -> dict[str, object] | None:
    """Load a YAML config file, return None if not found or empty."""
    if not path.exists():
        return None
    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.warning("Ignoring invalid config %s: %s", path, e)
        return None

    if data is None:
        return None
    if not isinstance(data, dict):
        logger.warning("Ignoring config %s: not a mapping", path)
        return None
    return data


def load_config(root: Path) -> ExtkitConfig:
    """Load the effective configuration for the extension at root.

    Precedence (lowest to highest): built-in defaults, the user config,
    then the extension's ``.extkit/config.yaml``. The working directory
    is not consulted.
    """
    config = DEFAULT_CONFIG
    for label, path in config_layers(root):
        data = load_yaml_config(path)
        if data:
            logger.debug("Applying %s config %s", label.lower(), path)
            config = config.merge(ExtkitConfig.from_dict(data))
    return config


def save_config(config: ExtkitConfig, path: Path) -> None:
    """Save config to a YAML file.

    Creates parent directories if needed.
    Only saves non-None values.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    data = config.to_dict()
    with path.open("w", encoding="utf-8") as f:
        yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
