"""Configuration loader for datemirror."""

from __future__ import annotations

from pathlib import Path

import yaml
from loguru import logger
from pydantic import ValidationError

from .schema import Settings

CONFIG_DIR = ".datemirror"
CONFIG_FILE = "config.yaml"


def config_path_for(vault_root: Path) -> Path:
    """Return the location of config.yaml for a vault."""
    return vault_root / CONFIG_DIR / CONFIG_FILE


def load_config(vault_root: Path) -> Settings:
    """Load settings from config.yaml in the .datemirror folder.

    Stored values are merged over the defaults; a missing, empty or invalid
    file yields the defaults.

    Args:
        vault_root: Path to the vault root directory.

    Returns:
        Settings object.
    """
    config_path = config_path_for(vault_root)
    if not config_path.exists():
        return Settings()

    try:
        with config_path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Could not read {config_path}, using defaults: {e}")
        return Settings()

    if not isinstance(data, dict):
        return Settings()

    try:
        return Settings.from_dict(data)
    except ValidationError as e:
        logger.warning(f"Invalid settings in {config_path}, using defaults: {e}")
        return Settings()


def save_config(settings: Settings, vault_root: Path) -> None:
    """Save settings to config.yaml in the .datemirror folder.

    Args:
        settings: Settings object to save.
        vault_root: Path to the vault root directory.
    """
    config_path = config_path_for(vault_root)
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(settings.to_yaml(), encoding="utf-8")
