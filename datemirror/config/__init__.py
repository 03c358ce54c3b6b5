"""Configuration management for datemirror.

This module handles loading and saving settings from .datemirror/config.yaml files.
"""

from .loader import CONFIG_DIR, config_path_for, load_config, save_config
from .schema import DEFAULT_DATE_FORMAT, UNSET_PROPERTY, Settings

__all__ = [
    "Settings",
    "DEFAULT_DATE_FORMAT",
    "UNSET_PROPERTY",
    "CONFIG_DIR",
    "config_path_for",
    "load_config",
    "save_config",
]
