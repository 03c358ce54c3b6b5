"""Vault initialization functions for datemirror."""

from __future__ import annotations

from pathlib import Path

from ..config import Settings, config_path_for, save_config


def init_vault(
    vault_path: Path,
    overwrite_config: bool = False,
    settings: Settings | None = None,
) -> Path:
    """Create the .datemirror folder and a config.yaml with default values.

    Args:
        vault_path: Path to the vault.
        overwrite_config: If True, overwrite existing config.yaml.
        settings: Optional initial settings, defaults otherwise.

    Returns:
        Path of the written config.yaml.

    Raises:
        FileExistsError: If config.yaml exists and overwrite_config is False.
        OSError: If vault path cannot be created or written to.
    """
    vault_path.mkdir(parents=True, exist_ok=True)

    config_path = config_path_for(vault_path)
    if config_path.exists() and not overwrite_config:
        raise FileExistsError(
            f"config.yaml already exists at {config_path}. Use --overwrite-config to overwrite."
        )

    save_config(settings or Settings(), vault_path)
    return config_path
