"""Command line interface for datemirror."""

from __future__ import annotations

import asyncio
import sys
from datetime import date
from pathlib import Path
from typing import Any

import click
from loguru import logger
from pydantic import ValidationError

from . import __version__
from .config import UNSET_PROPERTY, config_path_for, load_config, save_config
from .core.dates import format_date
from .sync import DIRECTIONS, DateMirror, sync_vault, watch_vault
from .utils import console, print_summary
from .vault import count_date_properties, init_vault, list_date_properties

VAULT_ARGUMENT = click.argument(
    "vault_path",
    type=click.Path(exists=True, file_okay=False, dir_okay=True, path_type=Path),
)


def setup_logger(verbose: bool = False) -> Any:
    """Set up logger with appropriate level."""
    logger.remove()
    logger.add(
        sys.stderr,
        format="{level}: {message}",
        level="DEBUG" if verbose else "INFO",
    )
    return logger


def build_mirror(vault_path: Path, dry_run: bool, log: Any) -> DateMirror:
    """Load the vault settings and create a DateMirror that persists changes back."""
    vault_root = vault_path.resolve()
    settings = load_config(vault_root)
    if not settings.is_configured:
        raise click.ClickException(
            "No date property configured. Run 'datemirror config VAULT_PATH --property NAME' first."
        )
    return DateMirror(
        settings,
        log,
        dry_run=dry_run,
        vault_root=vault_root,
        settings_saver=lambda s: save_config(s, vault_root),
    )


@click.group()
@click.version_option(version=__version__, prog_name="datemirror")
def cli() -> None:
    """Keep note filenames and a frontmatter date property in sync.

    When the frontmatter date changes the filename is rewritten to match,
    and when a file is renamed the frontmatter date is taken from the new
    filename.
    """


@cli.command()
@click.argument(
    "vault_path",
    type=click.Path(file_okay=False, dir_okay=True, path_type=Path),
)
@click.option(
    "--overwrite-config",
    is_flag=True,
    help="Overwrite existing config.yaml if it exists",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
def init(vault_path: Path, overwrite_config: bool, verbose: bool) -> None:
    """Create .datemirror/config.yaml with default settings.

    VAULT_PATH: Path to the vault directory
    """
    log = setup_logger(verbose)

    try:
        config_path = init_vault(vault_path, overwrite_config=overwrite_config)
        log.info(f"Created {config_path} with default values")
    except FileExistsError as e:
        log.error(str(e))
        raise click.ClickException(str(e)) from e
    except OSError as e:
        log.error(f"Error initializing vault: {e}")
        raise click.ClickException(str(e)) from e


@cli.command()
@VAULT_ARGUMENT
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
def properties(vault_path: Path, verbose: bool) -> None:
    """List the date properties found in the vault's frontmatter.

    VAULT_PATH: Path to the vault directory
    """
    setup_logger(verbose)

    settings = load_config(vault_path)
    occurrences = count_date_properties(vault_path, settings)
    if not occurrences:
        console.print("No date properties found")
        return

    for name in sorted(occurrences):
        marker = " [bold green](selected)[/]" if name == settings.date_property else ""
        console.print(f"{name}: [bold]{occurrences[name]}[/] notes{marker}")


@cli.command()
@VAULT_ARGUMENT
@click.option(
    "--property",
    "date_property",
    help="Date property that should be kept in sync with the filename",
)
@click.option(
    "--format",
    "date_format",
    help="Date format used in filenames, e.g. YYYY-MM-DD or YYYYMMDD",
)
@click.option(
    "--unset", is_flag=True, help="Clear the date property so nothing is synced"
)
@click.option(
    "--force",
    is_flag=True,
    help="Accept a property that is not yet used as a date in the vault",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
def config(
    vault_path: Path,
    date_property: str | None,
    date_format: str | None,
    unset: bool,
    force: bool,
    verbose: bool,
) -> None:
    """Show or change the sync settings.

    VAULT_PATH: Path to the vault directory

    Supported format tokens: YYYY, YY, MM, M, DD, D. Any other character is
    kept as is.
    """
    log = setup_logger(verbose)
    settings = load_config(vault_path)

    changes: dict[str, Any] = {}
    if unset:
        changes["date_property"] = UNSET_PROPERTY
    elif date_property is not None:
        lookup = settings
        if date_format is not None:
            lookup = settings.model_copy(update={"date_format": date_format})
        candidates = list_date_properties(vault_path, lookup)
        if date_property not in candidates and not force:
            available = ", ".join(candidates) if candidates else "none"
            raise click.ClickException(
                f"'{date_property}' is not used as a date property in this vault "
                f"(available: {available}). Use --force to set it anyway."
            )
        changes["date_property"] = date_property
    if date_format is not None:
        changes["date_format"] = date_format

    if changes:
        mirror = DateMirror(
            settings,
            log,
            vault_root=vault_path,
            settings_saver=lambda s: save_config(s, vault_path),
        )
        try:
            settings = mirror.update_settings(**changes)
        except (ValueError, ValidationError) as e:
            raise click.ClickException(str(e)) from e
        log.info(f"Saved settings to {config_path_for(vault_path)}")

    selected = settings.date_property if settings.is_configured else "None selected"
    console.print(f"Date property: [bold]{selected}[/]")
    console.print(f"Date format: [bold]{settings.date_format}[/]")
    console.print(
        f"Today's note would look like this: [bold]{format_date(date.today(), settings.date_format)}[/]"
    )


@cli.command()
@VAULT_ARGUMENT
@click.option(
    "--direction",
    "-d",
    type=click.Choice(sorted(DIRECTIONS)),
    default="frontmatter",
    show_default=True,
    help="'filename' renames files from their frontmatter date, "
    "'frontmatter' writes frontmatter dates from filenames",
)
@click.option(
    "--file",
    "specific_file",
    type=click.Path(exists=True, file_okay=True, dir_okay=False, path_type=Path),
    help="Sync only this specific file instead of the entire vault",
)
@click.option(
    "--dry-run",
    "-n",
    is_flag=True,
    help="Show what would be done without making changes",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
def sync(
    vault_path: Path,
    direction: str,
    specific_file: Path | None,
    dry_run: bool,
    verbose: bool,
) -> None:
    """Sync every note in the vault once.

    VAULT_PATH: Path to the vault directory
    """
    log = setup_logger(verbose)

    if specific_file:
        try:
            specific_file.resolve().relative_to(vault_path.resolve())
        except ValueError as e:
            raise click.ClickException(
                f"File {specific_file} is not within vault {vault_path}"
            ) from e

    mirror = build_mirror(vault_path, dry_run, log)
    if dry_run:
        log.info(f"DRY RUN: Syncing {direction} dates in vault {vault_path}")
    else:
        log.info(f"Syncing {direction} dates in vault {vault_path}")

    stats = asyncio.run(
        sync_vault(
            mirror,
            mirror.vault_root or vault_path,
            direction,
            specific_file.resolve() if specific_file else None,
        )
    )
    print_summary("Vault Sync Summary", stats)
    if stats["errors"]:
        raise click.ClickException(f"{stats['errors']} files could not be synced")


@cli.command()
@VAULT_ARGUMENT
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
def watch(vault_path: Path, verbose: bool) -> None:
    """Watch the vault and keep filenames and frontmatter dates in sync.

    VAULT_PATH: Path to the vault directory

    Press Ctrl+C to stop.
    """
    log = setup_logger(verbose)
    mirror = build_mirror(vault_path, False, log)

    try:
        asyncio.run(watch_vault(mirror, mirror.vault_root or vault_path))
    except KeyboardInterrupt:
        pass
    except OSError as e:
        log.error(f"Error watching vault: {e}")
        raise click.ClickException(str(e)) from e
    log.info("Watcher stopped")


if __name__ == "__main__":
    cli()
