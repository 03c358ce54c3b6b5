"""Catalogue of date-typed frontmatter properties across a vault."""

from __future__ import annotations

from collections import Counter
from datetime import date, datetime
from pathlib import Path

from ..config.schema import Settings
from ..core.dates import parse_date_value
from ..core.frontmatter import read_frontmatter
from .documents import walk_markdown_files


def is_date_value(value: object, settings: Settings | None = None) -> bool:
    """Check whether a frontmatter value is date-typed.

    YAML already turns unquoted ISO dates into date objects; quoted ISO
    strings are accepted as well. With settings, any value that reads as a
    date in the configured or fallback formats counts too, including the
    integers written for all-digit formats.
    """
    if isinstance(value, bool):
        return False
    if isinstance(value, (date, datetime)):
        return True
    if isinstance(value, str):
        try:
            datetime.fromisoformat(value.strip())
        except ValueError:
            pass
        else:
            # fromisoformat also accepts bare digits like "20240115" on newer Pythons
            if "-" in value:
                return True
    if settings is None:
        return False
    return (
        parse_date_value(value, settings.date_format, settings.fallback_date_formats)
        is not None
    )


def count_date_properties(
    vault_root: Path, settings: Settings | None = None
) -> Counter[str]:
    """Count how many notes hold a date-typed value for each frontmatter key."""
    settings = settings or Settings()
    occurrences: Counter[str] = Counter()
    for path in walk_markdown_files(vault_root, tuple(settings.extensions)):
        frontmatter = read_frontmatter(path)
        if not frontmatter:
            continue
        for key, value in frontmatter.items():
            if isinstance(key, str) and is_date_value(value, settings):
                occurrences[key] += 1
    return occurrences


def list_date_properties(
    vault_root: Path, settings: Settings | None = None
) -> list[str]:
    """List the date-typed frontmatter properties used in the vault.

    Args:
        vault_root: Path to the vault root directory.
        settings: Settings giving the scanned suffixes and the date formats
            a value may be stored in. Defaults are used when omitted.

    Returns:
        Sorted property names that occur at least once.
    """
    occurrences = count_date_properties(vault_root, settings)
    return sorted(key for key, count in occurrences.items() if count > 0)
