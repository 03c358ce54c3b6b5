"""Console output helpers for datemirror."""

from __future__ import annotations

from pathlib import Path

from rich.console import Console
from rich.markup import escape

console = Console()


def log_rename(old: Path, new: Path, dry: bool) -> None:
    """Log a filename change using rich console formatting."""
    console.print(
        f"[bold cyan]{escape(old.name)}[/] -> [bold green]{escape(new.name)}[/]"
        f"{escape(' [dry-run]') if dry else ''}"
    )


def log_frontmatter_update(
    file: Path, prop: str, old: object, new: object, dry: bool
) -> None:
    """Log a frontmatter date change using rich console formatting."""
    console.print(
        f"[bold cyan]{escape(file.name)}[/]: {escape(prop)} {escape(repr(old))} -> "
        f"[bold green]{escape(repr(new))}[/]{escape(' [dry-run]') if dry else ''}"
    )


def print_summary(title: str, stats: dict[str, int]) -> None:
    """Print summary statistics for a vault pass."""
    console.print(f"[bold green]{title}[/]")
    console.print(f"Total files processed: [bold]{stats.get('processed', 0)}[/]")
    console.print(f"Files renamed: [bold]{stats.get('renamed', 0)}[/]")
    console.print(f"Frontmatter dates updated: [bold]{stats.get('updated', 0)}[/]")
    console.print(f"Errors: [bold]{stats.get('errors', 0)}[/]")
