"""One-shot sync over every note in a vault."""

from __future__ import annotations

from pathlib import Path

from ..vault.documents import Document, walk_markdown_files
from .orchestrator import FRONTMATTER_CHANGED, RENAMED, DateMirror

DIRECTIONS = {
    # Rename files from their frontmatter date
    "filename": FRONTMATTER_CHANGED,
    # Write frontmatter dates from the filename
    "frontmatter": RENAMED,
}


async def sync_vault(
    mirror: DateMirror,
    vault_root: Path,
    direction: str,
    specific_file: Path | None = None,
) -> dict[str, int]:
    """Run one sync handler over the whole vault or a single file.

    Per-file failures such as rename conflicts are logged and counted; they
    do not stop the pass.

    Args:
        mirror: Configured DateMirror instance.
        vault_root: Root directory of the vault.
        direction: "filename" to rename from frontmatter, "frontmatter" to write from filenames.
        specific_file: Optional single file to sync instead of the whole vault.

    Returns:
        Dictionary with processed, renamed, updated and errors counts.
    """
    if direction not in DIRECTIONS:
        raise ValueError(f"Unknown direction: {direction}")

    stats = {"processed": 0, "renamed": 0, "updated": 0, "errors": 0}
    paths = (
        [specific_file]
        if specific_file
        else walk_markdown_files(vault_root, mirror.settings.extensions)
    )

    for path in paths:
        document = Document(path)
        if not mirror.is_applicable(document):
            continue
        stats["processed"] += 1
        try:
            if DIRECTIONS[direction] == FRONTMATTER_CHANGED:
                if await mirror.update_filename(document) is not None:
                    stats["renamed"] += 1
            elif await mirror.update_frontmatter(document):
                stats["updated"] += 1
        except FileExistsError as e:
            mirror.logger.error(f"Rename conflict: {e}")
            stats["errors"] += 1
        except (OSError, ValueError) as e:
            mirror.logger.error(f"Error syncing {path}: {e}")
            stats["errors"] += 1

    return stats
