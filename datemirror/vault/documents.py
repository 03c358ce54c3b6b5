"""Vault document handles, discovery and renaming."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Document:
    """A file in the vault, identified by its path."""

    path: Path

    @property
    def basename(self) -> str:
        """Filename without the extension."""
        return self.path.stem

    @property
    def extension(self) -> str:
        """Extension without the leading dot, empty if there is none."""
        return self.path.suffix[1:]

    @property
    def parent(self) -> Path:
        return self.path.parent

    def with_basename(self, basename: str) -> Path:
        """Path of a sibling file with the same extension and a new basename."""
        filename = f"{basename}.{self.extension}" if self.extension else basename
        return self.parent / filename


def is_hidden(path: Path, root: Path) -> bool:
    """Check whether a path sits in a hidden folder (.git, .obsidian, .datemirror...)."""
    try:
        parts = path.relative_to(root).parts
    except ValueError:
        parts = path.parts
    return any(part.startswith(".") for part in parts)


def walk_markdown_files(
    root: Path, extensions: Iterable[str] = (".md",)
) -> Iterator[Path]:
    """Walk through the vault to find note files, skipping hidden folders.

    Args:
        root: Root directory to search.
        extensions: File suffixes to include, with leading dot.

    Yields:
        Path objects for each note file found.
    """
    suffixes = {ext.lower() for ext in extensions}
    for path in sorted(root.rglob("*")):
        if path.is_file() and path.suffix.lower() in suffixes:
            if not is_hidden(path, root):
                yield path


def rename_document(document: Document, new_path: Path) -> Document:
    """Rename a document on disk.

    Args:
        document: Document to rename.
        new_path: Full destination path.

    Returns:
        Handle for the renamed document.

    Raises:
        FileExistsError: If a file already exists at the destination.
        OSError: If the rename fails.
    """
    if new_path.exists():
        raise FileExistsError(
            f"Cannot rename {document.path.name}: {new_path.name} already exists"
        )
    document.path.rename(new_path)
    return Document(new_path)
