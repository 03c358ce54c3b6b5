"""Frontmatter reading and writing for datemirror."""

from __future__ import annotations

import copy
import re
from collections.abc import Callable
from pathlib import Path
from typing import Any

import yaml

_FRONTMATTER_RE = re.compile(
    r"\A---[ \t]*\r?\n(.*?)^---[ \t]*(?:\r?\n|\Z)", re.DOTALL | re.MULTILINE
)

_BOM = "\ufeff"


def split_frontmatter(text: str) -> tuple[dict[str, Any] | None, str]:
    """Split the front matter and return it with the content.

    Args:
        text: The markdown text with optional frontmatter.

    Returns:
        Tuple of (frontmatter dict or None, content string).
    """
    text = text.removeprefix(_BOM)
    match = _FRONTMATTER_RE.match(text)
    if match is None:
        return None, text
    try:
        frontmatter = yaml.safe_load(match.group(1))
    except yaml.YAMLError:
        # If YAML parsing fails, treat as no frontmatter
        return None, text
    if frontmatter is None:
        frontmatter = {}
    if not isinstance(frontmatter, dict):
        return None, text
    return frontmatter, text[match.end() :]


def has_frontmatter_block(text: str) -> bool:
    """Check whether the text starts with a frontmatter block, valid or not."""
    return _FRONTMATTER_RE.match(text.removeprefix(_BOM)) is not None


def render_frontmatter(data: dict[str, Any]) -> str:
    """Convert the data back to front matter format.

    Args:
        data: Dictionary to convert to YAML frontmatter.

    Returns:
        YAML frontmatter string with delimiters.
    """
    if not data:
        return "---\n---\n"
    return "---\n" + yaml.safe_dump(data, sort_keys=False, allow_unicode=True) + "---\n"


def read_frontmatter(path: Path) -> dict[str, Any] | None:
    """Read the frontmatter of a file.

    Args:
        path: Path to the markdown file.

    Returns:
        Frontmatter dict, or None if the file has none or cannot be read.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return None
    frontmatter, _ = split_frontmatter(text)
    return frontmatter


def process_frontmatter(path: Path, mutator: Callable[[dict[str, Any]], None]) -> bool:
    """Apply an in-place edit to a file's frontmatter and persist it.

    The file is only rewritten when the mutator actually changed the mapping.
    The body after the frontmatter is kept as is. Files without frontmatter
    get a new block. A leading byte order mark is kept.

    Args:
        path: Path to the markdown file.
        mutator: Function that edits the frontmatter mapping in place.

    Returns:
        True if the file was written, False otherwise.

    Raises:
        ValueError: If the file has a frontmatter block that is not valid YAML.
        OSError: If the file cannot be read or written.
    """
    text = path.read_text(encoding="utf-8")
    frontmatter, body = split_frontmatter(text)
    if frontmatter is None:
        if has_frontmatter_block(text):
            raise ValueError(f"Invalid frontmatter in {path}")
        frontmatter = {}

    original = copy.deepcopy(frontmatter)
    mutator(frontmatter)
    if frontmatter == original:
        return False

    bom = _BOM if text.startswith(_BOM) else ""
    path.write_text(bom + render_frontmatter(frontmatter) + body, encoding="utf-8")
    return True
