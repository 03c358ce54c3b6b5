"""Vault-level operations for datemirror.

This module handles document handles, renames, property discovery and vault setup.
"""

from .documents import Document, is_hidden, rename_document, walk_markdown_files
from .init import init_vault
from .properties import count_date_properties, is_date_value, list_date_properties

__all__ = [
    "Document",
    "is_hidden",
    "rename_document",
    "walk_markdown_files",
    "init_vault",
    "count_date_properties",
    "is_date_value",
    "list_date_properties",
]
