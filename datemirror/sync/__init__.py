"""Filename and frontmatter date synchronisation for datemirror.

This module holds the orchestrator, the one-shot vault pass and the watcher.
"""

from .batch import DIRECTIONS, sync_vault
from .orchestrator import FRONTMATTER_CHANGED, RENAMED, TRIGGERS, DateMirror
from .watcher import DateMirrorEventHandler, watch_vault

__all__ = [
    "DateMirror",
    "FRONTMATTER_CHANGED",
    "RENAMED",
    "TRIGGERS",
    "DIRECTIONS",
    "sync_vault",
    "DateMirrorEventHandler",
    "watch_vault",
]
