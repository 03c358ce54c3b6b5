"""Bidirectional filename/frontmatter date sync for datemirror."""

from __future__ import annotations

import asyncio
from collections import Counter
from collections.abc import Callable
from pathlib import Path
from typing import Any

from ..config import Settings
from ..core.dates import (
    format_date,
    format_frontmatter_date,
    parse_date_value,
    values_match,
)
from ..core.filenames import extract_date_from_filename, replace_date_in_filename
from ..core.frontmatter import process_frontmatter, read_frontmatter
from ..utils import log_frontmatter_update, log_rename
from ..vault.documents import Document, is_hidden, rename_document

FRONTMATTER_CHANGED = "frontmatter"
RENAMED = "rename"
TRIGGERS = (FRONTMATTER_CHANGED, RENAMED)


class DateMirror:
    """Keep filenames and a frontmatter date property mirrored.

    Two handlers do the work: ``update_filename`` reacts to frontmatter
    changes and ``update_frontmatter`` reacts to renames. Each performs at
    most one rename or one frontmatter write and skips no-op writes, so a
    write echoed back through the other handler settles immediately.

    Events coming from a watcher go through ``schedule``, which debounces
    them per document: a pending timer for the same document is cancelled
    and replaced, except that a pending rename is never downgraded to a
    frontmatter change. Handlers for one document never run concurrently.
    """

    def __init__(
        self,
        settings: Settings,
        logger: Any,
        dry_run: bool = False,
        vault_root: Path | None = None,
        settings_saver: Callable[[Settings], None] | None = None,
    ) -> None:
        self.settings = settings
        self.logger = logger
        self.dry_run = dry_run
        self.vault_root = vault_root
        self._settings_saver = settings_saver
        self._timers: dict[Path, tuple[asyncio.TimerHandle, str]] = {}
        self._locks: dict[Path, asyncio.Lock] = {}
        self._lock_users: Counter[Path] = Counter()
        self._running: set[asyncio.Task[None]] = set()
        self._closed = False

    def is_applicable(self, document: Document) -> bool:
        """Check whether a document is a note that carries frontmatter."""
        suffixes = {ext.lower() for ext in self.settings.extensions}
        if document.path.suffix.lower() not in suffixes:
            return False
        if self.vault_root is not None and is_hidden(document.path, self.vault_root):
            return False
        return True

    def update_settings(self, **changes: Any) -> Settings:
        """Validate, persist and apply new settings.

        Raises:
            ValueError: If an unknown setting is given.
            pydantic.ValidationError: If a value is invalid.
        """
        unknown = set(changes) - set(Settings.model_fields)
        if unknown:
            raise ValueError(f"Unknown settings: {', '.join(sorted(unknown))}")
        settings = Settings.model_validate({**self.settings.to_dict(), **changes})
        if self._settings_saver is not None:
            self._settings_saver(settings)
        self.settings = settings
        self.logger.debug(f"Settings updated: {changes}")
        return settings

    async def update_filename(self, document: Document) -> Path | None:
        """Rename a document so its filename date matches its frontmatter date.

        Args:
            document: Document whose frontmatter changed.

        Returns:
            The new path if a rename happened (or would happen in dry-run), None otherwise.

        Raises:
            FileExistsError: If the target filename is already taken.
            OSError: If the rename fails.
        """
        settings = self.settings
        if not settings.is_configured or not self.is_applicable(document):
            return None

        frontmatter = await asyncio.to_thread(read_frontmatter, document.path)
        if not frontmatter:
            return None

        value = frontmatter.get(settings.date_property)
        if value is None or value == "":
            return None

        parsed = parse_date_value(
            value, settings.date_format, settings.fallback_date_formats
        )
        if parsed is None:
            self.logger.debug(
                f"Skipping {document.path.name}: {settings.date_property}={value!r} is not a date"
            )
            return None

        formatted = format_date(parsed, settings.date_format)
        new_name = replace_date_in_filename(
            document.basename, settings.date_format, formatted
        )
        # Unchanged name covers both "no date in filename" and "date already matches"
        if new_name == document.basename:
            return None

        new_path = document.with_basename(new_name)
        log_rename(document.path, new_path, self.dry_run)
        if self.dry_run:
            self.logger.info(
                f"[DRY RUN] Would rename {document.path.name} -> {new_path.name}"
            )
            return new_path

        self.logger.info(f"Renaming {document.path} -> {new_path}")
        await asyncio.to_thread(rename_document, document, new_path)
        return new_path

    async def update_frontmatter(self, document: Document) -> bool:
        """Write the filename date into the frontmatter date property.

        Args:
            document: Document that was renamed.

        Returns:
            True if the frontmatter was (or in dry-run would be) written.

        Raises:
            ValueError: If the document has invalid frontmatter.
            OSError: If the document cannot be read or written.
        """
        settings = self.settings
        if not settings.is_configured or not self.is_applicable(document):
            return False

        parsed = extract_date_from_filename(document.basename, settings.date_format)
        if parsed is None:
            return False

        prop = settings.date_property
        new_value = format_frontmatter_date(parsed, settings.date_format)

        if self.dry_run:
            frontmatter = await asyncio.to_thread(read_frontmatter, document.path)
            current = (frontmatter or {}).get(prop)
            if values_match(current, new_value, settings.date_format):
                return False
            log_frontmatter_update(document.path, prop, current, new_value, True)
            self.logger.info(
                f"[DRY RUN] Would update {prop} in {document.path.name} to {new_value!r}"
            )
            return True

        def mutate(frontmatter: dict[str, Any]) -> None:
            current = frontmatter.get(prop)
            if not values_match(current, new_value, settings.date_format):
                log_frontmatter_update(document.path, prop, current, new_value, False)
                frontmatter[prop] = new_value

        written = await asyncio.to_thread(process_frontmatter, document.path, mutate)
        if written:
            self.logger.info(f"Updated {prop} in {document.path} to {new_value!r}")
        return written

    def schedule(self, path: Path, trigger: str) -> None:
        """Debounce a trigger for a document.

        Must be called from the event loop thread.

        Args:
            path: Path of the document the event is about.
            trigger: FRONTMATTER_CHANGED or RENAMED.
        """
        if trigger not in TRIGGERS:
            raise ValueError(f"Unknown trigger: {trigger}")
        if self._closed:
            return

        key = path.resolve()
        previous = self._timers.pop(key, None)
        if previous is not None:
            handle, pending_trigger = previous
            handle.cancel()
            # A modification must not undo a pending rename
            if pending_trigger == RENAMED:
                trigger = RENAMED

        loop = asyncio.get_running_loop()
        handle = loop.call_later(
            self.settings.debounce_seconds, self._fire, key, Document(path), trigger
        )
        self._timers[key] = (handle, trigger)

    def pending(self, path: Path) -> bool:
        """Whether a document has a debounced action waiting to run."""
        return path.resolve() in self._timers

    def _fire(self, key: Path, document: Document, trigger: str) -> None:
        self._timers.pop(key, None)
        task = asyncio.get_running_loop().create_task(
            self._run(key, document, trigger)
        )
        self._running.add(task)
        task.add_done_callback(self._running.discard)

    async def _run(self, key: Path, document: Document, trigger: str) -> None:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._lock_users[key] += 1
        try:
            async with lock:
                await self._handle(document, trigger)
        finally:
            self._lock_users[key] -= 1
            if not self._lock_users[key]:
                del self._lock_users[key]
                del self._locks[key]

    async def _handle(self, document: Document, trigger: str) -> None:
        if not document.path.exists():
            self.logger.debug(f"Skipping {document.path}: file no longer exists")
            return
        try:
            if trigger == FRONTMATTER_CHANGED:
                await self.update_filename(document)
            else:
                await self.update_frontmatter(document)
        except FileExistsError as e:
            self.logger.error(f"Rename conflict: {e}")
        except (OSError, ValueError) as e:
            self.logger.error(f"Error syncing {document.path}: {e}")

    async def shutdown(self) -> None:
        """Cancel pending debounced actions and wait for running ones."""
        self._closed = True
        for handle, _ in self._timers.values():
            handle.cancel()
        if self._timers:
            self.logger.debug(f"Cancelled {len(self._timers)} pending actions")
        self._timers.clear()
        if self._running:
            await asyncio.gather(*self._running, return_exceptions=True)
