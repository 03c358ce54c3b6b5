"""Filesystem watcher that feeds vault events into the orchestrator."""

from __future__ import annotations

import asyncio
import os
import signal
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from ..vault.documents import Document
from .orchestrator import FRONTMATTER_CHANGED, RENAMED, DateMirror


class DateMirrorEventHandler(FileSystemEventHandler):
    """Translate watchdog events into debounced DateMirror triggers.

    Watchdog calls these methods from its observer thread, so triggers are
    handed to the event loop with ``call_soon_threadsafe``.
    """

    def __init__(self, mirror: DateMirror, loop: asyncio.AbstractEventLoop) -> None:
        super().__init__()
        self.mirror = mirror
        self.loop = loop

    def _applicable(self, path: str | bytes) -> bool:
        return self.mirror.is_applicable(Document(Path(os.fsdecode(path))))

    def _trigger(self, path: str | bytes, trigger: str) -> None:
        self.loop.call_soon_threadsafe(
            self.mirror.schedule, Path(os.fsdecode(path)), trigger
        )

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory and self._applicable(event.src_path):
            self._trigger(event.src_path, FRONTMATTER_CHANGED)

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory and self._applicable(event.src_path):
            self._trigger(event.src_path, FRONTMATTER_CHANGED)

    def on_moved(self, event: FileSystemEvent) -> None:
        if event.is_directory or not self._applicable(event.dest_path):
            return

        if not self._applicable(event.src_path):
            # Editors saving through a temp file show up as a move onto the note
            self._trigger(event.dest_path, FRONTMATTER_CHANGED)
            return

        old_name = Path(os.fsdecode(event.src_path)).stem
        new_name = Path(os.fsdecode(event.dest_path)).stem
        if old_name != new_name:
            self._trigger(event.dest_path, RENAMED)


async def watch_vault(
    mirror: DateMirror,
    vault_root: Path,
    stop_event: asyncio.Event | None = None,
) -> None:
    """Watch a vault and keep filenames and frontmatter dates in sync.

    Runs until the stop event is set or SIGINT/SIGTERM is received, then
    stops the observer and cancels pending debounced actions.

    Args:
        mirror: Configured DateMirror instance.
        vault_root: Root directory of the vault.
        stop_event: Optional event that ends the watch when set.
    """
    loop = asyncio.get_running_loop()
    stop = stop_event or asyncio.Event()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop.set)
        except (NotImplementedError, RuntimeError):
            # Not supported on this platform or outside the main thread
            pass

    observer = Observer()
    observer.schedule(
        DateMirrorEventHandler(mirror, loop), str(vault_root), recursive=True
    )
    observer.start()
    mirror.logger.info(f"Watching {vault_root} for changes")

    try:
        await stop.wait()
    finally:
        mirror.logger.info("Stopping watcher...")
        observer.stop()
        await asyncio.to_thread(observer.join, 10)
        await mirror.shutdown()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.remove_signal_handler(sig)
            except (NotImplementedError, RuntimeError):
                pass
