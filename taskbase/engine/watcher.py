"""Filesystem change feed for the vault.

Watchdog delivers events on its own thread; they are marshalled onto the
asyncio loop so the rest of taskbase stays single-threaded.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from watchdog.events import FileSystemEvent

logger = logging.getLogger(__name__)


class VaultChangeHandler:
    """Classify filesystem events into document and selection-file changes."""

    def __init__(
        self,
        vault_root: Path,
        on_documents_changed: Callable[[], None],
        selection_path: Path | None = None,
        on_selection_changed: Callable[[], None] | None = None,
    ):
        self.vault_root = vault_root.resolve()
        self.on_documents_changed = on_documents_changed
        self.selection_path = selection_path.resolve() if selection_path else None
        self.on_selection_changed = on_selection_changed

    def _is_document(self, path: Path) -> bool:
        if path.suffix != ".md":
            return False
        try:
            rel_parts = path.relative_to(self.vault_root).parts
        except ValueError:
            return False
        # Skip hidden files and directories (.taskbase, .git, temp files)
        return not any(part.startswith(".") for part in rel_parts)

    def handle_path(self, raw_path: str) -> None:
        path = Path(raw_path).resolve()
        if self.selection_path is not None and path == self.selection_path:
            logger.debug("Selection file changed: %s", path)
            if self.on_selection_changed is not None:
                self.on_selection_changed()
        elif self._is_document(path):
            logger.debug("Document changed: %s", path)
            self.on_documents_changed()

    def dispatch(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        if event.event_type in ("modified", "created", "deleted", "moved", "closed"):
            self.handle_path(str(event.src_path))
            dest_path = getattr(event, "dest_path", None)
            if dest_path:
                self.handle_path(str(dest_path))


class VaultWatcher:
    """Run a watchdog observer and forward events onto the event loop."""

    def __init__(self, handler: VaultChangeHandler, loop: asyncio.AbstractEventLoop):
        self.handler = handler
        self.loop = loop
        self._observer = None

    def start(self) -> None:
        from watchdog.events import FileSystemEventHandler
        from watchdog.observers import Observer

        watcher = self

        class WatchdogHandler(FileSystemEventHandler):
            def on_any_event(self, event):
                watcher.loop.call_soon_threadsafe(watcher.handler.dispatch, event)

        observer = Observer()
        observer.schedule(WatchdogHandler(), str(self.handler.vault_root), recursive=True)
        if self.handler.selection_path is not None:
            sel_dir = self.handler.selection_path.parent
            try:
                sel_dir.relative_to(self.handler.vault_root)
            except ValueError:
                observer.schedule(WatchdogHandler(), str(sel_dir), recursive=False)
        observer.start()
        self._observer = observer
        logger.info("Watching: %s", self.handler.vault_root)

    def stop(self) -> None:
        if self._observer is not None:
            self._observer.stop()
            self._observer.join()
            self._observer = None
            logger.info("Stopped watching: %s", self.handler.vault_root)
