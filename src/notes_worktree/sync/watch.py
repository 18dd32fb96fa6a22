"""Watch mode: rerun the reconciler when markdown files change.

A watchdog observer thread only flags that something changed.  The main
thread waits for the flag, lets a burst of events settle, and runs one full
reconciliation at a time, so reconciliation never overlaps itself.
"""

from __future__ import annotations

import logging
import threading
import time
from pathlib import Path
from typing import Callable

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from notes_worktree.sync.engine import Reconciler
from notes_worktree.sync.models import SyncReport
from notes_worktree.sync.scanner import MARKDOWN_SUFFIX

logger = logging.getLogger(__name__)

_POLL_INTERVAL = 0.5
_SETTLE_DELAY = 0.5


class DocumentEventHandler(FileSystemEventHandler):
    """Set *pending* whenever a markdown path outside ``.git`` changes.

    Args:
        pending: Event flag consumed by the watch loop.
    """

    def __init__(self, pending: threading.Event) -> None:
        super().__init__()
        self.pending = pending

    @staticmethod
    def is_relevant(path: str) -> bool:
        p = Path(path)
        return p.name.endswith(MARKDOWN_SUFFIX) and ".git" not in p.parts

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        paths = [event.src_path, getattr(event, "dest_path", "")]
        if any(path and self.is_relevant(str(path)) for path in paths):
            logger.debug("Change detected: %s %s", event.event_type, event.src_path)
            self.pending.set()


def watch(
    reconciler: Reconciler,
    on_report: Callable[[SyncReport], None],
    stop: threading.Event | None = None,
    observer_factory: Callable[[], Observer] = Observer,
    settle_delay: float = _SETTLE_DELAY,
    cleanup: bool = False,
) -> None:
    """Reconcile once, then again after every batch of markdown changes.

    Runs until *stop* is set or Ctrl+C is pressed.

    Args:
        reconciler: Configured reconciler for the project.
        on_report: Called with every ``SyncReport``.
        stop: Optional flag that ends the loop.
        observer_factory: Creates the filesystem observer.
        settle_delay: Seconds to wait for an event burst to finish.
        cleanup: Run the cleanup auditor before the first reconciliation.
    """
    stop = stop or threading.Event()
    pending = threading.Event()
    root = reconciler.ctx.project_root

    on_report(reconciler.run(cleanup=cleanup))

    observer = observer_factory()
    observer.schedule(DocumentEventHandler(pending), str(root), recursive=True)
    logger.info("Watching %s for changes... (Ctrl+C to stop)", root)
    observer.start()

    try:
        while not stop.is_set():
            if not pending.wait(_POLL_INTERVAL):
                continue
            time.sleep(settle_delay)
            pending.clear()
            report = reconciler.run()
            # Events caused by this run's own links and moves
            pending.clear()
            on_report(report)
    except KeyboardInterrupt:
        logger.info("Stopping watch...")
    finally:
        observer.stop()
        observer.join(timeout=10)
        logger.info("Watch stopped.")
