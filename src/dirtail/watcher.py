"""Directory change watch built on watchdog.

Only file-name changes (create, delete, move) count as directory activity;
content changes to already-tracked files are picked up by polling.
"""

from __future__ import annotations

import logging
import queue
from collections.abc import Callable
from pathlib import Path
from typing import Any

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from .errors import WatchFailedError, WatchSetupError

logger = logging.getLogger(__name__)


class _ActivityHandler(FileSystemEventHandler):
    """Queues file-name changes seen in the watched directory."""

    def __init__(self, events: queue.Queue[str]):
        super().__init__()
        self._events = events

    def on_created(self, event: FileSystemEvent) -> None:
        self._record(event)

    def on_deleted(self, event: FileSystemEvent) -> None:
        self._record(event)

    def on_moved(self, event: FileSystemEvent) -> None:
        self._record(event)

    def _record(self, event: FileSystemEvent) -> None:
        if event.is_directory:
            return
        self._events.put(event.event_type)


class DirectoryWatcher:
    """Blocking "wait for directory activity" primitive.

    Example:
        with DirectoryWatcher("/var/log/app") as watcher:
            if watcher.wait(timeout=1.0):
                rescan()
    """

    def __init__(self, directory: str | Path, observer_factory: Callable[[], Any] = Observer):
        self.directory = Path(directory)
        self._observer_factory = observer_factory
        self._observer: Any = None
        self._events: queue.Queue[str] = queue.Queue()
        self._handler = _ActivityHandler(self._events)

    @property
    def running(self) -> bool:
        return self._observer is not None

    def start(self) -> None:
        """Begin watching the directory.

        Raises:
            WatchSetupError: If the watch cannot be established
        """
        if self._observer is not None:
            return
        try:
            observer = self._observer_factory()
            observer.schedule(self._handler, str(self.directory), recursive=False)
            observer.start()
        except OSError as e:
            raise WatchSetupError(f"Unable to monitor directory for changes: {e}") from e
        self._observer = observer
        logger.debug(f"Watching {self.directory} for file name changes")

    def wait(self, timeout: float) -> bool:
        """Block until directory activity or timeout.

        Returns:
            True if activity was seen (all queued events are consumed),
            False on timeout.

        Raises:
            WatchFailedError: If the watch is not running or its observer died
        """
        if self._observer is None:
            raise WatchFailedError("Directory watch is not running")
        try:
            self._events.get(timeout=timeout)
        except queue.Empty:
            if not self._observer.is_alive():
                raise WatchFailedError(f"Directory watch on {self.directory} stopped unexpectedly")
            return False

        drained = 1
        while True:
            try:
                self._events.get_nowait()
            except queue.Empty:
                break
            drained += 1
        logger.debug(f"Directory activity in {self.directory} ({drained} events)")
        return True

    def stop(self, timeout: float = 2.0) -> None:
        """Release the watch. Failures are logged, never raised."""
        observer, self._observer = self._observer, None
        if observer is None:
            return
        try:
            observer.stop()
            observer.join(timeout)
        except Exception as e:
            logger.error(f"Failed to stop directory watch on {self.directory}: {e}")
            return
        if observer.is_alive():
            logger.warning(f"Directory watch on {self.directory} did not stop within {timeout}s")

    def __enter__(self) -> DirectoryWatcher:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()
