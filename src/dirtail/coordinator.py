"""
Coordinator - owns the polling loop and the directory watch.

The calling thread blocks on the directory watch and raises
DIRECTORY_MODIFIED whenever file names change; a worker thread runs the
polling loop, reconciling the registry when it sees that bit and tailing
every tracked file each cycle until a stop is requested.
"""

from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Any

from .config import TailerConfig
from .errors import DirectoryScanError, TooManyFilesError
from .events.bus import EventBus
from .signals import DIRECTORY_MODIFIED, STOP_REQUESTED, SignalState
from .sinks import LineSink
from .tailing.line_reader import LineReader
from .tailing.registry import FileRegistry, ReconcileResult
from .tailing.reporter import Reporter
from .tailing.scanner import DirectoryScanner
from .tailing.tail_cycle import StatFunc, TailCycle, stat_fresh
from .watcher import DirectoryWatcher

logger = logging.getLogger(__name__)


class CoordinatorState(str, Enum):
    """Lifecycle of a coordinator."""

    INITIALIZING = "initializing"
    RUNNING = "running"
    DRAINING = "draining"
    STOPPED = "stopped"


class Coordinator:
    """
    Drives scanning, reconciliation and tailing for one directory.

    States: INITIALIZING -> RUNNING -> DRAINING -> STOPPED. ``request_stop``
    may be called from any thread or from a signal handler; the worker sees
    it at the next read of the signal bits.
    """

    def __init__(
        self,
        config: TailerConfig,
        sink: LineSink,
        bus: EventBus | None = None,
        watcher: Any = None,
        signals: SignalState | None = None,
        scanner: DirectoryScanner | None = None,
        stat_func: StatFunc = stat_fresh,
    ):
        """
        Initialize the coordinator.

        Args:
            config: Validated tailer configuration
            sink: Receives tailed lines and notices
            bus: Event bus for alert and lifecycle events (created if omitted)
            watcher: Directory watch primitive (DirectoryWatcher if omitted)
            signals: Shared signal bits (created if omitted)
            scanner: Directory scanner (built from config if omitted)
            stat_func: Per-cycle stat of a tracked file
        """
        self.config = config
        self.signals = signals if signals is not None else SignalState()
        self.reporter = Reporter(sink, bus, source="dirtail")
        self.scanner = scanner or DirectoryScanner(config.directory_path, config.filename_regex)
        self.registry = FileRegistry(
            self.reporter,
            max_files=config.max_files,
            rewind_max_bytes=config.rewind_max_bytes,
            rewind_max_age_seconds=config.rewind_max_age_seconds,
        )
        self.tail_cycle = TailCycle(
            self.reporter,
            line_reader=LineReader(config.max_line_bytes),
            alert_regex=config.alert_regex,
            stat_func=stat_func,
        )
        self.watcher = watcher if watcher is not None else DirectoryWatcher(config.directory_path)
        self.state = CoordinatorState.INITIALIZING

        self._cycles_since_rescan = 0
        self._worker: threading.Thread | None = None
        self._worker_error: BaseException | None = None

    @property
    def bus(self) -> EventBus:
        return self.reporter.bus

    # ============================================================================
    # Lifecycle
    # ============================================================================

    def run(self) -> None:
        """
        Run until a stop is requested.

        Raises:
            WatchSetupError: If the directory watch cannot be established
            TooManyFilesError: If the initial scan exceeds max_files
            WatchFailedError: If the directory watch dies while running
        """
        self.watcher.start()
        try:
            self.initialize()
            self._worker = threading.Thread(
                target=self.poll_loop, name="dirtail-poller", daemon=True
            )
            self._worker.start()
            self._wait_for_activity()
        finally:
            self.request_stop()
            self.watcher.stop()
            self._join_worker()
            self._transition(CoordinatorState.STOPPED)

        if self._worker_error is not None:
            raise self._worker_error

    def request_stop(self) -> None:
        self.signals.request_stop()

    @property
    def stop_requested(self) -> bool:
        return self.signals.stop_requested

    def initialize(self) -> None:
        """
        Perform the initial scan and start tracking its files.

        Raises:
            TooManyFilesError: If more prefixes match than max_files allows
            DirectoryScanError: If the directory cannot be listed
        """
        scanned = self.scanner.scan()
        if len(scanned) > self.config.max_files:
            logger.error(
                f"Initial scan matched {len(scanned)} prefixes, limit is {self.config.max_files}"
            )
            raise TooManyFilesError(self.config.max_files, scanned)

        if not scanned:
            self.reporter.notice(
                "WARNING: no files found that match the file name regular expression."
            )
        else:
            self.registry.start_all(scanned)
        self._transition(CoordinatorState.RUNNING)

    # ============================================================================
    # Polling worker
    # ============================================================================

    def poll_loop(self) -> None:
        """Worker body: iterate until stopped, then drain."""
        try:
            while self.run_iteration():
                self.signals.sleep(self.config.poll_interval_seconds)
            self._drain()
        except Exception as e:
            logger.critical(f"Polling worker failed: {e}", exc_info=True)
            self._worker_error = e
            self.request_stop()

    def run_iteration(self) -> bool:
        """
        One RUNNING iteration, without the trailing sleep.

        Returns:
            True to keep running, False once a stop request was observed.
        """
        bits = self.signals.take()
        if bits & STOP_REQUESTED:
            self._transition(CoordinatorState.DRAINING)
            return False

        if bits & DIRECTORY_MODIFIED:
            self.rescan()
        elif self._rescan_overdue():
            logger.debug(
                f"No directory change signal for {self._cycles_since_rescan} cycles, rescanning"
            )
            self.rescan()
        else:
            self._cycles_since_rescan += 1

        self.tail_cycle.run(self.registry)

        if self.signals.stop_requested:
            self._transition(CoordinatorState.DRAINING)
            return False
        return True

    def rescan(self) -> ReconcileResult | None:
        """Reconcile the registry with a fresh scan.

        Returns None when the directory could not be listed; the registry is
        left as it was and DIRECTORY_MODIFIED is raised again so the next
        iteration retries.
        """
        self._cycles_since_rescan = 0
        try:
            scanned = self.scanner.scan()
        except DirectoryScanError as e:
            logger.warning(f"Rescan skipped, tracked files kept: {e}")
            self.signals.raise_flags(DIRECTORY_MODIFIED)
            return None
        return self.registry.reconcile(scanned)

    def _rescan_overdue(self) -> bool:
        every = self.config.rescan_every_cycles
        return every > 0 and self._cycles_since_rescan >= every

    def _drain(self) -> None:
        if self.config.final_tail_on_stop:
            logger.debug("Running final tail cycle before exit")
            self.tail_cycle.run(self.registry)

    # ============================================================================
    # Main-thread side
    # ============================================================================

    def _wait_for_activity(self) -> None:
        """Block on the directory watch until the worker exits."""
        timeout = self.config.poll_interval_seconds
        while self._worker is not None and self._worker.is_alive():
            if self.watcher.wait(timeout):
                self.signals.raise_flags(DIRECTORY_MODIFIED)

    def _join_worker(self) -> None:
        if self._worker is None:
            return
        grace = self.config.shutdown_grace_seconds
        self._worker.join(grace)
        if self._worker.is_alive():
            logger.warning(f"Polling worker still running {grace}s after stop request")

    def _transition(self, state: CoordinatorState) -> None:
        if state != self.state:
            logger.debug(f"Coordinator {self.state.value} -> {state.value}")
            self.state = state
