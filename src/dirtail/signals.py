"""Signal bits shared between the directory watch and the polling worker."""

from __future__ import annotations

import threading

DIRECTORY_MODIFIED = 0x1000
STOP_REQUESTED = 0x4000


class SignalState:
    """Bitset carrying DIRECTORY_MODIFIED and STOP_REQUESTED.

    ``take()`` is the only way to consume DIRECTORY_MODIFIED: reading and
    clearing happen under one lock, so a bit raised at any moment is seen by
    exactly one ``take()``. STOP_REQUESTED is sticky once raised and is kept
    outside the lock so a signal handler interrupting the main thread can
    raise it without waiting on a lock that thread already holds.
    """

    def __init__(self) -> None:
        self._bits = 0
        self._stop = False
        self._lock = threading.Lock()
        self._wake = threading.Event()

    def raise_flags(self, bits: int) -> None:
        if bits & STOP_REQUESTED:
            self.request_stop()
        if bits & DIRECTORY_MODIFIED:
            with self._lock:
                self._bits |= DIRECTORY_MODIFIED

    def take(self) -> int:
        """Atomically return the current bits and clear DIRECTORY_MODIFIED."""
        with self._lock:
            old = self._bits
            self._bits = 0
        return old | (STOP_REQUESTED if self._stop else 0)

    def peek(self) -> int:
        with self._lock:
            bits = self._bits
        return bits | (STOP_REQUESTED if self._stop else 0)

    @property
    def stop_requested(self) -> bool:
        return self._stop

    def request_stop(self) -> None:
        """Set STOP_REQUESTED and wake a sleeping worker."""
        self._stop = True
        self._wake.set()

    def sleep(self, seconds: float) -> bool:
        """Sleep up to ``seconds``; returns True if cut short by a stop request."""
        return self._wake.wait(seconds)
