"""Output sinks for tailed lines and lifecycle notices.

The tailing engine never prints directly; it hands ``(prefix, line)`` pairs
and human-readable notices to a ``LineSink``.
"""

from __future__ import annotations

import sys
import threading
from typing import Protocol, TextIO

from .events.models import Event

NOTICE_MARKER = "*********"


class LineSink(Protocol):
    """Destination for tailed lines and lifecycle notices."""

    def write_line(self, prefix: str, line: str) -> None:
        ...

    def notice(self, message: str) -> None:
        ...


class ConsoleSink:
    """Writes tailed lines and notices to a text stream (stdout by default)."""

    def __init__(self, stream: TextIO | None = None, bell_stream: TextIO | None = None):
        self._stream = stream
        self._bell_stream = bell_stream
        self._lock = threading.Lock()

    @property
    def stream(self) -> TextIO:
        # resolved lazily so pytest's capsys replacement of sys.stdout is honoured
        return self._stream if self._stream is not None else sys.stdout

    def write_line(self, prefix: str, line: str) -> None:
        self._write(f"{prefix}: {line}")

    def notice(self, message: str) -> None:
        self._write(f"{NOTICE_MARKER} {message}")

    def write_raw(self, text: str) -> None:
        """Write an unprefixed line (startup banner, tables)."""
        self._write(text)

    def ring_bell(self, event: Event) -> None:
        """Alert handler: emit the terminal bell without blocking."""
        stream = self._bell_stream if self._bell_stream is not None else sys.stderr
        with self._lock:
            stream.write("\a")
            stream.flush()

    def _write(self, text: str) -> None:
        with self._lock:
            self.stream.write(text + "\n")
            self.stream.flush()


class RecordingSink:
    """Collects lines and notices in memory."""

    def __init__(self) -> None:
        self.lines: list[tuple[str, str]] = []
        self.notices: list[str] = []
        self._lock = threading.Lock()

    def write_line(self, prefix: str, line: str) -> None:
        with self._lock:
            self.lines.append((prefix, line))

    def notice(self, message: str) -> None:
        with self._lock:
            self.notices.append(message)

    def write_raw(self, text: str) -> None:
        self.notice(text)

    def lines_for(self, prefix: str) -> list[str]:
        return [line for p, line in self.lines if p == prefix]

    def notices_containing(self, text: str) -> list[str]:
        return [n for n in self.notices if text in n]
