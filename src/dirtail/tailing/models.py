"""Data models for the tailing engine.

This module defines the per-file tracking record, the stat snapshot taken
each tail cycle, and the helpers that pull timestamps out of ``os.stat``.
"""

from __future__ import annotations

import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .reporter import Reporter

REWIND_MAX_BYTES = 1000
REWIND_MAX_AGE_SECONDS = 6.0


def creation_time(st: os.stat_result) -> float:
    """Best available creation timestamp for a stat result.

    ``st_birthtime`` where the platform records it, otherwise ``st_ctime``
    (creation time on Windows, inode change time on POSIX).
    """
    birth = getattr(st, "st_birthtime", None)
    if birth is not None:
        return birth
    return st.st_ctime


@dataclass(frozen=True)
class FileStat:
    """Size and modification time observed for a tracked file in one cycle."""

    size: int
    write_time: float

    @classmethod
    def from_stat(cls, st: os.stat_result) -> FileStat:
        return cls(size=st.st_size, write_time=st.st_mtime)


@dataclass
class FileRecord:
    """Tracking state for the newest file of one prefix.

    Attributes:
        prefix: Group key captured by the filename pattern's first group.
        path: Path of the tracked file.
        create_time: Creation timestamp (seconds since the epoch).
        write_time: Modification time seen on the last tail cycle.
        size: File size seen on the last tail cycle.
        last_tailed_offset: Byte offset of the first byte not yet emitted.
    """

    prefix: str
    path: Path
    create_time: float = 0.0
    write_time: float = 0.0
    size: int = 0
    last_tailed_offset: int = 0

    @classmethod
    def from_path(cls, prefix: str, path: str | Path) -> FileRecord:
        """Snapshot a file that was just discovered.

        Tailing starts at the current end of file, so existing content is not
        replayed (see ``start_watching`` for the exception).

        Raises:
            OSError: If the file vanished or cannot be stat'ed
        """
        file_path = Path(path)
        st = file_path.stat()
        return cls(
            prefix=prefix,
            path=file_path,
            create_time=creation_time(st),
            write_time=st.st_mtime,
            size=st.st_size,
            last_tailed_offset=st.st_size,
        )

    @property
    def filename(self) -> str:
        return self.path.name

    def should_rewind(
        self,
        now: float,
        max_bytes: int = REWIND_MAX_BYTES,
        max_age_seconds: float = REWIND_MAX_AGE_SECONDS,
    ) -> bool:
        """True for a freshly created file that already holds a few bytes."""
        if not 0 < self.size < max_bytes:
            return False
        return (now - self.create_time) < max_age_seconds

    def start_watching(
        self,
        reporter: Reporter,
        now: float | None = None,
        max_bytes: int = REWIND_MAX_BYTES,
        max_age_seconds: float = REWIND_MAX_AGE_SECONDS,
    ) -> None:
        """Begin tracking this file.

        A new file may already contain its first lines by the time the scan
        sees it; in that case tailing rewinds to the start of the file so the
        initial burst is not lost.
        """
        if now is None:
            now = time.time()
        rewound = self.should_rewind(now, max_bytes, max_age_seconds)
        if rewound:
            self.last_tailed_offset = 0
        reporter.watching(self, rewound)

    def stop_watching(self, reporter: Reporter) -> None:
        reporter.stopped(self)

    def observe(self, stat: FileStat) -> None:
        """Store the freshly observed size and modification time."""
        self.size = stat.size
        self.write_time = stat.write_time

    def has_changed(self, stat: FileStat) -> bool:
        return stat.size != self.size or stat.write_time != self.write_time
