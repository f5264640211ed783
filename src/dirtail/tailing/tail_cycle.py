"""One pass over every tracked file, emitting whatever was appended."""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from ..errors import TailReadError
from .line_reader import LineReader
from .models import FileRecord, FileStat
from .registry import FileRegistry
from .reporter import Reporter

logger = logging.getLogger(__name__)

StatFunc = Callable[[Path], FileStat]


def stat_fresh(path: Path) -> FileStat:
    """Stat a file through a newly opened handle.

    Opening a new handle is what makes some platforms flush pending writes to
    the file's metadata, so the handle is never reused across cycles.

    On Windows, Python opens files without FILE_SHARE_DELETE, so a writer
    that deletes or renames the file fails during the moment this handle (or
    the one in LineReader) is open. Both are held only for a single stat or
    read and then closed.

    Raises:
        OSError: If the file cannot be opened or stat'ed
    """
    with open(path, "rb") as f:
        return FileStat.from_stat(os.fstat(f.fileno()))


@dataclass
class CycleStats:
    """Counters for one tail cycle."""

    files: int = 0
    changed: int = 0
    lines: int = 0
    alerts: int = 0
    truncated: int = 0
    errors: int = 0


class TailCycle:
    """
    Emits the lines appended to every registered file since the last cycle.

    For each record: stat it, and if size or modification time moved,
    - shrink: the offset is clamped to the new size and nothing is emitted;
    - growth: complete lines from the last offset to the new size are emitted,
      each tested against the alert pattern when one is configured.
    A failure on one record is reported and the cycle moves on.
    """

    def __init__(
        self,
        reporter: Reporter,
        line_reader: LineReader | None = None,
        alert_regex: re.Pattern[str] | None = None,
        stat_func: StatFunc = stat_fresh,
    ):
        self.reporter = reporter
        self.line_reader = line_reader if line_reader is not None else LineReader()
        self.alert_regex = alert_regex
        self.stat_func = stat_func

    def run(self, registry: FileRegistry) -> CycleStats:
        stats = CycleStats()
        for record in registry:
            stats.files += 1
            try:
                observed = self.stat_func(record.path)
            except OSError as e:
                logger.debug(f"Stat failed for {record.path}: {e}")
                self.reporter.file_error(record, "Cannot get file time and/or size")
                stats.errors += 1
                continue

            try:
                self.tail_record(record, observed, stats)
            except TailReadError as e:
                self.reporter.file_error(record, e.reason)
                # record left untouched, so the read is retried next cycle
                stats.errors += 1
            except Exception as e:
                logger.exception(f"Unexpected error tailing {record.path}: {e}")
                self.reporter.file_error(record, f"Unexpected error: {e}")
                stats.errors += 1
        return stats

    def tail_record(self, record: FileRecord, observed: FileStat, stats: CycleStats | None = None) -> None:
        """Process one record against the size and mtime just observed."""
        if stats is None:
            stats = CycleStats()
        if not record.has_changed(observed):
            return
        stats.changed += 1

        if observed.size < record.size:
            logger.info(
                f"{record.path} shrank from {record.size} to {observed.size} bytes, "
                f"tailing from the new end"
            )
            record.last_tailed_offset = observed.size
            stats.truncated += 1
        elif observed.size > record.size:
            lines, offset = self.line_reader.read_lines(
                record.path, record.last_tailed_offset, observed.size
            )
            for line in lines:
                self.reporter.line(record, line)
                stats.lines += 1
                if self.alert_regex is not None and self.alert_regex.search(line):
                    self.reporter.alert(record, line)
                    stats.alerts += 1
            record.last_tailed_offset = offset

        record.observe(observed)
