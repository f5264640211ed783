"""File tracking and incremental tail engine.

Key Components:
    - models: FileRecord tracking state and per-cycle FileStat snapshots
    - line_reader: Byte-offset incremental line reading
    - scanner: Newest-file-per-prefix directory scan
    - registry: Bounded prefix -> FileRecord table and scan reconciliation
    - tail_cycle: One pass emitting appended lines for every tracked file
    - reporter: Routes lines, notices and events to their destinations

Example:
    >>> from dirtail.tailing import DirectoryScanner, FileRegistry, Reporter, TailCycle
    >>> reporter = Reporter(sink)
    >>> registry = FileRegistry(reporter, max_files=10)
    >>> registry.reconcile(DirectoryScanner("/var/log/app", regex).scan())
    >>> TailCycle(reporter).run(registry)
"""

from __future__ import annotations

from .line_reader import LineReader
from .models import FileRecord, FileStat
from .registry import FileRegistry, ReconcileResult
from .reporter import Reporter
from .scanner import DirectoryScanner
from .tail_cycle import CycleStats, TailCycle

__all__ = [
    "FileRecord",
    "FileStat",
    "LineReader",
    "DirectoryScanner",
    "FileRegistry",
    "ReconcileResult",
    "Reporter",
    "TailCycle",
    "CycleStats",
]
