"""
File registry.

In-memory table of the files currently being tailed, one per prefix, and the
reconciliation that applies a fresh directory scan to it.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field

from .models import REWIND_MAX_AGE_SECONDS, REWIND_MAX_BYTES, FileRecord
from .reporter import Reporter

logger = logging.getLogger(__name__)


@dataclass
class ReconcileResult:
    """Prefixes affected by one reconciliation."""

    added: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    rotated: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.added or self.removed or self.rotated)


class FileRegistry:
    """
    Prefix -> FileRecord table bounded by ``max_files``.

    The registry owns its records exclusively. Entries are only added while
    the table is below capacity, so ``len(registry) <= max_files`` always holds.
    """

    def __init__(
        self,
        reporter: Reporter,
        max_files: int = 10,
        rewind_max_bytes: int = REWIND_MAX_BYTES,
        rewind_max_age_seconds: float = REWIND_MAX_AGE_SECONDS,
    ):
        """
        Initialize registry.

        Args:
            reporter: Receives watching/stopped/limit notices
            max_files: Maximum number of tracked prefixes
            rewind_max_bytes: Size bound for rewinding freshly created files
            rewind_max_age_seconds: Age bound for rewinding freshly created files
        """
        self.reporter = reporter
        self.max_files = max_files
        self.rewind_max_bytes = rewind_max_bytes
        self.rewind_max_age_seconds = rewind_max_age_seconds
        self._records: dict[str, FileRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, prefix: object) -> bool:
        return prefix in self._records

    def __iter__(self) -> Iterator[FileRecord]:
        # snapshot so callers may mutate records while iterating
        return iter(list(self._records.values()))

    def get(self, prefix: str) -> FileRecord | None:
        return self._records.get(prefix)

    def prefixes(self) -> list[str]:
        return sorted(self._records)

    def at_capacity(self) -> bool:
        return len(self._records) >= self.max_files

    def start_all(self, scanned: dict[str, FileRecord]) -> None:
        """Track every record of the initial scan.

        The caller has already checked that the scan fits within max_files.
        """
        for prefix in sorted(scanned):
            self._start(scanned[prefix])

    def reconcile(self, scanned: dict[str, FileRecord]) -> ReconcileResult:
        """
        Apply a fresh scan to the registry.

        - Prefixes missing from the scan are stopped and evicted.
        - New prefixes are started while there is room; otherwise a
          "monitoring limit reached" notice is reported and the prefix is
          retried on a later reconciliation.
        - A prefix whose newest file has a different path is rotated: the
          old record is stopped and the new one started in its place.

        Same-path candidates are left alone; metadata refresh happens in the
        tail cycle.
        """
        result = ReconcileResult()

        for prefix in sorted(set(self._records) - set(scanned)):
            record = self._records.pop(prefix)
            record.stop_watching(self.reporter)
            result.removed.append(prefix)

        for prefix in sorted(scanned):
            candidate = scanned[prefix]
            current = self._records.get(prefix)

            if current is None:
                if self.at_capacity():
                    self.reporter.limit_reached(candidate, self.max_files)
                    result.skipped.append(prefix)
                    continue
                self._start(candidate)
                result.added.append(prefix)
            elif current.path != candidate.path:
                current.stop_watching(self.reporter)
                self._start(candidate)
                result.rotated.append(prefix)

        if result.changed or result.skipped:
            logger.info(
                f"Reconciled registry: added={result.added} removed={result.removed} "
                f"rotated={result.rotated} skipped={result.skipped}"
            )
        return result

    def _start(self, record: FileRecord) -> None:
        self._records[record.prefix] = record
        record.start_watching(
            self.reporter,
            max_bytes=self.rewind_max_bytes,
            max_age_seconds=self.rewind_max_age_seconds,
        )
