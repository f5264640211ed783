"""
Directory scanner.

Lists the watched directory, groups matching files by the prefix captured
from their names, and picks the newest file of each group.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from pathlib import Path

from ..errors import DirectoryScanError
from .models import FileRecord

logger = logging.getLogger(__name__)

RecordFactory = Callable[[str, Path], FileRecord]


class DirectoryScanner:
    """
    Finds the most recently created file for every prefix in a directory.

    Only top-level regular files are considered. Entries that vanish or
    cannot be stat'ed while the scan is running are skipped.
    """

    def __init__(
        self,
        directory: str | Path,
        filename_regex: re.Pattern[str],
        record_factory: RecordFactory = FileRecord.from_path,
    ):
        """
        Initialize directory scanner.

        Args:
            directory: Directory to scan (not recursive)
            filename_regex: Pattern searched in each file name; group 1 is the prefix
            record_factory: Builds a FileRecord from (prefix, path)
        """
        self.directory = Path(directory)
        self.filename_regex = filename_regex
        self.record_factory = record_factory

    def prefix_of(self, filename: str) -> str | None:
        """Return the prefix captured from a file name, or None if it does not match."""
        match = self.filename_regex.search(filename)
        if match is None:
            return None
        prefix = match.group(1)
        return prefix or None

    def scan(self) -> dict[str, FileRecord]:
        """
        Scan the directory.

        Returns:
            Mapping of prefix -> newest candidate FileRecord. Within a prefix
            the largest creation time wins; ties keep the first file in
            enumeration order.

        Raises:
            DirectoryScanError: If the directory itself cannot be listed. An
                empty mapping always means no file matched.
        """
        groups: dict[str, list[FileRecord]] = {}

        try:
            entries = sorted(self.directory.iterdir())
        except OSError as e:
            raise DirectoryScanError(f"Unable to list directory {self.directory}: {e}") from e

        for entry in entries:
            prefix = self.prefix_of(entry.name)
            if prefix is None:
                continue

            try:
                if not entry.exists() or entry.is_dir():
                    continue
                record = self.record_factory(prefix, entry)
            except OSError as e:
                # deleted or renamed between listing and stat
                logger.debug(f"Skipping {entry} during scan: {e}")
                continue

            groups.setdefault(prefix, []).append(record)

        scanned: dict[str, FileRecord] = {}
        for prefix, candidates in groups.items():
            # stable sort keeps enumeration order among equal creation times
            newest_first = sorted(candidates, key=lambda r: r.create_time, reverse=True)
            scanned[prefix] = newest_first[0]

        logger.debug(
            f"Scanned {self.directory}: {len(entries)} entries, {len(scanned)} prefixes"
        )
        return scanned
