"""Tests for DirectoryScanner."""

import re
from pathlib import Path

import pytest

from dirtail.errors import DirectoryScanError
from dirtail.tailing.models import FileRecord
from dirtail.tailing.scanner import DirectoryScanner


def factory_with_times(create_times: dict[str, float]):
    """Record factory that assigns creation times by file name."""

    def build(prefix: str, path: Path) -> FileRecord:
        record = FileRecord.from_path(prefix, path)
        record.create_time = create_times.get(path.name, 0.0)
        return record

    return build


class TestDirectoryScannerSelection:
    """Tests for newest-per-prefix selection."""

    def test_picks_newest_file_per_prefix(self, log_dir: Path, filename_regex: re.Pattern[str]) -> None:
        names = ["tfeA_1.log", "tfeA_2.log", "tfeA_3.log", "tfeB_7.log"]
        for name in names:
            (log_dir / name).write_text("x\n")
        times = {"tfeA_1.log": 10.0, "tfeA_2.log": 30.0, "tfeA_3.log": 20.0, "tfeB_7.log": 5.0}

        scanner = DirectoryScanner(log_dir, filename_regex, factory_with_times(times))
        scanned = scanner.scan()

        assert set(scanned) == {"tfeA", "tfeB"}
        assert scanned["tfeA"].path.name == "tfeA_2.log"
        assert scanned["tfeB"].path.name == "tfeB_7.log"

    def test_ties_keep_enumeration_order(self, log_dir: Path, filename_regex: re.Pattern[str]) -> None:
        for name in ["tfeA_1.log", "tfeA_2.log"]:
            (log_dir / name).write_text("x\n")
        times = {"tfeA_1.log": 10.0, "tfeA_2.log": 10.0}

        scanned = DirectoryScanner(log_dir, filename_regex, factory_with_times(times)).scan()

        assert scanned["tfeA"].path.name == "tfeA_1.log"

    def test_scan_is_idempotent(self, log_dir: Path, filename_regex: re.Pattern[str]) -> None:
        for name in ["tfeA_1.log", "tfeA_2.log", "tfeB_1.log"]:
            (log_dir / name).write_text("x\n")
        times = {"tfeA_1.log": 1.0, "tfeA_2.log": 2.0, "tfeB_1.log": 3.0}
        scanner = DirectoryScanner(log_dir, filename_regex, factory_with_times(times))

        first = scanner.scan()
        second = scanner.scan()

        assert {p: r.path for p, r in first.items()} == {p: r.path for p, r in second.items()}

    def test_uses_real_creation_times(self, log_dir: Path, filename_regex: re.Pattern[str]) -> None:
        """Default factory snapshots size and starts tailing at end of file."""
        (log_dir / "tfeA_1.log").write_text("hello\n")

        record = DirectoryScanner(log_dir, filename_regex).scan()["tfeA"]

        assert record.size == 6
        assert record.last_tailed_offset == 6
        assert record.create_time > 0


class TestDirectoryScannerFiltering:
    """Tests for entries that must be ignored."""

    def test_ignores_non_matching_names(self, log_dir: Path, filename_regex: re.Pattern[str]) -> None:
        (log_dir / "other_1.log").write_text("x\n")
        (log_dir / "tfeA.txt").write_text("x\n")

        assert DirectoryScanner(log_dir, filename_regex).scan() == {}

    def test_ignores_directories(self, log_dir: Path, filename_regex: re.Pattern[str]) -> None:
        (log_dir / "tfeA_1.log").mkdir()

        assert DirectoryScanner(log_dir, filename_regex).scan() == {}

    def test_ignores_empty_prefix(self, log_dir: Path) -> None:
        (log_dir / "_1.log").write_text("x\n")
        regex = re.compile(r"(.*)_\d+\.log")

        assert DirectoryScanner(log_dir, regex).scan() == {}

    def test_skips_files_vanishing_mid_scan(self, log_dir: Path, filename_regex: re.Pattern[str]) -> None:
        (log_dir / "tfeA_1.log").write_text("x\n")
        (log_dir / "tfeB_1.log").write_text("x\n")

        def flaky(prefix: str, path: Path) -> FileRecord:
            if prefix == "tfeA":
                raise FileNotFoundError(path)
            return FileRecord.from_path(prefix, path)

        scanned = DirectoryScanner(log_dir, filename_regex, flaky).scan()

        assert set(scanned) == {"tfeB"}

    def test_unlistable_directory_raises(self, tmp_path: Path, filename_regex: re.Pattern[str]) -> None:
        """A failed listing is an error, never an empty result."""
        with pytest.raises(DirectoryScanError, match="Unable to list directory"):
            DirectoryScanner(tmp_path / "nope", filename_regex).scan()

    def test_prefix_of(self, log_dir: Path, filename_regex: re.Pattern[str]) -> None:
        scanner = DirectoryScanner(log_dir, filename_regex)

        assert scanner.prefix_of("tfeWorker_123.log") == "tfeWorker"
        assert scanner.prefix_of("server_1.log") is None
