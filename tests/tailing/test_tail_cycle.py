"""Tests for TailCycle."""

import re
from pathlib import Path

from dirtail.errors import TailReadError
from dirtail.events.models import FILE_ERROR, LINE_ALERT
from dirtail.sinks import RecordingSink
from dirtail.tailing.line_reader import LineReader
from dirtail.tailing.models import FileRecord, FileStat
from dirtail.tailing.registry import FileRegistry
from dirtail.tailing.reporter import Reporter
from dirtail.tailing.tail_cycle import TailCycle, stat_fresh


def track(registry: FileRegistry, path: Path, prefix: str) -> FileRecord:
    """Start tracking an existing file from its current end."""
    record = FileRecord.from_path(prefix, path)
    record.create_time = 0.0  # never rewind
    registry.start_all({prefix: record})
    return record


def append(path: Path, text: str) -> None:
    with path.open("a") as f:
        f.write(text)


class TestTailCycleGrowth:
    """Tests for emitting appended lines."""

    def test_emits_appended_lines_with_prefix(self, log_dir: Path, reporter: Reporter, sink: RecordingSink) -> None:
        log_file = log_dir / "tfeA_1.log"
        log_file.write_text("old line\n")
        registry = FileRegistry(reporter)
        record = track(registry, log_file, "tfeA")

        append(log_file, "new 1\nnew 2\n")
        stats = TailCycle(reporter).run(registry)

        assert sink.lines == [("tfeA", "new 1"), ("tfeA", "new 2")]
        assert stats.lines == 2
        assert record.last_tailed_offset == log_file.stat().st_size
        assert record.size == log_file.stat().st_size

    def test_no_change_is_a_noop(self, log_dir: Path, reporter: Reporter, sink: RecordingSink) -> None:
        log_file = log_dir / "tfeA_1.log"
        log_file.write_text("old line\n")
        registry = FileRegistry(reporter)
        track(registry, log_file, "tfeA")
        cycle = TailCycle(reporter)

        stats = cycle.run(registry)

        assert sink.lines == []
        assert stats.changed == 0

    def test_partial_line_waits_for_terminator(self, log_dir: Path, reporter: Reporter, sink: RecordingSink) -> None:
        log_file = log_dir / "tfeA_1.log"
        log_file.write_text("")
        registry = FileRegistry(reporter)
        track(registry, log_file, "tfeA")
        cycle = TailCycle(reporter)

        append(log_file, "complete\npart")
        cycle.run(registry)
        append(log_file, "ial\n")
        cycle.run(registry)

        assert sink.lines_for("tfeA") == ["complete", "partial"]

    def test_each_file_keeps_its_prefix(self, log_dir: Path, reporter: Reporter, sink: RecordingSink) -> None:
        first = log_dir / "tfeA_1.log"
        second = log_dir / "tfeB_1.log"
        first.write_text("")
        second.write_text("")
        registry = FileRegistry(reporter)
        track(registry, first, "tfeA")
        track(registry, second, "tfeB")

        append(first, "from a\n")
        append(second, "from b\n")
        TailCycle(reporter).run(registry)

        assert sink.lines_for("tfeA") == ["from a"]
        assert sink.lines_for("tfeB") == ["from b"]


class TestTailCycleTruncation:
    """Tests for files that shrink."""

    def test_shrink_clamps_offset_without_output(self, make_record, reporter: Reporter, sink: RecordingSink) -> None:
        record = make_record("tfeA", Path("/logs/tfeA_1.log"), size=100, write_time=1.0)
        cycle = TailCycle(reporter, stat_func=lambda path: FileStat(size=10, write_time=2.0))

        cycle.tail_record(record, FileStat(size=10, write_time=2.0))

        assert record.last_tailed_offset == 10
        assert record.size == 10
        assert record.write_time == 2.0
        assert sink.lines == []

    def test_growth_after_truncation_reads_new_content(
        self, log_dir: Path, reporter: Reporter, sink: RecordingSink
    ) -> None:
        log_file = log_dir / "tfeA_1.log"
        log_file.write_text("x" * 50 + "\n")
        registry = FileRegistry(reporter)
        track(registry, log_file, "tfeA")
        cycle = TailCycle(reporter)

        log_file.write_text("short\n")
        cycle.run(registry)
        append(log_file, "after truncate\n")
        cycle.run(registry)

        assert sink.lines_for("tfeA") == ["after truncate"]


class TestTailCycleAlerts:
    """Tests for the alert pattern."""

    def test_one_alert_per_matching_line(
        self, log_dir: Path, reporter: Reporter, bus, alert_regex: re.Pattern[str]
    ) -> None:
        alerts = []
        bus.subscribe(LINE_ALERT, alerts.append)
        log_file = log_dir / "tfeA_1.log"
        log_file.write_text("")
        registry = FileRegistry(reporter)
        track(registry, log_file, "tfeA")

        append(
            log_file,
            "System.NullReferenceException: boom\n"
            "all good\n"
            "IO.FileError: disk\n",
        )
        stats = TailCycle(reporter, alert_regex=alert_regex).run(registry)

        assert stats.alerts == 2
        assert [a.data["line"] for a in alerts] == [
            "System.NullReferenceException: boom",
            "IO.FileError: disk",
        ]
        assert all(a.data["prefix"] == "tfeA" for a in alerts)

    def test_no_alerts_when_disabled(self, log_dir: Path, reporter: Reporter, bus) -> None:
        alerts = []
        bus.subscribe(LINE_ALERT, alerts.append)
        log_file = log_dir / "tfeA_1.log"
        log_file.write_text("")
        registry = FileRegistry(reporter)
        track(registry, log_file, "tfeA")

        append(log_file, "System.NullReferenceException: boom\n")
        TailCycle(reporter, alert_regex=None).run(registry)

        assert alerts == []


class TestTailCycleErrors:
    """Tests for per-record failure isolation."""

    def test_deleted_file_is_reported_and_kept(
        self, log_dir: Path, reporter: Reporter, sink: RecordingSink, bus
    ) -> None:
        errors = []
        bus.subscribe(FILE_ERROR, errors.append)
        gone = log_dir / "tfeA_1.log"
        alive = log_dir / "tfeB_1.log"
        gone.write_text("")
        alive.write_text("")
        registry = FileRegistry(reporter)
        track(registry, gone, "tfeA")
        track(registry, alive, "tfeB")

        gone.unlink()
        append(alive, "still here\n")
        stats = TailCycle(reporter).run(registry)

        assert stats.errors == 1
        assert sink.lines == [("tfeB", "still here")]
        assert "tfeA" in registry
        assert sink.notices_containing("tfeA: Cannot get file time and/or size")
        assert errors[0].data["prefix"] == "tfeA"

    def test_read_failure_is_retried_next_cycle(self, log_dir: Path, reporter: Reporter, sink: RecordingSink) -> None:
        log_file = log_dir / "tfeA_1.log"
        log_file.write_text("")
        registry = FileRegistry(reporter)
        record = track(registry, log_file, "tfeA")

        class FailingOnce(LineReader):
            calls = 0

            def read_lines(self, path, start, end):
                FailingOnce.calls += 1
                if FailingOnce.calls == 1:
                    raise TailReadError(str(path), "Unable to read file: locked")
                return super().read_lines(path, start, end)

        cycle = TailCycle(reporter, line_reader=FailingOnce())
        append(log_file, "line\n")

        cycle.run(registry)
        assert sink.lines == []
        assert record.size == 0

        cycle.run(registry)
        assert sink.lines == [("tfeA", "line")]


def test_stat_fresh_reads_size_and_mtime(tmp_path: Path) -> None:
    log_file = tmp_path / "tfeA_1.log"
    log_file.write_text("abc\n")

    observed = stat_fresh(log_file)

    assert observed.size == 4
    assert observed.write_time == log_file.stat().st_mtime
