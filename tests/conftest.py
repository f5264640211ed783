"""Shared fixtures for dirtail tests."""

import logging
import re
from pathlib import Path

import pytest

from dirtail.config import DEFAULT_ALERT_PATTERN, TailerConfig
from dirtail.events.bus import EventBus
from dirtail.sinks import RecordingSink
from dirtail.tailing.models import FileRecord
from dirtail.tailing.reporter import Reporter

FILENAME_PATTERN = r"(tfe.*)_\d+\.log"


@pytest.fixture(autouse=True)
def reset_dirtail_logger():
    """Undo any LoggingManager setup left behind by a test."""
    yield
    logger = logging.getLogger("dirtail")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def log_dir(tmp_path: Path) -> Path:
    """Create an empty directory to tail."""
    directory = tmp_path / "logs"
    directory.mkdir()
    return directory


@pytest.fixture
def filename_regex() -> re.Pattern[str]:
    return re.compile(FILENAME_PATTERN)


@pytest.fixture
def alert_regex() -> re.Pattern[str]:
    return re.compile(DEFAULT_ALERT_PATTERN)


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def reporter(sink: RecordingSink, bus: EventBus) -> Reporter:
    return Reporter(sink, bus)


@pytest.fixture
def config(log_dir: Path) -> TailerConfig:
    """Config pointing at log_dir with a short poll interval."""
    return TailerConfig(
        directory=str(log_dir),
        filename_pattern=FILENAME_PATTERN,
        poll_interval_seconds=0.01,
        shutdown_grace_seconds=2.0,
    )


def _make_record(
    prefix: str,
    path: Path,
    create_time: float = 1_000.0,
    size: int = 0,
    offset: int | None = None,
    write_time: float = 1_000.0,
) -> FileRecord:
    """Build a FileRecord without touching the filesystem."""
    return FileRecord(
        prefix=prefix,
        path=path,
        create_time=create_time,
        write_time=write_time,
        size=size,
        last_tailed_offset=size if offset is None else offset,
    )


@pytest.fixture
def make_record():
    """Factory for in-memory FileRecords."""
    return _make_record
