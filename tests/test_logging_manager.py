"""Unit tests for logging_manager module."""

import json
import logging
import logging.handlers
import sys
from pathlib import Path

import pytest

from dirtail.logging_manager import ROOT_LOGGER, JsonLineFormatter, LoggingManager


class TestLoggingManagerSetup:
    """Test handler configuration."""

    def test_console_only_by_default(self) -> None:
        manager = LoggingManager()

        logger = logging.getLogger(ROOT_LOGGER)
        assert manager.logger is logger
        assert logger.propagate is False
        assert len(logger.handlers) == 1
        assert logger.handlers[0].level == logging.WARNING

    def test_level_name_is_case_insensitive(self) -> None:
        manager = LoggingManager("debug")
        assert manager.log_level == logging.DEBUG

    def test_unknown_level(self) -> None:
        with pytest.raises(ValueError, match="Unknown log level"):
            LoggingManager("CHATTY")

    def test_reconfiguring_replaces_handlers(self, tmp_path: Path) -> None:
        LoggingManager(log_file=tmp_path / "first.log")
        LoggingManager()

        assert len(logging.getLogger(ROOT_LOGGER).handlers) == 1

    def test_file_handler_rotates(self, tmp_path: Path) -> None:
        log_file = tmp_path / "nested" / "dirtail.log"

        manager = LoggingManager(log_file=log_file)

        file_handlers = [
            h for h in manager.logger.handlers if isinstance(h, logging.handlers.RotatingFileHandler)
        ]
        assert len(file_handlers) == 1
        assert file_handlers[0].maxBytes == 10 * 1024 * 1024
        assert file_handlers[0].backupCount == 5
        assert log_file.parent.is_dir()


class TestJsonLogFile:
    """Test the JSON-lines diagnostic file."""

    def test_child_logger_records_are_written(self, tmp_path: Path) -> None:
        log_file = tmp_path / "dirtail.log"
        manager = LoggingManager(log_file=log_file)

        logging.getLogger("dirtail.tailing.scanner").debug(
            "Scanned directory", extra={"prefixes": 3}
        )
        manager.shutdown()

        entry = json.loads(log_file.read_text().splitlines()[-1])
        assert entry["level"] == "DEBUG"
        assert entry["logger"] == "dirtail.tailing.scanner"
        assert entry["message"] == "Scanned directory"
        assert entry["prefixes"] == 3

    def test_shutdown_detaches_handlers(self, tmp_path: Path) -> None:
        manager = LoggingManager(log_file=tmp_path / "dirtail.log")

        manager.shutdown()

        assert manager.logger.handlers == []


class TestJsonLineFormatter:
    def _record(self, **extra) -> logging.LogRecord:
        record = logging.LogRecord(
            name="dirtail.test",
            level=logging.ERROR,
            pathname=__file__,
            lineno=10,
            msg="failed %s",
            args=("badly",),
            exc_info=None,
        )
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_formats_message_with_args(self) -> None:
        entry = json.loads(JsonLineFormatter().format(self._record()))

        assert entry["message"] == "failed badly"
        assert entry["level"] == "ERROR"

    def test_unserializable_extra_becomes_string(self) -> None:
        entry = json.loads(JsonLineFormatter().format(self._record(path=Path("/logs/a.log"))))

        assert entry["path"] == "/logs/a.log"

    def test_includes_exception(self) -> None:
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = self._record()
            record.exc_info = sys.exc_info()

        entry = json.loads(JsonLineFormatter().format(record))

        assert "RuntimeError: boom" in entry["exception"]
