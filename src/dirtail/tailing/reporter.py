"""Routes tailing output to the line sink, the event bus and the log."""

from __future__ import annotations

import logging

from ..events.bus import EventBus
from ..events.models import FILE_ERROR, FILE_SKIPPED, FILE_STOPPED, FILE_WATCHING, LINE_ALERT
from ..sinks import LineSink
from .models import FileRecord

logger = logging.getLogger(__name__)


class Reporter:
    """Single place where the engine's observable side effects happen.

    Tailed lines and notices go to the sink, lifecycle and alert events go to
    the bus, and everything noteworthy is logged for diagnostics.
    """

    def __init__(self, sink: LineSink, bus: EventBus | None = None, source: str = "dirtail"):
        self.sink = sink
        self.bus = bus if bus is not None else EventBus()
        self.source = source

    def line(self, record: FileRecord, line: str) -> None:
        self.sink.write_line(record.prefix, line)

    def alert(self, record: FileRecord, line: str) -> None:
        logger.debug(f"Alert pattern matched in {record.filename}")
        self.bus.emit(
            LINE_ALERT, source=self.source, prefix=record.prefix, line=line, path=str(record.path)
        )

    def watching(self, record: FileRecord, rewound: bool) -> None:
        suffix = " (rewinding to start of file)" if rewound else ""
        self.sink.notice(f"{record.prefix}: WATCHING {record.filename}{suffix}")
        logger.info(
            f"Watching {record.path} for prefix {record.prefix} "
            f"from offset {record.last_tailed_offset}"
        )
        self.bus.emit(
            FILE_WATCHING,
            source=self.source,
            prefix=record.prefix,
            path=str(record.path),
            rewound=rewound,
        )

    def stopped(self, record: FileRecord) -> None:
        self.sink.notice(f"STOPPING {record.filename}")
        logger.info(f"Stopped watching {record.path} for prefix {record.prefix}")
        self.bus.emit(FILE_STOPPED, source=self.source, prefix=record.prefix, path=str(record.path))

    def limit_reached(self, record: FileRecord, max_files: int) -> None:
        self.sink.notice(
            f"Maximum number of files are being monitored ({max_files}). "
            f"Not watching new file {record.filename}"
        )
        logger.warning(f"Monitoring limit {max_files} reached, skipping {record.path}")
        self.bus.emit(
            FILE_SKIPPED,
            source=self.source,
            prefix=record.prefix,
            path=str(record.path),
            max_files=max_files,
        )

    def file_error(self, record: FileRecord, reason: str) -> None:
        self.sink.notice(f"{record.prefix}: {reason}")
        logger.warning(f"{record.prefix}: {reason} ({record.path})")
        self.bus.emit(
            FILE_ERROR, source=self.source, prefix=record.prefix, path=str(record.path), reason=reason
        )

    def notice(self, message: str) -> None:
        self.sink.notice(message)
