"""Event stream for alerts and file lifecycle notices."""

from dirtail.events.bus import EventBus
from dirtail.events.models import (
    FILE_ERROR,
    FILE_SKIPPED,
    FILE_STOPPED,
    FILE_WATCHING,
    LINE_ALERT,
    TAILER_EVENT_TYPES,
    Event,
    EventHandler,
)

__all__ = [
    "Event",
    "EventHandler",
    "EventBus",
    "TAILER_EVENT_TYPES",
    "LINE_ALERT",
    "FILE_WATCHING",
    "FILE_STOPPED",
    "FILE_SKIPPED",
    "FILE_ERROR",
]
