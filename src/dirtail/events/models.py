"""Event data models and types for the tailer's notification stream."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol

LINE_ALERT = "line.alert"
FILE_WATCHING = "file.watching"
FILE_STOPPED = "file.stopped"
FILE_SKIPPED = "file.skipped"
FILE_ERROR = "file.error"


@dataclass(frozen=True)
class Event:
    """
    Immutable event published by the tailer.

    Events cross from the polling worker to subscribers on other threads,
    so they are never modified after creation.

    Attributes:
        event_type: Type of the event (e.g., "line.alert", "file.watching")
        timestamp: When the event occurred
        source: Component that published the event (e.g., "tail_cycle")
        data: Event-specific data payload
    """

    event_type: str
    timestamp: datetime
    source: str
    data: dict[str, Any] = field(default_factory=dict)


class EventHandler(Protocol):
    """
    Protocol for event handlers.

    Example:
        def ring(event: Event) -> None:
            print("\\a", end="")

        bus.subscribe(LINE_ALERT, ring)
    """

    def __call__(self, event: Event) -> None:
        ...


TAILER_EVENT_TYPES: dict[str, str] = {
    LINE_ALERT: "Tailed line matched the alert pattern",
    FILE_WATCHING: "File became the tracked representative of a prefix",
    FILE_STOPPED: "File is no longer tracked",
    FILE_SKIPPED: "New prefix not tracked because the monitoring limit is reached",
    FILE_ERROR: "Tracked file could not be stat'ed, opened, or read",
}
