"""Thread-safe event bus for alert and lifecycle events."""

import logging
import threading
import uuid
from datetime import UTC, datetime
from typing import Any

from dirtail.events.models import Event, EventHandler

logger = logging.getLogger(__name__)


class EventBus:
    """
    Thread-safe event bus with pub/sub pattern.

    The polling worker publishes events (one ``line.alert`` per matching line,
    plus file lifecycle events); the CLI and embedders subscribe to the types
    they care about.

    Thread Safety:
        - All public methods are thread-safe
        - Subscribers can be added/removed during event publishing
        - Events are delivered in subscription order (per type)

    Example:
        bus = EventBus()
        sub_id = bus.subscribe("line.alert", lambda event: print(event.data["line"]))
        bus.emit("line.alert", source="tail_cycle", prefix="tfe1", line="x.yError: boom")
        bus.unsubscribe(sub_id)
    """

    def __init__(self) -> None:
        """Initialize the event bus with empty subscriber registry."""
        # event_type -> list of (subscription_id, handler)
        self._subscribers: dict[str, list[tuple[str, EventHandler]]] = {}
        self._lock = threading.Lock()

    def subscribe(self, event_type: str, handler: EventHandler) -> str:
        """
        Subscribe to events of a specific type.

        Args:
            event_type: Type of events to receive (e.g., "line.alert")
            handler: Callable that processes events

        Returns:
            Subscription ID for unsubscribing
        """
        subscription_id = str(uuid.uuid4())

        with self._lock:
            self._subscribers.setdefault(event_type, []).append((subscription_id, handler))
            total = len(self._subscribers[event_type])

        logger.debug(
            "Subscribed to event type",
            extra={
                "event_type": event_type,
                "subscription_id": subscription_id,
                "total_subscribers": total,
            },
        )
        return subscription_id

    def unsubscribe(self, subscription_id: str) -> bool:
        """
        Remove a subscription.

        Returns:
            True if unsubscribed, False if ID not found
        """
        with self._lock:
            for event_type, subscribers in self._subscribers.items():
                for i, (sub_id, _) in enumerate(subscribers):
                    if sub_id == subscription_id:
                        subscribers.pop(i)
                        logger.debug(
                            "Unsubscribed from event type",
                            extra={"event_type": event_type, "subscription_id": subscription_id},
                        )
                        return True

        logger.warning("Subscription ID not found", extra={"subscription_id": subscription_id})
        return False

    def publish(self, event: Event) -> None:
        """
        Publish an event to all subscribers synchronously.

        Handlers are called in subscription order. If a handler raises
        an exception, it is logged but does not prevent other handlers
        from executing.
        """
        with self._lock:
            subscribers = self._subscribers.get(event.event_type, []).copy()

        for subscription_id, handler in subscribers:
            try:
                handler(event)
            except Exception as e:
                logger.error(
                    "Handler raised exception",
                    extra={
                        "event_type": event.event_type,
                        "subscription_id": subscription_id,
                        "error": str(e),
                        "error_type": type(e).__name__,
                    },
                )

    def emit(self, event_type: str, source: str, **data: Any) -> Event:
        """Build an event stamped with the current UTC time and publish it."""
        event = Event(
            event_type=event_type,
            timestamp=datetime.now(UTC),
            source=source,
            data=data,
        )
        self.publish(event)
        return event

    def get_subscriber_count(self, event_type: str | None = None) -> int:
        """
        Get the number of subscribers.

        Args:
            event_type: Optional event type to count. If None, returns
                       total count across all event types.
        """
        with self._lock:
            if event_type is not None:
                return len(self._subscribers.get(event_type, []))
            return sum(len(subs) for subs in self._subscribers.values())
