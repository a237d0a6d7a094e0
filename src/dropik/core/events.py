"""
Event bus for Dropik.

Synchronous pub/sub between the game session and its observers
(renderer effects, window, leaderboard client).
"""

from dataclasses import dataclass, field
from typing import Any, Callable
from enum import Enum, auto
import logging
import time
from collections import defaultdict

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Built-in event types."""
    # Session events
    SESSION_STARTED = auto()
    SESSION_ENDED = auto()
    SESSION_RESET = auto()
    START_REJECTED = auto()

    # Gameplay events
    SCORE_CHANGED = auto()
    LIVES_CHANGED = auto()
    INTERACTION_CHANGED = auto()
    ITEM_SPAWNED = auto()
    ITEM_CAUGHT = auto()
    ITEM_MISSED = auto()

    # Leaderboard events
    LEADERBOARD_UPDATED = auto()
    LEADERBOARD_ERROR = auto()


@dataclass
class Event:
    """
    Event data container.

    Attributes:
        type: Event type
        data: Event payload
        source: Component that emitted the event
        timestamp: Wall-clock time the event was created
    """
    type: EventType
    data: dict[str, Any] = field(default_factory=dict)
    source: str = "system"
    timestamp: float = field(default_factory=time.time)


Handler = Callable[[Event], None]


class EventBus:
    """
    Routes events from the session to whoever listens.

    Handlers run immediately, in subscription order. A failing handler
    is logged and does not stop the others.
    """

    def __init__(self) -> None:
        self._handlers: dict[EventType, list[Handler]] = defaultdict(list)
        self._global_handlers: list[Handler] = []

    def subscribe(self, event_type: EventType, handler: Handler) -> Callable[[], None]:
        """
        Subscribe to an event type.

        Returns:
            Unsubscribe function
        """
        self._handlers[event_type].append(handler)
        logger.debug(f"Handler subscribed to {event_type}")

        def unsubscribe() -> None:
            if handler in self._handlers[event_type]:
                self._handlers[event_type].remove(handler)
                logger.debug(f"Handler unsubscribed from {event_type}")

        return unsubscribe

    def subscribe_all(self, handler: Handler) -> Callable[[], None]:
        """Subscribe to all events. Returns an unsubscribe function."""
        self._global_handlers.append(handler)

        def unsubscribe() -> None:
            if handler in self._global_handlers:
                self._global_handlers.remove(handler)

        return unsubscribe

    def emit(self, event: Event) -> None:
        """Deliver an event to its handlers right away."""
        self._dispatch_sync(event)

    def _dispatch_sync(self, event: Event) -> None:
        handlers = self._handlers.get(event.type, []) + self._global_handlers

        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Error in event handler for {event.type}: {e}")
