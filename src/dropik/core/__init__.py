"""Core framework components for Dropik."""

from .state import SessionState, StateMachine
from .events import EventBus, Event, EventType
from .scheduler import Scheduler, TimerHandle

__all__ = [
    "SessionState",
    "StateMachine",
    "EventBus",
    "Event",
    "EventType",
    "Scheduler",
    "TimerHandle",
]
