"""
State machine for a Dropik game session.

States:
    IDLE: Start screen, waiting for a nickname
    RUNNING: Objects are falling, the tick loop is active
    ENDED: Game over, final score captured and submitted
"""

from enum import Enum, auto
from dataclasses import dataclass
from typing import Callable, Any
import logging

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """Session states."""
    IDLE = auto()
    RUNNING = auto()
    ENDED = auto()


@dataclass
class StateContext:
    """Context data carried across a session's states."""
    nickname: str = ""
    final_score: int = 0
    end_reason: str | None = None


StateListener = Callable[[SessionState, SessionState, StateContext], None]


class StateMachine:
    """
    Manages session state and transitions.

    Only the transitions listed in VALID_TRANSITIONS are accepted;
    anything else is refused and leaves the state untouched.
    """

    VALID_TRANSITIONS: list[tuple[SessionState, SessionState]] = [
        (SessionState.IDLE, SessionState.RUNNING),
        (SessionState.RUNNING, SessionState.ENDED),
        (SessionState.ENDED, SessionState.IDLE),
    ]

    def __init__(self, initial_state: SessionState = SessionState.IDLE) -> None:
        self._state = initial_state
        self._context = StateContext()
        self._listeners: list[StateListener] = []
        self._valid_transitions = set(self.VALID_TRANSITIONS)
        logger.debug(f"StateMachine initialized with state: {initial_state.name}")

    @property
    def state(self) -> SessionState:
        """Get current state."""
        return self._state

    @property
    def context(self) -> StateContext:
        """Get current context."""
        return self._context

    def can_transition(self, to_state: SessionState) -> bool:
        """Check if transition to given state is valid."""
        return (self._state, to_state) in self._valid_transitions

    def transition(self, to_state: SessionState, **context_updates: Any) -> bool:
        """
        Attempt to transition to a new state.

        Args:
            to_state: Target state
            **context_updates: Updates to apply to context

        Returns:
            True if transition successful, False otherwise
        """
        if not self.can_transition(to_state):
            logger.warning(
                f"Invalid transition: {self._state.name} -> {to_state.name}"
            )
            return False

        old_state = self._state
        self._state = to_state

        for key, value in context_updates.items():
            if hasattr(self._context, key):
                setattr(self._context, key, value)

        logger.info(f"State transition: {old_state.name} -> {to_state.name}")

        for listener in self._listeners:
            try:
                listener(old_state, to_state, self._context)
            except Exception as e:
                logger.error(f"Error in state listener: {e}")

        return True

    def add_listener(self, callback: StateListener) -> None:
        """Add a state change listener."""
        self._listeners.append(callback)

    def remove_listener(self, callback: StateListener) -> None:
        """Remove a state change listener."""
        if callback in self._listeners:
            self._listeners.remove(callback)

    def reset_context(self) -> None:
        """Drop everything captured during the previous session."""
        self._context = StateContext()
