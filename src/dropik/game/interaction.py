"""
Cosmetic mascot state: proximity hints and collision feedback.

The mascot looks "ready" when an item is close and flashes good/wrong
after a catch. While the flash plays, proximity checks are locked out;
a single revert timer unlocks them and returns to neutral.
"""

from enum import Enum, auto
from typing import Callable, Iterable, Optional
import logging

from dropik.core.scheduler import Scheduler, TimerHandle
from dropik.game.entities import Avatar, FallingItem

logger = logging.getLogger(__name__)


class InteractionState(Enum):
    """Mascot display states."""
    NEUTRAL = auto()
    PROXIMITY = auto()
    POSITIVE_FEEDBACK = auto()
    NEGATIVE_FEEDBACK = auto()


class InteractionTracker:
    """Owns the interaction state and the feedback lock."""

    def __init__(
        self,
        scheduler: Scheduler,
        distance: float = 200.0,
        feedback_ms: float = 500.0,
        on_change: Optional[Callable[[InteractionState], None]] = None,
    ) -> None:
        self._scheduler = scheduler
        self._distance = distance
        self._feedback_ms = feedback_ms
        self._on_change = on_change
        self._state = InteractionState.NEUTRAL
        self._near = False
        self._locked = False
        self._revert: TimerHandle | None = None

    @property
    def state(self) -> InteractionState:
        return self._state

    @property
    def is_locked(self) -> bool:
        return self._locked

    @property
    def has_pending_revert(self) -> bool:
        return self._revert is not None and not self._revert.cancelled

    def update_proximity(self, avatar: Avatar, items: Iterable[FallingItem]) -> bool:
        """
        Re-evaluate whether any item is within reach.

        No-op while locked. Only changes state when the near/far result
        flips.

        Returns:
            True if the state changed
        """
        if self._locked:
            return False

        near = any(avatar.distance_to(item) < self._distance for item in items)
        if near == self._near:
            return False

        self._near = near
        self._set_state(InteractionState.PROXIMITY if near else InteractionState.NEUTRAL)
        return True

    def show_feedback(self, positive: bool) -> None:
        """Flash collision feedback and lock proximity until it reverts."""
        self._locked = True
        self._set_state(
            InteractionState.POSITIVE_FEEDBACK if positive
            else InteractionState.NEGATIVE_FEEDBACK
        )

        # A newer flash must not be undone by an older timer
        self._cancel_revert()
        self._revert = self._scheduler.call_later(
            self._feedback_ms, self._end_feedback, name="interaction_revert"
        )

    def cancel_feedback(self) -> None:
        """Drop any pending revert and unlock, keeping the current state."""
        self._cancel_revert()
        self._locked = False

    def reset(self) -> None:
        """Back to neutral, unlocked, nothing pending."""
        self.cancel_feedback()
        self._near = False
        self._set_state(InteractionState.NEUTRAL)

    def _end_feedback(self) -> None:
        self._revert = None
        self._locked = False
        self._near = False
        self._set_state(InteractionState.NEUTRAL)

    def _cancel_revert(self) -> None:
        if self._revert is not None:
            self._revert.cancel()
            self._revert = None

    def _set_state(self, state: InteractionState) -> None:
        if state is self._state:
            return
        old = self._state
        self._state = state
        logger.debug(f"Interaction: {old.name} -> {state.name}")
        if self._on_change:
            self._on_change(state)
