"""
Game session: one play-through from start to game over.

The session owns score, lives, nickname and the entity store, and is
the only thing allowed to change them. Everything the display layer
needs to know is published on the event bus.

Lifecycle:
    start(nickname)  IDLE -> RUNNING
    stop() / lives hit 0  RUNNING -> ENDED (score submitted once)
    restart()  ENDED -> IDLE
"""

import logging
import random
from typing import Any, Dict, Optional

from dropik.config.settings import GameSettings
from dropik.core.events import Event, EventBus, EventType
from dropik.core.scheduler import Scheduler, TimerHandle
from dropik.core.state import SessionState, StateContext, StateMachine
from dropik.game.entities import Avatar, EntityStore, FallingItem
from dropik.game.interaction import InteractionState, InteractionTracker
from dropik.game.motion import MotionEngine
from dropik.game.spawner import Spawner
from dropik.leaderboard.base import ScoreBoard
from dropik.leaderboard.models import normalize_nickname

logger = logging.getLogger(__name__)


class GameSession:
    """Catch game session state machine."""

    def __init__(
        self,
        settings: Optional[GameSettings] = None,
        score_board: Optional[ScoreBoard] = None,
        event_bus: Optional[EventBus] = None,
        scheduler: Optional[Scheduler] = None,
        rng: Optional[random.Random] = None,
    ):
        self.settings = settings or GameSettings()
        self.event_bus = event_bus or EventBus()
        self.scheduler = scheduler or Scheduler()
        self._score_board = score_board

        self._machine = StateMachine()
        self._machine.add_listener(self._on_state_changed)

        self.store = EntityStore()
        self.avatar = Avatar(
            width=self.settings.avatar_size,
            height=self.settings.avatar_size,
        )
        self.score = 0
        self.lives = self.settings.starting_lives

        self.spawner = Spawner(
            self.store,
            self.scheduler,
            self.settings,
            rng=rng,
            on_spawn=self._on_spawn,
        )
        self.engine = MotionEngine(
            self.store,
            area_height=self.settings.area_height,
            rotation_step=self.settings.rotation_speed,
            on_collision=self.on_collision,
            on_miss=self._on_miss,
        )
        self.interaction = InteractionTracker(
            self.scheduler,
            distance=self.settings.interaction_distance,
            feedback_ms=self.settings.feedback_duration_ms,
            on_change=self._on_interaction_changed,
        )
        self._tick_handle: Optional[TimerHandle] = None
        self._frame = 0

    # Read-only views
    @property
    def state(self) -> SessionState:
        return self._machine.state

    @property
    def is_running(self) -> bool:
        return self._machine.state is SessionState.RUNNING

    @property
    def nickname(self) -> str:
        return self._machine.context.nickname

    @property
    def final_score(self) -> int:
        return self._machine.context.final_score

    @property
    def context(self) -> StateContext:
        return self._machine.context

    @property
    def interaction_state(self) -> InteractionState:
        return self.interaction.state

    @property
    def is_interaction_locked(self) -> bool:
        return self.interaction.is_locked

    @property
    def score_board(self) -> Optional[ScoreBoard]:
        return self._score_board

    # Commands
    def start(self, nickname: str) -> bool:
        """
        Start a new run.

        Args:
            nickname: Raw player input

        Returns:
            True if the game started; False if the nickname was empty or
            a run cannot start from the current state
        """
        if self.state is not SessionState.IDLE:
            logger.debug(f"Start ignored in state {self.state.name}")
            return False

        if not nickname or not nickname.strip():
            logger.info("Start rejected: empty nickname")
            self._emit(EventType.START_REJECTED, {"reason": "empty_nickname"})
            return False

        name = normalize_nickname(nickname, self.settings.nickname_length)
        if not name:
            name = self.settings.placeholder_nickname

        self.score = 0
        self.lives = self.settings.starting_lives
        self.store.clear()
        self.interaction.reset()
        self._place_avatar()

        self._machine.transition(
            SessionState.RUNNING,
            nickname=name,
            final_score=0,
            end_reason=None,
        )
        return True

    def stop(self) -> bool:
        """End the current run early."""
        return self._end("stopped")

    def restart(self) -> bool:
        """Return to the start screen after a game over."""
        if self.state is not SessionState.ENDED:
            logger.debug(f"Restart ignored in state {self.state.name}")
            return False

        self.score = 0
        self.lives = self.settings.starting_lives
        self.interaction.reset()
        self._machine.transition(SessionState.IDLE)
        self._machine.reset_context()
        self._emit(EventType.SESSION_RESET)
        return True

    def update(self, delta_ms: float) -> None:
        """Advance game time; fires ticks, spawns and feedback timers."""
        self.scheduler.advance(delta_ms)

    def tick(self) -> None:
        """One motion step followed by a proximity check."""
        if not self.is_running:
            return
        self._frame += 1
        self.engine.step(self.avatar)
        if self.is_running:
            self.interaction.update_proximity(self.avatar, self.store)

    # Input
    def move_pointer(self, x: float, y: float) -> None:
        """Center the avatar on the pointer (desktop)."""
        if not self.is_running:
            return
        s = self.settings
        self.avatar.center_on(x, y, s.area_width, s.area_height)
        self.interaction.update_proximity(self.avatar, self.store)

    def move_touch(self, x: float) -> None:
        """Slide the avatar along the bottom edge (touch screens)."""
        if not self.is_running:
            return
        s = self.settings
        self.avatar.center_on(x, self._touch_center_y(), s.area_width, s.area_height)
        self.interaction.update_proximity(self.avatar, self.store)

    # Collisions
    def on_collision(self, item: FallingItem) -> None:
        """Apply a caught item: reward, or lose a life and maybe end."""
        if not self.is_running:
            logger.debug(f"Collision with item {item.id} ignored, session not running")
            return

        self.interaction.show_feedback(item.is_good)
        self._emit(EventType.ITEM_CAUGHT, {
            "id": item.id,
            "good": item.is_good,
            "x": item.x,
            "y": item.y,
        })

        if item.is_good:
            self.score += self.settings.reward
            self._emit(EventType.SCORE_CHANGED, {"score": self.score})
        else:
            self.lives = max(0, self.lives - 1)
            self._emit(EventType.LIVES_CHANGED, {"lives": self.lives})
            if self.lives == 0:
                self._end("no_lives")

    def snapshot(self) -> Dict[str, Any]:
        """Plain view of the session for renderers and logs."""
        return {
            "state": self.state.name,
            "score": self.score,
            "lives": self.lives,
            "nickname": self.nickname,
            "final_score": self.final_score,
            "interaction": self.interaction_state.name,
            "items": len(self.store),
            "frame": self._frame,
        }

    # Internals
    def _end(self, reason: str) -> bool:
        if self.state is not SessionState.RUNNING:
            return False
        return self._machine.transition(
            SessionState.ENDED,
            final_score=self.score,
            end_reason=reason,
        )

    def _on_state_changed(
        self,
        old: SessionState,
        new: SessionState,
        context: StateContext
    ) -> None:
        if new is SessionState.RUNNING:
            self._start_loops()
            logger.info(f"Session started for {context.nickname}")
            self._emit(EventType.SESSION_STARTED, {"nickname": context.nickname})
        elif new is SessionState.ENDED:
            self._stop_loops()
            self.store.clear()
            logger.info(
                f"Session ended ({context.end_reason}): "
                f"{context.nickname} scored {context.final_score}"
            )
            self._emit(EventType.SESSION_ENDED, {
                "nickname": context.nickname,
                "score": context.final_score,
                "reason": context.end_reason,
            })
            self._submit(context.nickname, context.final_score)

    def _start_loops(self) -> None:
        self._stop_loops()
        self._frame = 0
        self._tick_handle = self.scheduler.call_every(
            self.settings.tick_interval_ms, self.tick, name="tick"
        )
        self.spawner.start()

    def _stop_loops(self) -> None:
        if self._tick_handle is not None:
            self._tick_handle.cancel()
            self._tick_handle = None
        self.spawner.stop()
        self.interaction.cancel_feedback()

    def _submit(self, nickname: str, score: int) -> None:
        if self._score_board is None:
            return
        try:
            self._score_board.record_score(nickname, score)
            self._score_board.refresh()
        except Exception as e:
            logger.error(f"Failed to submit score for {nickname}: {e}")

    def _place_avatar(self) -> None:
        s = self.settings
        if s.input_mode == "touch":
            self.avatar.center_on(s.area_width / 2, self._touch_center_y(), s.area_width, s.area_height)
        else:
            self.avatar.center_on(s.area_width / 2, s.area_height / 2, s.area_width, s.area_height)

    def _touch_center_y(self) -> float:
        s = self.settings
        return s.area_height - self.avatar.height / 2 - s.touch_bottom_margin

    def _on_spawn(self, item: FallingItem) -> None:
        self._emit(EventType.ITEM_SPAWNED, {"id": item.id, "good": item.is_good})

    def _on_miss(self, item: FallingItem) -> None:
        # Missed items cost nothing, good or bad
        self._emit(EventType.ITEM_MISSED, {"id": item.id, "good": item.is_good})

    def _on_interaction_changed(self, state: InteractionState) -> None:
        self._emit(EventType.INTERACTION_CHANGED, {"state": state.name})

    def _emit(self, event_type: EventType, data: Optional[Dict[str, Any]] = None) -> None:
        self.event_bus.emit(Event(event_type, data=data or {}, source="session"))
