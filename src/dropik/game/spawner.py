"""Periodic creation of falling items."""

import itertools
import logging
import random
from typing import Callable, List, Optional

from dropik.config.settings import GameSettings
from dropik.core.scheduler import Scheduler, TimerHandle
from dropik.game.entities import EntityStore, FallingItem, ItemKind

logger = logging.getLogger(__name__)


class Spawner:
    """Drops new items into the store at a fixed rate.

    Items start just above the visible area with a random column and a
    speed of base speed times a multiplier in [0.5, 1.5].
    """

    SPEED_MULTIPLIER_MIN = 0.5

    def __init__(
        self,
        store: EntityStore,
        scheduler: Scheduler,
        settings: GameSettings,
        rng: Optional[random.Random] = None,
        on_spawn: Optional[Callable[[FallingItem], None]] = None,
    ):
        self._store = store
        self._scheduler = scheduler
        self._settings = settings
        self._rng = rng or random.Random()
        self._on_spawn = on_spawn
        self._ids = itertools.count(1)
        self._handles: List[TimerHandle] = []

    @property
    def is_running(self) -> bool:
        return any(not h.cancelled for h in self._handles)

    def spawn(self) -> FallingItem:
        s = self._settings
        is_good = self._rng.random() < s.good_item_chance
        x = self._rng.random() * max(0.0, s.area_width - s.item_size)
        speed = s.item_speed * (self.SPEED_MULTIPLIER_MIN + self._rng.random())

        item = FallingItem(
            id=next(self._ids),
            kind=ItemKind.DESIRABLE if is_good else ItemKind.UNDESIRABLE,
            x=x,
            y=-float(s.item_size),
            speed=speed,
            width=s.item_size,
            height=s.item_size,
        )
        self._store.insert(item)
        logger.debug(f"Spawned {item.kind.value} item {item.id} at x={x:.0f} speed={speed:.2f}")

        if self._on_spawn:
            self._on_spawn(item)
        return item

    def start(self) -> None:
        """Begin spawning: a short opening burst, then one item per interval."""
        self.stop()
        s = self._settings
        for i in range(s.initial_items):
            self._handles.append(self._scheduler.call_later(
                i * s.initial_item_delay_ms, self.spawn, name=f"spawn_burst_{i}"
            ))
        self._handles.append(self._scheduler.call_every(
            s.spawn_interval_ms, self.spawn, name="spawn"
        ))

    def stop(self) -> None:
        for handle in self._handles:
            handle.cancel()
        self._handles.clear()
