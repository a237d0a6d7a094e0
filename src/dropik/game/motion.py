"""Per-tick movement and collision resolution."""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from dropik.game.entities import Avatar, EntityStore, FallingItem

logger = logging.getLogger(__name__)


@dataclass
class StepReport:
    """What happened during one motion step."""

    caught: List[FallingItem] = field(default_factory=list)
    missed: List[FallingItem] = field(default_factory=list)


class MotionEngine:
    """Advances every live item and resolves avatar hits and exits.

    Per item the checks run in priority order: a hit wins over an exit,
    and a removed item is never looked at again.
    """

    def __init__(
        self,
        store: EntityStore,
        area_height: float,
        rotation_step: float,
        on_collision: Callable[[FallingItem], None],
        on_miss: Optional[Callable[[FallingItem], None]] = None,
    ):
        self._store = store
        self._area_height = area_height
        self._rotation_step = rotation_step
        self._on_collision = on_collision
        self._on_miss = on_miss

    def step(self, avatar: Avatar) -> StepReport:
        report = StepReport()

        for item in self._store.snapshot():
            # Collision handling may end the game and clear the store
            if item.id not in self._store:
                continue

            item.advance(self._rotation_step)

            if avatar.overlaps(item):
                self._store.remove(item.id)
                report.caught.append(item)
                self._on_collision(item)
            elif item.y > self._area_height:
                self._store.remove(item.id)
                report.missed.append(item)
                if self._on_miss:
                    self._on_miss(item)

        return report
