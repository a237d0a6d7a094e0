"""Pure game data: the avatar, falling items and the store holding them."""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, List, Optional, Tuple
import logging
import math

logger = logging.getLogger(__name__)


class ItemKind(Enum):
    """Classification of a falling item."""

    DESIRABLE = "desirable"
    UNDESIRABLE = "undesirable"


@dataclass
class FallingItem:
    """A falling object. Position is the top-left corner."""

    id: int
    kind: ItemKind
    x: float
    y: float
    speed: float
    width: float = 40.0
    height: float = 40.0
    rotation: float = 0.0

    @property
    def is_good(self) -> bool:
        return self.kind is ItemKind.DESIRABLE

    @property
    def center(self) -> Tuple[float, float]:
        return self.x + self.width / 2, self.y + self.height / 2

    def advance(self, rotation_step: float) -> None:
        """Move one tick down and spin."""
        self.y += self.speed
        self.rotation = (self.rotation + rotation_step) % 360


@dataclass
class Avatar:
    """The player's mascot. Position is the top-left corner."""

    x: float = 0.0
    y: float = 0.0
    width: float = 80.0
    height: float = 80.0

    @property
    def center(self) -> Tuple[float, float]:
        return self.x + self.width / 2, self.y + self.height / 2

    def overlaps(self, item: FallingItem) -> bool:
        """Axis-aligned bounding box test."""
        return (
            self.x < item.x + item.width
            and self.x + self.width > item.x
            and self.y < item.y + item.height
            and self.y + self.height > item.y
        )

    def distance_to(self, item: FallingItem) -> float:
        ax, ay = self.center
        ix, iy = item.center
        return math.hypot(ax - ix, ay - iy)

    def center_on(
        self,
        x: float,
        y: float,
        area_width: float,
        area_height: float
    ) -> None:
        """Center the avatar on a point, keeping it inside the area."""
        half_w = self.width / 2
        half_h = self.height / 2
        x = max(half_w, min(x, area_width - half_w))
        y = max(half_h, min(y, area_height - half_h))
        self.x = x - half_w
        self.y = y - half_h


class EntityStore:
    """Holds the live falling items in insertion order.

    Iteration walks a snapshot, so items may be removed while iterating
    without skipping or revisiting the others.
    """

    def __init__(self) -> None:
        self._items: Dict[int, FallingItem] = {}

    def insert(self, item: FallingItem) -> None:
        self._items[item.id] = item

    def remove(self, item_id: int) -> Optional[FallingItem]:
        """Remove an item, returning it, or None if it was already gone."""
        item = self._items.pop(item_id, None)
        if item is None:
            logger.debug(f"Item {item_id} already removed")
        return item

    def get(self, item_id: int) -> Optional[FallingItem]:
        return self._items.get(item_id)

    def snapshot(self) -> List[FallingItem]:
        return list(self._items.values())

    def clear(self) -> None:
        self._items.clear()

    def __iter__(self) -> Iterator[FallingItem]:
        return iter(self.snapshot())

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._items
