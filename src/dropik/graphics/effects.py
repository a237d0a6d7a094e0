"""Short-lived visual effects triggered by catches."""

from dataclasses import dataclass
from typing import Callable, List

from dropik.core.events import Event, EventBus, EventType


@dataclass
class Burst:
    """Expanding ring left where an item was caught."""

    x: float
    y: float
    good: bool
    age_ms: float = 0.0


class EffectLayer:
    """Collects catch bursts and the HUD shake from session events.

    Effects age with update(); each lasts `duration_ms`, matching the
    mascot feedback flash.
    """

    def __init__(self, event_bus: EventBus, duration_ms: float = 500.0):
        self.duration_ms = duration_ms
        self.bursts: List[Burst] = []
        self.shake_ms = 0.0
        self._unsubscribe: List[Callable[[], None]] = [
            event_bus.subscribe(EventType.ITEM_CAUGHT, self._on_caught),
            event_bus.subscribe(EventType.SESSION_ENDED, self._on_clear),
            event_bus.subscribe(EventType.SESSION_RESET, self._on_clear),
        ]

    @property
    def is_shaking(self) -> bool:
        return self.shake_ms > 0

    def update(self, delta_ms: float) -> None:
        for burst in self.bursts:
            burst.age_ms += delta_ms
        self.bursts = [b for b in self.bursts if b.age_ms < self.duration_ms]
        self.shake_ms = max(0.0, self.shake_ms - delta_ms)

    def progress(self, burst: Burst) -> float:
        """0.0 when a burst appears, approaching 1.0 as it fades."""
        return min(1.0, burst.age_ms / self.duration_ms)

    def detach(self) -> None:
        for unsubscribe in self._unsubscribe:
            unsubscribe()
        self._unsubscribe.clear()

    def _on_caught(self, event: Event) -> None:
        good = bool(event.data.get("good"))
        self.bursts.append(Burst(
            x=float(event.data.get("x", 0.0)),
            y=float(event.data.get("y", 0.0)),
            good=good,
        ))
        if not good:
            self.shake_ms = self.duration_ms

    def _on_clear(self, event: Event) -> None:
        self.bursts.clear()
        self.shake_ms = 0.0
