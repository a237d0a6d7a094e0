"""
Time-driven scheduler for the game loop.

The scheduler owns a millisecond clock that only moves when the
front-end calls advance(). Every timer is tracked by a TimerHandle so
callers can cancel it explicitly; a cancelled handle never fires again.

Timers:
    call_later: one-shot callback after a delay
    call_every: fixed-rate repeating callback
"""

from dataclasses import dataclass, field
from typing import Callable
import heapq
import itertools
import logging

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class TimerHandle:
    """Handle for a scheduled callback."""
    callback: Callable[[], None]
    when: float
    interval: float | None = None
    name: str = ""
    _cancelled: bool = field(default=False, repr=False)

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def repeating(self) -> bool:
        return self.interval is not None

    def cancel(self) -> None:
        """Cancel the timer. Safe to call more than once."""
        if not self._cancelled:
            self._cancelled = True
            logger.debug(f"Timer cancelled: {self.name or self.callback}")


class Scheduler:
    """
    Fires callbacks against a virtual millisecond clock.

    Due callbacks run in due-time order, ties in the order they were
    scheduled. A repeating timer catches up when a single advance()
    spans several of its intervals.
    """

    def __init__(self) -> None:
        self._now = 0.0
        self._queue: list[tuple[float, int, TimerHandle]] = []
        self._counter = itertools.count()

    @property
    def now(self) -> float:
        """Current scheduler time in milliseconds."""
        return self._now

    @property
    def pending(self) -> int:
        """Number of live (not cancelled) timers."""
        return sum(1 for _, _, handle in self._queue if not handle.cancelled)

    def call_later(
        self,
        delay_ms: float,
        callback: Callable[[], None],
        name: str = ""
    ) -> TimerHandle:
        """Schedule a one-shot callback."""
        handle = TimerHandle(
            callback=callback,
            when=self._now + max(0.0, delay_ms),
            name=name,
        )
        self._push(handle)
        return handle

    def call_every(
        self,
        interval_ms: float,
        callback: Callable[[], None],
        name: str = "",
        first_delay_ms: float | None = None
    ) -> TimerHandle:
        """
        Schedule a repeating callback.

        Args:
            interval_ms: Period between firings, must be positive
            callback: Function to call
            name: Label used in logs
            first_delay_ms: Delay before the first firing (defaults to interval)
        """
        if interval_ms <= 0:
            raise ValueError(f"interval_ms must be positive, got {interval_ms}")

        delay = interval_ms if first_delay_ms is None else max(0.0, first_delay_ms)
        handle = TimerHandle(
            callback=callback,
            when=self._now + delay,
            interval=interval_ms,
            name=name,
        )
        self._push(handle)
        return handle

    def advance(self, delta_ms: float) -> int:
        """
        Move the clock forward and run everything that became due.

        Args:
            delta_ms: Elapsed time in milliseconds

        Returns:
            Number of callbacks that ran
        """
        target = self._now + max(0.0, delta_ms)
        fired = 0

        while self._queue and self._queue[0][0] <= target:
            when, _, handle = heapq.heappop(self._queue)
            if handle.cancelled:
                continue

            self._now = when
            if handle.interval is not None:
                handle.when = when + handle.interval
                self._push(handle)

            try:
                handle.callback()
            except Exception:
                logger.exception(f"Error in scheduled callback {handle.name or handle.callback}")
            fired += 1

        self._now = target
        return fired

    def cancel_all(self) -> None:
        """Cancel every pending timer."""
        for _, _, handle in self._queue:
            handle.cancel()
        self._queue.clear()

    def _push(self, handle: TimerHandle) -> None:
        heapq.heappush(self._queue, (handle.when, next(self._counter), handle))
