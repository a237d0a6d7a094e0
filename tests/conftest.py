import random
from typing import List, Tuple

import pytest

from dropik.config.settings import GameSettings
from dropik.core.events import EventBus
from dropik.core.scheduler import Scheduler
from dropik.game.entities import FallingItem, ItemKind
from dropik.game.session import GameSession
from dropik.leaderboard.base import LeaderboardBackend, LeaderboardBackendError, ScoreBoard
from dropik.leaderboard.models import LeaderboardEntry, sort_entries


class RecordingScoreBoard(ScoreBoard):
    """Stands in for the HTTP client; remembers every call."""

    def __init__(self):
        self.submissions: List[Tuple[str, int]] = []
        self.refreshes = 0
        self._entries: List[LeaderboardEntry] = []

    @property
    def entries(self) -> List[LeaderboardEntry]:
        return list(self._entries)

    def record_score(self, nickname: str, score: int) -> None:
        self.submissions.append((nickname, score))
        self._entries.append(LeaderboardEntry(nickname, score))

    def refresh(self) -> None:
        self.refreshes += 1


class MemoryBackend(LeaderboardBackend):
    """In-memory store with switches for the failure paths."""

    def __init__(self, entries=None, fail_reads=False, accept=True, explode=False):
        self.entries: List[LeaderboardEntry] = list(entries or [])
        self.fail_reads = fail_reads
        self.accept = accept
        self.explode = explode
        self.closed = False

    async def get_leaderboard(self):
        if self.fail_reads:
            raise LeaderboardBackendError("sheet unavailable")
        return sort_entries(self.entries)

    async def add_score(self, entry):
        if self.explode:
            raise RuntimeError("boom")
        if not self.accept:
            return False
        self.entries.append(entry)
        return True

    async def close(self):
        self.closed = True


@pytest.fixture
def settings() -> GameSettings:
    return GameSettings(
        area_width=800,
        area_height=700,
        avatar_size=80,
        item_size=40,
        input_mode="pointer",
    )


@pytest.fixture
def quiet_settings() -> GameSettings:
    """No spawning at all, so tests control every item on screen."""
    return GameSettings(
        area_width=800,
        area_height=700,
        avatar_size=80,
        item_size=40,
        initial_items=0,
        spawn_interval_ms=10_000_000,
        input_mode="pointer",
    )


@pytest.fixture
def score_board() -> RecordingScoreBoard:
    return RecordingScoreBoard()


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture
def scheduler() -> Scheduler:
    return Scheduler()


@pytest.fixture
def session(quiet_settings, score_board, event_bus, scheduler) -> GameSession:
    return GameSession(
        settings=quiet_settings,
        score_board=score_board,
        event_bus=event_bus,
        scheduler=scheduler,
        rng=random.Random(7),
    )


_next_id = iter(range(10_000, 1_000_000))


def make_item(
    kind: ItemKind = ItemKind.DESIRABLE,
    x: float = 0.0,
    y: float = 0.0,
    speed: float = 0.0,
    rotation: float = 0.0,
) -> FallingItem:
    return FallingItem(
        id=next(_next_id),
        kind=kind,
        x=x,
        y=y,
        speed=speed,
        width=40,
        height=40,
        rotation=rotation,
    )


def drop_on_avatar(session: GameSession, kind: ItemKind) -> FallingItem:
    """Place an item right on top of the avatar so the next tick catches it."""
    avatar = session.avatar
    item = make_item(kind, x=avatar.x + 10, y=avatar.y + 10)
    session.store.insert(item)
    return item
