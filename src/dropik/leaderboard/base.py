"""
Abstract interfaces for the leaderboard.

ScoreBoard is what a game session talks to: non-blocking calls that
must never raise into gameplay. LeaderboardBackend is the storage
behind the HTTP server, with a read-only and a credentialed variant.
"""

from abc import ABC, abstractmethod
from typing import List

from dropik.leaderboard.models import LeaderboardEntry


class LeaderboardBackendError(Exception):
    """Raised when the storage behind the leaderboard cannot be reached."""


class ScoreBoard(ABC):
    """Client-side view of the leaderboard used by a game session."""

    @property
    @abstractmethod
    def entries(self) -> List[LeaderboardEntry]:
        """Best known leaderboard, sorted by score descending."""
        ...

    @abstractmethod
    def record_score(self, nickname: str, score: int) -> None:
        """Submit a finished session's score. Returns immediately."""
        ...

    @abstractmethod
    def refresh(self) -> None:
        """Reload the leaderboard. Returns immediately."""
        ...

    def top(self, count: int = 10) -> List[LeaderboardEntry]:
        return self.entries[:count]


class LeaderboardBackend(ABC):
    """Storage for leaderboard entries."""

    read_only: bool = False

    @abstractmethod
    async def get_leaderboard(self) -> List[LeaderboardEntry]:
        """
        Get all entries sorted by score descending.

        Raises:
            LeaderboardBackendError: If the store cannot be read
        """
        ...

    @abstractmethod
    async def add_score(self, entry: LeaderboardEntry) -> bool:
        """Append an entry. Returns False if it could not be stored."""
        ...

    async def close(self) -> None:
        """Release any held resources."""
        pass
