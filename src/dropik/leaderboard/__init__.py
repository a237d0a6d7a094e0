"""Leaderboard models, client and storage backends."""

from dropik.leaderboard.models import LeaderboardEntry, normalize_nickname, sort_entries
from dropik.leaderboard.base import LeaderboardBackend, LeaderboardBackendError, ScoreBoard
from dropik.leaderboard.client import LeaderboardCache, LeaderboardClient
from dropik.leaderboard.backends import (
    JsonFileBackend,
    ReadOnlySheetsBackend,
    ServiceAccountSheetsBackend,
    create_backend,
)

__all__ = [
    "LeaderboardEntry",
    "normalize_nickname",
    "sort_entries",
    "LeaderboardBackend",
    "LeaderboardBackendError",
    "ScoreBoard",
    "LeaderboardCache",
    "LeaderboardClient",
    "JsonFileBackend",
    "ReadOnlySheetsBackend",
    "ServiceAccountSheetsBackend",
    "create_backend",
]
