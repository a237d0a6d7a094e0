"""Leaderboard records and nickname rules."""

from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

NICKNAME_LENGTH = 5


def normalize_nickname(raw: str, length: int = NICKNAME_LENGTH) -> str:
    """Trim, uppercase and cut a nickname to the allowed length."""
    return raw.strip().upper()[:length]


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class LeaderboardEntry:
    """A single leaderboard row."""

    nickname: str
    score: int
    timestamp: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        if self.timestamp is None:
            del data["timestamp"]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LeaderboardEntry":
        """Build an entry from loosely typed JSON, coercing the score."""
        try:
            score = int(data.get("score", 0))
        except (TypeError, ValueError):
            score = 0
        return cls(
            nickname=str(data.get("nickname", "")),
            score=score,
            timestamp=data.get("timestamp") or None,
        )

    @classmethod
    def from_row(cls, row: List[Any]) -> "LeaderboardEntry":
        """Build an entry from a spreadsheet row: nickname, score, timestamp."""
        nickname = str(row[0]) if len(row) > 0 and row[0] else ""
        try:
            score = int(row[1]) if len(row) > 1 else 0
        except (TypeError, ValueError):
            score = 0
        timestamp = str(row[2]) if len(row) > 2 and row[2] else None
        return cls(nickname=nickname, score=score, timestamp=timestamp)


def sort_entries(entries: Iterable[LeaderboardEntry]) -> List[LeaderboardEntry]:
    """Highest score first; ties keep their original order."""
    return sorted(entries, key=lambda e: e.score, reverse=True)
