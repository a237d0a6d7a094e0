"""Leaderboard client for the catch game.

Talks to the leaderboard server over HTTP and keeps a local JSON copy
so the board can still be shown when the server is unreachable. The
game never waits on the network: record_score() and refresh() only
schedule work on the running event loop.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Coroutine, List, Optional, Set

import aiohttp

from dropik.core.events import Event, EventBus, EventType
from dropik.leaderboard.base import ScoreBoard
from dropik.leaderboard.models import LeaderboardEntry, sort_entries, utc_timestamp

logger = logging.getLogger(__name__)


class LeaderboardCache:
    """Local copy of the leaderboard stored as a JSON list."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> List[LeaderboardEntry]:
        if not self.path.exists():
            return []
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return [LeaderboardEntry.from_dict(row) for row in data]
        except (OSError, ValueError, TypeError, AttributeError) as e:
            logger.error(f"Error reading leaderboard cache {self.path}: {e}")
            return []

    def save(self, entries: List[LeaderboardEntry]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump([e.to_dict() for e in entries], f, ensure_ascii=False, indent=2)
        except OSError as e:
            logger.error(f"Error writing leaderboard cache {self.path}: {e}")


class LeaderboardClient(ScoreBoard):
    """HTTP leaderboard client with local cache fallback."""

    def __init__(
        self,
        api_url: str,
        cache: Optional[LeaderboardCache] = None,
        timeout: float = 10.0,
        event_bus: Optional[EventBus] = None,
    ):
        """Initialize leaderboard client.

        Args:
            api_url: Base URL of the leaderboard server
            cache: Local copy used when the server is unavailable
            timeout: Total request timeout in seconds
            event_bus: Where to announce leaderboard updates
        """
        self._api_url = api_url.rstrip("/")
        self._cache = cache
        self._timeout = timeout
        self._event_bus = event_bus
        self._session: Optional[aiohttp.ClientSession] = None
        self._entries: List[LeaderboardEntry] = sort_entries(cache.load()) if cache else []
        self._tasks: Set[asyncio.Task] = set()
        self._lock = asyncio.Lock()
        self.is_loading = False

    @property
    def entries(self) -> List[LeaderboardEntry]:
        return list(self._entries)

    @property
    def url(self) -> str:
        return f"{self._api_url}/leaderboard"

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self._timeout),
                headers={"Content-Type": "application/json"},
            )
        return self._session

    async def fetch_leaderboard(self) -> List[LeaderboardEntry]:
        """Load the leaderboard from the server, falling back to the cache.

        Returns:
            The entries now shown to the player
        """
        async with self._lock:
            self.is_loading = True
            try:
                session = await self._get_session()
                async with session.get(self.url) as response:
                    if response.status != 200:
                        raise aiohttp.ClientResponseError(
                            response.request_info,
                            response.history,
                            status=response.status,
                            message="Failed to load leaderboard",
                        )
                    data = await response.json()

                rows = data.get("leaderboard")
                if rows is not None:
                    self._set_entries(sort_entries(LeaderboardEntry.from_dict(r) for r in rows))
                    logger.info(f"Leaderboard loaded: {len(self._entries)} entries")

            except asyncio.TimeoutError:
                logger.error("Timeout loading leaderboard")
                self._fall_back_to_cache()
            except (aiohttp.ClientError, ValueError, AttributeError) as e:
                logger.error(f"Error loading leaderboard: {e}")
                self._fall_back_to_cache()
            finally:
                self.is_loading = False

            return self.entries

    async def submit_score(self, nickname: str, score: int) -> bool:
        """Record a score locally, then send it to the server.

        Returns:
            True if the server accepted the score
        """
        if not nickname:
            logger.error("Attempted to add score with missing nickname.")
            return False

        async with self._lock:
            entry = LeaderboardEntry(
                nickname=nickname.upper(),
                score=score,
                timestamp=utc_timestamp(),
            )
            # Local copy first, so the score survives a failed request
            self._set_entries(sort_entries([*self._entries, entry]))

            try:
                session = await self._get_session()
                payload = {"nickname": nickname, "score": score}

                async with session.post(self.url, json=payload) as response:
                    if response.status >= 400:
                        error_text = await response.text()
                        logger.error(
                            f"Error sending score to server ({response.status}): {error_text}"
                        )
                        return False
                    try:
                        await response.json()
                    except (aiohttp.ContentTypeError, ValueError) as e:
                        logger.warning(f"Could not parse server success response as JSON: {e}")

                logger.info(f"Score submitted: {entry.nickname} {score}")
                return True

            except asyncio.TimeoutError:
                logger.error("Timeout sending score to server")
                return False
            except aiohttp.ClientError as e:
                logger.error(f"Network error sending score to server: {e}")
                return False

    def record_score(self, nickname: str, score: int) -> None:
        self._spawn(self.submit_score(nickname, score), "submit_score")

    def refresh(self) -> None:
        self._spawn(self.fetch_leaderboard(), "fetch_leaderboard")

    async def wait_idle(self) -> None:
        """Wait for every scheduled request to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def close(self) -> None:
        """Finish pending requests and close the HTTP session."""
        await self.wait_idle()
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    def _spawn(self, coro: Coroutine, name: str) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            coro.close()
            logger.warning(f"No running event loop, {name} skipped")
            return

        task = loop.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Leaderboard task {task.get_name()} failed: {error}")
            self._announce(EventType.LEADERBOARD_ERROR, {"error": str(error)})

    def _set_entries(self, entries: List[LeaderboardEntry]) -> None:
        self._entries = entries
        if self._cache:
            self._cache.save(entries)
        self._announce(EventType.LEADERBOARD_UPDATED, {"count": len(entries)})

    def _fall_back_to_cache(self) -> None:
        if self._cache:
            cached = self._cache.load()
            if cached:
                self._entries = sort_entries(cached)
                self._announce(EventType.LEADERBOARD_UPDATED, {"count": len(cached), "cached": True})

    def _announce(self, event_type: EventType, data: dict) -> None:
        if self._event_bus:
            self._event_bus.emit(Event(event_type, data=data, source="leaderboard"))
