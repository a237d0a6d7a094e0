"""Leaderboard HTTP server.

Two routes proxying the leaderboard store:
    GET  /leaderboard  -> {"leaderboard": [...]}
    POST /leaderboard  {"nickname": str, "score": number} -> {"success": true}

The same routes answer under /api/leaderboard. Every response carries
permissive CORS headers so the game can be served from anywhere.
"""

import logging
import math
from typing import Optional

from aiohttp import web

from dropik.leaderboard.base import LeaderboardBackend
from dropik.leaderboard.models import LeaderboardEntry, NICKNAME_LENGTH

logger = logging.getLogger(__name__)

BACKEND_KEY = web.AppKey("backend", LeaderboardBackend)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def cors(response: web.StreamResponse) -> web.StreamResponse:
    """Attach CORS headers to a response."""
    response.headers.update(CORS_HEADERS)
    return response


async def handle_options(request: web.Request) -> web.Response:
    """CORS preflight."""
    return cors(web.json_response({}, status=200))


async def handle_get(request: web.Request) -> web.Response:
    """Return the leaderboard sorted by score."""
    backend = request.app[BACKEND_KEY]
    try:
        entries = await backend.get_leaderboard()
    except Exception as e:
        logger.error(f"Error getting leaderboard: {e}")
        return cors(web.json_response(
            {"error": "Failed to load leaderboard"}, status=500
        ))

    return cors(web.json_response(
        {"leaderboard": [e.to_dict() for e in entries]}, status=200
    ))


async def handle_post(request: web.Request) -> web.Response:
    """Add a score to the leaderboard."""
    backend = request.app[BACKEND_KEY]
    try:
        body = await request.json()
    except ValueError:
        logger.error("Invalid request, body is not JSON")
        return cors(web.json_response(
            {"error": "nickname and score are required"}, status=400
        ))

    nickname = body.get("nickname") if isinstance(body, dict) else None
    score = body.get("score") if isinstance(body, dict) else None
    valid_score = (
        isinstance(score, (int, float))
        and not isinstance(score, bool)
        and (isinstance(score, int) or math.isfinite(score))
    )

    if not nickname or not isinstance(nickname, str) or not valid_score:
        logger.error(f"Invalid request, missing nickname or score: {body}")
        return cors(web.json_response(
            {"error": "nickname and score are required"}, status=400
        ))

    entry = LeaderboardEntry(
        nickname=nickname[:NICKNAME_LENGTH].upper(),
        score=int(score),
    )

    try:
        success = await backend.add_score(entry)
    except Exception as e:
        logger.error(f"Error adding leaderboard entry: {e}")
        return cors(web.json_response(
            {"error": "Failed to process request"}, status=500
        ))

    if not success:
        logger.error("Failed to add score")
        return cors(web.json_response(
            {"error": "Failed to add entry"}, status=500
        ))

    logger.info(f"Score added: {entry.nickname} {entry.score}")
    return cors(web.json_response({"success": True}, status=201))


async def _close_backend(app: web.Application) -> None:
    await app[BACKEND_KEY].close()


def create_app(backend: LeaderboardBackend) -> web.Application:
    """Build the aiohttp application around a storage backend."""
    app = web.Application()
    app[BACKEND_KEY] = backend

    for path in ("/leaderboard", "/api/leaderboard"):
        app.router.add_get(path, handle_get)
        app.router.add_post(path, handle_post)
        app.router.add_route("OPTIONS", path, handle_options)

    app.on_cleanup.append(_close_backend)
    return app


class LeaderboardServer:
    """Runs the leaderboard app on a TCP port."""

    def __init__(self, backend: LeaderboardBackend, host: str = "0.0.0.0", port: int = 8080):
        self.host = host
        self.port = port
        self.app = create_app(backend)
        self._runner: Optional[web.AppRunner] = None

    async def start(self) -> None:
        """Start the web server."""
        self._runner = web.AppRunner(self.app)
        await self._runner.setup()
        site = web.TCPSite(self._runner, self.host, self.port)
        await site.start()
        logger.info(f"Leaderboard server started on {self.host}:{self.port}")

    async def stop(self) -> None:
        """Stop the web server."""
        if self._runner:
            await self._runner.cleanup()
            self._runner = None
            logger.info("Leaderboard server stopped")
