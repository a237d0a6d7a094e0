"""HTTP server for the leaderboard."""

from dropik.server.app import LeaderboardServer, create_app

__all__ = ["LeaderboardServer", "create_app"]
