"""
Main entry point for Dropik.

DROPIK_ENV selects what to run:
    simulator: the desktop game (default)
    server: the leaderboard HTTP server
"""

import asyncio
import logging
import sys

from dropik.config.settings import Settings, get_settings
from dropik.core.events import EventBus


def setup_logging(debug: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S"
    )


async def run_simulator(settings: Settings) -> None:
    """Run the desktop game."""
    from dropik.game.session import GameSession
    from dropik.leaderboard.client import LeaderboardCache, LeaderboardClient
    from dropik.simulator.window import GameWindow, WindowConfig

    event_bus = EventBus()
    leaderboard = LeaderboardClient(
        api_url=settings.leaderboard.api_url,
        cache=LeaderboardCache(settings.leaderboard.cache_path),
        timeout=settings.leaderboard.timeout,
        event_bus=event_bus,
    )
    session = GameSession(
        settings=settings.game,
        score_board=leaderboard,
        event_bus=event_bus,
    )

    config = WindowConfig(
        width=settings.simulator_window_width,
        height=settings.simulator_window_height,
        fullscreen=settings.simulator_fullscreen,
        fps=settings.simulator_fps,
        leaderboard_size=settings.leaderboard.display_size,
    )
    window = GameWindow(session, leaderboard, event_bus, config=config)

    try:
        await window.run()
    finally:
        await leaderboard.close()


async def run_server(settings: Settings) -> None:
    """Run the leaderboard server until cancelled."""
    from dropik.leaderboard.backends import create_backend
    from dropik.server.app import LeaderboardServer

    backend = create_backend(settings.sheets, settings.server)
    server = LeaderboardServer(
        backend,
        host=settings.server.host,
        port=settings.server.port,
    )
    await server.start()
    try:
        await asyncio.Event().wait()
    finally:
        await server.stop()


def main() -> None:
    """Main entry point."""
    from dotenv import load_dotenv

    # Load environment variables
    load_dotenv()

    settings = get_settings()
    setup_logging(settings.debug)

    logger = logging.getLogger(__name__)
    logger.info("Dropik starting...")

    try:
        if settings.is_simulator:
            logger.info("Running the game")
            asyncio.run(run_simulator(settings))
        elif settings.is_server:
            logger.info("Running the leaderboard server")
            asyncio.run(run_server(settings))
        else:
            logger.error(f"Unknown environment: {settings.env}")
            sys.exit(1)

    except KeyboardInterrupt:
        logger.info("Interrupted by user")
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        sys.exit(1)

    logger.info("Dropik stopped")


if __name__ == "__main__":
    main()
