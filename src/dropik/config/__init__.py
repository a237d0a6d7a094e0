"""Configuration for Dropik."""

from .settings import (
    GameSettings,
    LeaderboardSettings,
    SheetsSettings,
    ServerSettings,
    Settings,
    get_settings,
)

__all__ = [
    "GameSettings",
    "LeaderboardSettings",
    "SheetsSettings",
    "ServerSettings",
    "Settings",
    "get_settings",
]
