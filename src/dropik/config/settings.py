"""
Application settings using Pydantic.

Settings are loaded from environment variables with .env file support.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GameSettings(BaseSettings):
    """Gameplay constants."""

    model_config = SettingsConfigDict(env_prefix="DROPIK_GAME_", extra="ignore")

    # Game area (pixels)
    area_width: int = 800
    area_height: int = 700

    # Sprite sizes
    avatar_size: int = 80
    item_size: int = 40

    # Falling items
    item_speed: float = 3.0  # pixels per tick
    spawn_interval_ms: float = Field(default=1000.0, gt=0)
    good_item_chance: float = Field(default=0.7, ge=0.0, le=1.0)
    rotation_speed: float = 2.0  # degrees per tick
    initial_items: int = 3
    initial_item_delay_ms: float = 300.0

    # Scoring
    reward: int = 10
    starting_lives: int = 3

    # Interaction feedback
    interaction_distance: float = 200.0
    feedback_duration_ms: float = 500.0

    # Loop
    tick_rate: int = Field(default=60, gt=0)

    # Nickname
    nickname_length: int = 5
    placeholder_nickname: str = "ANON"

    # Input
    input_mode: Literal["pointer", "touch"] = "pointer"
    touch_bottom_margin: int = 20

    @property
    def tick_interval_ms(self) -> float:
        """Milliseconds between motion ticks."""
        return 1000.0 / self.tick_rate


class LeaderboardSettings(BaseSettings):
    """Leaderboard client settings."""

    model_config = SettingsConfigDict(env_prefix="DROPIK_LEADERBOARD_", extra="ignore")

    api_url: str = "http://127.0.0.1:8080"
    cache_path: Path = Field(default_factory=lambda: Path.home() / ".dropik" / "leaderboard.json")
    timeout: float = 10.0
    display_size: int = Field(default=10, gt=0)


class SheetsSettings(BaseSettings):
    """Google Sheets credentials for the leaderboard backend."""

    model_config = SettingsConfigDict(env_prefix="GOOGLE_", extra="ignore")

    sheet_id: str = ""
    api_key: str = ""
    service_account_email: str = ""
    private_key: str = ""
    sheet_range: str = "Leaderboard!A:C"  # A=nickname, B=score, C=timestamp

    @field_validator("private_key")
    @classmethod
    def _unescape_newlines(cls, value: str) -> str:
        # Keys pasted into .env files carry literal "\n" sequences
        return value.replace("\\n", "\n")

    @property
    def has_service_account(self) -> bool:
        return bool(self.service_account_email and self.private_key)


class ServerSettings(BaseSettings):
    """Leaderboard server settings."""

    model_config = SettingsConfigDict(env_prefix="DROPIK_SERVER_", extra="ignore")

    host: str = "0.0.0.0"
    port: int = 8080
    store_path: Path = Field(default_factory=lambda: Path("data") / "leaderboard.json")


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="DROPIK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Environment
    env: Literal["simulator", "server"] = "simulator"
    debug: bool = False

    # Simulator settings
    simulator_window_width: int = 1100
    simulator_window_height: int = 760
    simulator_fullscreen: bool = False
    simulator_fps: int = 60

    # Nested settings
    game: GameSettings = Field(default_factory=GameSettings)
    leaderboard: LeaderboardSettings = Field(default_factory=LeaderboardSettings)
    sheets: SheetsSettings = Field(default_factory=SheetsSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)

    @property
    def is_simulator(self) -> bool:
        """Check if running the desktop game."""
        return self.env == "simulator"

    @property
    def is_server(self) -> bool:
        """Check if running the leaderboard server."""
        return self.env == "server"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
