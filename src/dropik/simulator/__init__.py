"""Desktop pygame front-end for Dropik."""

from .window import GameWindow, WindowConfig

__all__ = ["GameWindow", "WindowConfig"]
