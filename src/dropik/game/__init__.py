"""Catch game simulation: items, spawning, motion, interaction, session."""

from dropik.game.entities import Avatar, EntityStore, FallingItem, ItemKind
from dropik.game.spawner import Spawner
from dropik.game.motion import MotionEngine, StepReport
from dropik.game.interaction import InteractionState, InteractionTracker
from dropik.game.session import GameSession

__all__ = [
    "Avatar",
    "EntityStore",
    "FallingItem",
    "ItemKind",
    "Spawner",
    "MotionEngine",
    "StepReport",
    "InteractionState",
    "InteractionTracker",
    "GameSession",
]
