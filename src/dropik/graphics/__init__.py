"""Rendering for Dropik: numpy primitives, catch effects, scene renderer."""

from dropik.graphics.effects import Burst, EffectLayer
from dropik.graphics.renderer import SceneRenderer

__all__ = ["Burst", "EffectLayer", "SceneRenderer"]
