"""Maps session data to pixels.

The renderer never touches game state; it reads the session and the
effect layer and paints one frame into a numpy buffer.
"""

import math
from typing import Dict, Optional

import numpy as np

from dropik.game.entities import Avatar, FallingItem
from dropik.game.interaction import InteractionState
from dropik.game.session import GameSession
from dropik.graphics.effects import EffectLayer
from dropik.graphics.primitives import (
    Buffer,
    Color,
    create_buffer,
    draw_circle,
    draw_line,
    draw_rect,
    fill,
)

BACKGROUND: Color = (18, 18, 28)
GOOD_COLOR: Color = (80, 210, 120)
BAD_COLOR: Color = (230, 70, 70)
MARKER_COLOR: Color = (245, 245, 245)

AVATAR_COLORS: Dict[InteractionState, Color] = {
    InteractionState.NEUTRAL: (120, 150, 255),
    InteractionState.PROXIMITY: (250, 210, 90),
    InteractionState.POSITIVE_FEEDBACK: GOOD_COLOR,
    InteractionState.NEGATIVE_FEEDBACK: BAD_COLOR,
}


class SceneRenderer:
    """Draws falling items, catch bursts and the mascot."""

    def __init__(self, session: GameSession, effects: Optional[EffectLayer] = None):
        self.session = session
        self.effects = effects

    def create_buffer(self) -> Buffer:
        s = self.session.settings
        return create_buffer(s.area_width, s.area_height, BACKGROUND)

    def render(self, buffer: Buffer) -> Buffer:
        fill(buffer, BACKGROUND)

        for item in self.session.store:
            self._draw_item(buffer, item)

        if self.effects:
            self._draw_effects(buffer)

        self._draw_avatar(buffer, self.session.avatar, self.session.interaction_state)
        return buffer

    def _draw_item(self, buffer: Buffer, item: FallingItem) -> None:
        cx, cy = (int(v) for v in item.center)
        radius = int(min(item.width, item.height) // 2)
        color = GOOD_COLOR if item.is_good else BAD_COLOR
        draw_circle(buffer, cx, cy, radius, color, filled=True)

        if not item.is_good:
            r = int(radius * 0.6)
            draw_line(buffer, cx - r, cy - r, cx + r, cy + r, (30, 10, 10), thickness=3)
            draw_line(buffer, cx - r, cy + r, cx + r, cy - r, (30, 10, 10), thickness=3)

        # Spin marker so rotation is visible on plain discs
        angle = math.radians(item.rotation)
        mx = cx + int(math.cos(angle) * (radius - 4))
        my = cy + int(math.sin(angle) * (radius - 4))
        draw_circle(buffer, mx, my, 3, MARKER_COLOR, filled=True)

    def _draw_effects(self, buffer: Buffer) -> None:
        size = self.session.settings.item_size
        for burst in self.effects.bursts:
            t = self.effects.progress(burst)
            radius = int(size / 2 + t * size)
            color = GOOD_COLOR if burst.good else BAD_COLOR
            fade = tuple(int(c * (1.0 - t)) for c in color)
            draw_circle(
                buffer,
                int(burst.x + size / 2),
                int(burst.y + size / 2),
                radius,
                fade,
                filled=False,
                thickness=3,
            )

    def _draw_avatar(self, buffer: Buffer, avatar: Avatar, state: InteractionState) -> None:
        color = AVATAR_COLORS[state]
        x, y = int(avatar.x), int(avatar.y)
        w, h = int(avatar.width), int(avatar.height)
        draw_rect(buffer, x, y, w, h, color, filled=True)
        draw_rect(buffer, x, y, w, h, (255, 255, 255), filled=False, thickness=2)

        # Eyes
        eye_y = y + h // 3
        draw_circle(buffer, x + w // 3, eye_y, max(2, w // 12), (20, 20, 30))
        draw_circle(buffer, x + 2 * w // 3, eye_y, max(2, w // 12), (20, 20, 30))


def frame_to_surface_array(buffer: Buffer) -> np.ndarray:
    """(height, width, 3) buffer to the (width, height, 3) layout pygame expects."""
    return buffer.swapaxes(0, 1)
