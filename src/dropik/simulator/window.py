"""
Desktop game window using pygame.

Shows the start screen, the playing field with HUD and leaderboard,
and the game-over screen. The window only reads the session for
drawing; all changes go through the session's commands.
"""

import asyncio
import logging
from dataclasses import dataclass

import pygame

from ..core.events import Event, EventBus, EventType
from ..core.state import SessionState
from ..game.session import GameSession
from ..graphics.effects import EffectLayer
from ..graphics.renderer import SceneRenderer, frame_to_surface_array
from ..leaderboard.client import LeaderboardClient

logger = logging.getLogger(__name__)


@dataclass
class WindowConfig:
    """Game window configuration."""
    width: int = 1100
    height: int = 760
    title: str = "Дропик VS Импортозамещение"
    fullscreen: bool = False
    fps: int = 60

    # Largest frame step fed to the game; longer stalls are not replayed
    max_frame_ms: float = 100.0

    # Rows shown in the leaderboard panel
    leaderboard_size: int = 10

    # Colors
    bg_color: tuple[int, int, int] = (10, 10, 16)
    panel_color: tuple[int, int, int] = (34, 34, 48)
    text_color: tuple[int, int, int] = (220, 220, 235)
    accent_color: tuple[int, int, int] = (100, 150, 255)
    error_color: tuple[int, int, int] = (235, 60, 60)


class GameWindow:
    """
    pygame front-end for a GameSession.

    Keyboard:
        Letters/digits: Nickname entry (start screen)
        ENTER: Start game / restart after game over
        R: Restart after game over
        BACKSPACE: Delete nickname character
        L: Toggle log viewer
        ESC: Stop the run, or quit from the start screen
    Mouse / touch:
        Move to steer the mascot
    """

    AREA_X = 20
    AREA_Y = 50

    def __init__(
        self,
        session: GameSession,
        leaderboard: LeaderboardClient,
        event_bus: EventBus,
        config: WindowConfig | None = None,
    ) -> None:
        self.config = config or WindowConfig()
        self.session = session
        self.leaderboard = leaderboard
        self.event_bus = event_bus

        self.effects = EffectLayer(event_bus, session.settings.feedback_duration_ms)
        self.renderer = SceneRenderer(session, self.effects)
        self._frame = self.renderer.create_buffer()

        self._screen: pygame.Surface | None = None
        self._clock: pygame.time.Clock | None = None
        self._font: pygame.font.Font | None = None
        self._big_font: pygame.font.Font | None = None
        self._small_font: pygame.font.Font | None = None
        self._running = False
        self._frame_count = 0

        self._nickname_input = ""
        self._input_invalid = False

        self._show_log = False
        self._log_buffer: list[str] = []
        self._max_log_lines = 16
        self._log_handler: logging.Handler | None = None

        event_bus.subscribe(EventType.START_REJECTED, self._on_start_rejected)
        event_bus.subscribe(EventType.SESSION_RESET, self._on_session_reset)

        self._setup_log_capture()
        logger.info("GameWindow created")

    def _setup_log_capture(self) -> None:
        """Mirror log records into the on-screen log viewer."""
        class WindowLogHandler(logging.Handler):
            def __init__(self, window: 'GameWindow'):
                super().__init__()
                self.window = window

            def emit(self, record):
                msg = self.format(record)
                self.window._log_buffer.append(msg)
                if len(self.window._log_buffer) > self.window._max_log_lines * 2:
                    self.window._log_buffer = self.window._log_buffer[-self.window._max_log_lines:]

        self._log_handler = WindowLogHandler(self)
        self._log_handler.setFormatter(logging.Formatter('%(levelname).1s %(name)s: %(message)s'))
        logging.getLogger().addHandler(self._log_handler)

    def _init_pygame(self) -> None:
        """Initialize pygame and create window."""
        pygame.init()
        pygame.display.set_caption(self.config.title)

        flags = pygame.DOUBLEBUF
        if self.config.fullscreen:
            flags |= pygame.FULLSCREEN

        self._screen = pygame.display.set_mode(
            (self.config.width, self.config.height),
            flags
        )
        self._clock = pygame.time.Clock()

        # Fonts with Cyrillic coverage, falling back to the default font
        pygame.font.init()
        for font_name in ("DejaVu Sans", "Arial Unicode MS", "Noto Sans", "Helvetica"):
            path = pygame.font.match_font(font_name)
            if path:
                self._font = pygame.font.Font(path, 22)
                self._big_font = pygame.font.Font(path, 40)
                self._small_font = pygame.font.Font(path, 14)
                logger.info(f"Using font: {path}")
                break

        if not self._font:
            self._font = pygame.font.SysFont(None, 26)
            self._big_font = pygame.font.SysFont(None, 48)
            self._small_font = pygame.font.SysFont(None, 16)
            logger.warning("No Cyrillic font found, using default")

        pygame.key.start_text_input()
        logger.info(f"Pygame initialized: {self.config.width}x{self.config.height}")

    def _handle_events(self) -> None:
        """Process pygame events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self._running = False
            elif event.type == pygame.KEYDOWN:
                self._handle_keydown(event)
            elif event.type == pygame.TEXTINPUT:
                self._handle_text(event.text)
            elif event.type == pygame.MOUSEMOTION:
                x, y = event.pos
                self.session.move_pointer(x - self.AREA_X, y - self.AREA_Y)
            elif event.type in (pygame.FINGERDOWN, pygame.FINGERMOTION):
                # Finger coordinates are normalized to the window
                x = event.x * self.config.width - self.AREA_X
                self.session.move_touch(x)

    def _handle_keydown(self, event: pygame.event.Event) -> None:
        """Handle key press."""
        key = event.key
        state = self.session.state

        if key == pygame.K_ESCAPE:
            if state is SessionState.RUNNING:
                self.session.stop()
            else:
                self._running = False
        elif key in (pygame.K_RETURN, pygame.K_KP_ENTER):
            if state is SessionState.IDLE:
                if self.session.start(self._nickname_input):
                    self._input_invalid = False
            elif state is SessionState.ENDED:
                self.session.restart()
        elif key == pygame.K_BACKSPACE and state is SessionState.IDLE:
            self._nickname_input = self._nickname_input[:-1]
        elif key == pygame.K_r and state is SessionState.ENDED:
            self.session.restart()
        elif key == pygame.K_l and state is not SessionState.IDLE:
            self._show_log = not self._show_log

    def _handle_text(self, text: str) -> None:
        if self.session.state is not SessionState.IDLE:
            return
        limit = self.session.settings.nickname_length
        self._nickname_input = (self._nickname_input + text).upper()[:limit]
        if self._nickname_input.strip():
            self._input_invalid = False

    def _on_start_rejected(self, event: Event) -> None:
        self._input_invalid = True

    def _on_session_reset(self, event: Event) -> None:
        self._nickname_input = ""
        self._input_invalid = False

    def _render(self) -> None:
        """Render the current screen."""
        if not self._screen:
            return

        self._screen.fill(self.config.bg_color)
        state = self.session.state

        if state is SessionState.IDLE:
            self._render_start_screen()
        else:
            self._render_game_area()
            self._render_hud()
            if state is SessionState.ENDED:
                self._render_game_over()

        self._render_leaderboard()
        if self._show_log:
            self._render_log_panel()

        pygame.display.flip()

    def _render_game_area(self) -> None:
        self.renderer.render(self._frame)
        surface = pygame.surfarray.make_surface(frame_to_surface_array(self._frame))
        self._screen.blit(surface, (self.AREA_X, self.AREA_Y))

    def _render_hud(self) -> None:
        offset = 0
        if self.effects.is_shaking:
            offset = 4 if (self._frame_count // 2) % 2 else -4

        score = self._font.render(f"СЧЕТ: {self.session.score}", True, self.config.text_color)
        lives = self._font.render(f"ЖИЗНИ: {self.session.lives}", True, self.config.text_color)
        self._screen.blit(score, (self.AREA_X + offset, 12))
        self._screen.blit(lives, (self.AREA_X + 220 + offset, 12))

    def _render_start_screen(self) -> None:
        cx = self.AREA_X + self.session.settings.area_width // 2
        title = self._big_font.render(self.config.title, True, self.config.accent_color)
        self._screen.blit(title, title.get_rect(center=(cx, 200)))

        label = self._font.render("ВВЕДИТЕ НИКНЕЙМ:", True, self.config.text_color)
        self._screen.blit(label, label.get_rect(center=(cx, 300)))

        box = pygame.Rect(0, 0, 220, 56)
        box.center = (cx, 360)
        border = self.config.error_color if self._input_invalid else self.config.text_color
        pygame.draw.rect(self._screen, self.config.panel_color, box)
        pygame.draw.rect(self._screen, border, box, 2)

        text = self._nickname_input or "XXXXX"
        color = self.config.text_color if self._nickname_input else (90, 90, 110)
        nickname = self._big_font.render(text, True, color)
        self._screen.blit(nickname, nickname.get_rect(center=box.center))

        hint = self._small_font.render("ENTER: НАЧАТЬ ИГРУ", True, self.config.text_color)
        self._screen.blit(hint, hint.get_rect(center=(cx, 420)))

    def _render_game_over(self) -> None:
        s = self.session.settings
        overlay = pygame.Surface((s.area_width, s.area_height), pygame.SRCALPHA)
        overlay.fill((0, 0, 0, 170))
        self._screen.blit(overlay, (self.AREA_X, self.AREA_Y))

        cx = self.AREA_X + s.area_width // 2
        cy = self.AREA_Y + s.area_height // 2
        lines = [
            (self._big_font, "ИГРА ОКОНЧЕНА", self.config.error_color),
            (self._font, f"{self.session.nickname}: {self.session.final_score}", self.config.text_color),
            (self._small_font, "ENTER / R: ИГРАТЬ СНОВА", self.config.text_color),
        ]
        for i, (font, text, color) in enumerate(lines):
            surface = font.render(text, True, color)
            self._screen.blit(surface, surface.get_rect(center=(cx, cy - 50 + i * 50)))

    def _render_leaderboard(self) -> None:
        x = self.AREA_X + self.session.settings.area_width + 20
        rect = pygame.Rect(x, self.AREA_Y, self.config.width - x - 20, 420)
        pygame.draw.rect(self._screen, self.config.panel_color, rect)

        title = "ЛИДЕРЫ ⟳" if self.leaderboard.is_loading else "ЛИДЕРЫ"
        header = self._font.render(title, True, self.config.accent_color)
        self._screen.blit(header, (rect.x + 12, rect.y + 10))

        for i, entry in enumerate(self.leaderboard.top(self.config.leaderboard_size)):
            line = self._small_font.render(
                f"{i + 1:>2}. {entry.nickname:<5} {entry.score:>6}", True, self.config.text_color
            )
            self._screen.blit(line, (rect.x + 12, rect.y + 50 + i * 34))

    def _render_log_panel(self) -> None:
        rect = pygame.Rect(self.AREA_X, self.config.height - 230, self.config.width - 40, 220)
        panel = pygame.Surface(rect.size, pygame.SRCALPHA)
        panel.fill((0, 0, 0, 200))
        self._screen.blit(panel, rect.topleft)
        for i, line in enumerate(self._log_buffer[-self._max_log_lines:]):
            text = self._small_font.render(line[:140], True, (180, 220, 180))
            self._screen.blit(text, (rect.x + 8, rect.y + 6 + i * 13))

    def _update_cursor(self) -> None:
        # The mascot stands in for the cursor while playing
        pygame.mouse.set_visible(self.session.state is not SessionState.RUNNING)

    async def run(self) -> None:
        """Main game loop."""
        self._init_pygame()
        self._running = True
        self.leaderboard.refresh()

        logger.info("Game window started")

        while self._running:
            self._handle_events()

            delta_ms = 0.0
            if self._clock:
                delta_ms = min(float(self._clock.get_time()), self.config.max_frame_ms)

            self.session.update(delta_ms)
            self.effects.update(delta_ms)

            self._update_cursor()
            self._render()

            if self._clock:
                self._clock.tick(self.config.fps)
            self._frame_count += 1

            # Let leaderboard requests progress
            await asyncio.sleep(0)

        self._cleanup()

    def _cleanup(self) -> None:
        """Clean up pygame resources."""
        if self.session.state is SessionState.RUNNING:
            self.session.stop()
        if self._log_handler:
            logging.getLogger().removeHandler(self._log_handler)
        self.effects.detach()
        pygame.quit()
        logger.info("Game window stopped")

    def stop(self) -> None:
        """Stop the game loop."""
        self._running = False
