import logging
import random

from dropik.config.settings import GameSettings
from dropik.core.events import EventType
from dropik.core.state import SessionState
from dropik.game.entities import ItemKind
from dropik.game.interaction import InteractionState
from dropik.game.session import GameSession
from dropik.leaderboard.base import ScoreBoard

from conftest import drop_on_avatar, make_item

TICK = 17  # a little more than one 60 Hz tick


def record(event_bus, event_type):
    seen = []
    event_bus.subscribe(event_type, seen.append)
    return seen


def test_empty_nickname_is_rejected(session, event_bus, score_board):
    rejected = record(event_bus, EventType.START_REJECTED)

    assert session.start("") is False
    assert session.start("   ") is False

    assert session.state is SessionState.IDLE
    assert len(rejected) == 2
    assert session.scheduler.pending == 0
    assert score_board.submissions == []


def test_nickname_is_trimmed_uppercased_and_cut(session):
    assert session.start("  abcdefg ") is True
    assert session.nickname == "ABCDE"
    assert session.state is SessionState.RUNNING


def test_start_resets_counters_and_centers_avatar(session):
    session.score = 99
    session.lives = 1

    session.start("ab")

    assert session.score == 0
    assert session.lives == 3
    assert (session.avatar.x, session.avatar.y) == (360, 310)
    assert session.interaction_state is InteractionState.NEUTRAL


def test_commands_in_wrong_state_do_nothing(session, score_board):
    assert session.stop() is False
    assert session.restart() is False

    session.start("AB")
    assert session.start("CD") is False
    assert session.restart() is False
    assert session.nickname == "AB"

    session.stop()
    assert session.stop() is False
    assert session.start("CD") is False
    assert len(score_board.submissions) == 1


def test_three_bad_catches_end_the_game(session, event_bus, score_board):
    ended = record(event_bus, EventType.SESSION_ENDED)
    lives = record(event_bus, EventType.LIVES_CHANGED)
    session.start("AB")

    for expected in (2, 1, 0):
        drop_on_avatar(session, ItemKind.UNDESIRABLE)
        session.update(TICK)
        assert session.lives == expected

    assert session.state is SessionState.ENDED
    assert session.final_score == 0
    assert [e.data["lives"] for e in lives] == [2, 1, 0]
    assert len(ended) == 1
    assert ended[0].data == {"nickname": "AB", "score": 0, "reason": "no_lives"}
    assert score_board.submissions == [("AB", 0)]
    assert score_board.refreshes == 1


def test_two_hits_in_one_tick_end_the_game_once(session, event_bus, score_board):
    ended = record(event_bus, EventType.SESSION_ENDED)
    session.start("AB")
    session.lives = 1

    drop_on_avatar(session, ItemKind.UNDESIRABLE)
    drop_on_avatar(session, ItemKind.UNDESIRABLE)
    session.update(TICK)

    assert session.lives == 0
    assert len(ended) == 1
    assert score_board.submissions == [("AB", 0)]
    assert len(session.store) == 0


def test_good_catch_scores_and_flashes(session, event_bus):
    scores = record(event_bus, EventType.SCORE_CHANGED)
    session.start("AB")

    drop_on_avatar(session, ItemKind.DESIRABLE)
    session.update(TICK)

    assert session.score == 10
    assert session.lives == 3
    assert [e.data["score"] for e in scores] == [10]
    assert session.interaction_state is InteractionState.POSITIVE_FEEDBACK
    assert session.is_interaction_locked

    session.update(400)
    assert session.interaction_state is InteractionState.POSITIVE_FEEDBACK

    session.update(100)
    assert session.interaction_state is InteractionState.NEUTRAL
    assert not session.is_interaction_locked


def test_proximity_is_ignored_while_feedback_plays(session):
    session.start("AB")
    drop_on_avatar(session, ItemKind.DESIRABLE)
    session.update(TICK)

    avatar = session.avatar
    # Close to the avatar but not touching, and not moving
    session.store.insert(make_item(x=avatar.x + avatar.width + 20, y=avatar.y))
    session.move_pointer(*avatar.center)
    session.update(400)
    assert session.interaction_state is InteractionState.POSITIVE_FEEDBACK

    session.update(200)
    assert session.interaction_state is InteractionState.PROXIMITY


def test_stop_submits_current_score_and_clears_timers(session, score_board):
    session.start("ZED")
    drop_on_avatar(session, ItemKind.DESIRABLE)
    session.update(TICK)
    drop_on_avatar(session, ItemKind.DESIRABLE)
    session.update(TICK)

    assert session.stop() is True

    assert session.state is SessionState.ENDED
    assert session.final_score == 20
    assert session.context.end_reason == "stopped"
    assert score_board.submissions == [("ZED", 20)]
    assert session.scheduler.pending == 0
    assert len(session.store) == 0


def test_collision_after_end_is_ignored(session, score_board):
    session.start("AB")
    session.stop()

    session.on_collision(make_item(ItemKind.DESIRABLE))
    session.on_collision(make_item(ItemKind.UNDESIRABLE))

    assert session.score == 0
    assert session.lives == 3
    assert len(score_board.submissions) == 1


def test_restart_returns_to_idle_without_resubmitting(session, event_bus, score_board):
    resets = record(event_bus, EventType.SESSION_RESET)
    session.start("AB")
    drop_on_avatar(session, ItemKind.DESIRABLE)
    session.update(TICK)
    session.stop()

    assert session.restart() is True

    assert session.state is SessionState.IDLE
    assert session.score == 0
    assert session.lives == 3
    assert session.nickname == ""
    assert session.final_score == 0
    assert session.interaction_state is InteractionState.NEUTRAL
    assert len(resets) == 1
    assert score_board.submissions == [("AB", 10)]

    session.update(5_000)
    assert score_board.submissions == [("AB", 10)]

    assert session.start("CD") is True
    assert session.nickname == "CD"


def test_missed_items_cost_nothing(session, event_bus):
    missed = record(event_bus, EventType.ITEM_MISSED)
    session.start("AB")
    session.store.insert(make_item(ItemKind.DESIRABLE, x=0, y=699, speed=3))
    session.store.insert(make_item(ItemKind.UNDESIRABLE, x=760, y=699, speed=3))

    session.update(TICK)

    assert len(session.store) == 0
    assert session.score == 0
    assert session.lives == 3
    assert len(missed) == 2


def test_failing_score_board_does_not_break_game_over(quiet_settings, caplog):
    class BrokenScoreBoard(ScoreBoard):
        @property
        def entries(self):
            return []

        def record_score(self, nickname, score):
            raise RuntimeError("network down")

        def refresh(self):
            pass

    session = GameSession(settings=quiet_settings, score_board=BrokenScoreBoard())
    session.start("AB")

    with caplog.at_level(logging.ERROR):
        assert session.stop() is True

    assert session.state is SessionState.ENDED
    assert "network down" in caplog.text
    assert session.restart() is True


def test_session_without_score_board(quiet_settings):
    session = GameSession(settings=quiet_settings)
    session.start("AB")
    assert session.stop() is True
    assert session.score_board is None


def test_long_run_keeps_items_in_bounds(settings):
    session = GameSession(settings=settings, rng=random.Random(3))
    session.start("LONG")
    prev_score, prev_lives = session.score, session.lives

    for step in range(1200):
        # Sweep across the area so items get caught as well as missed
        session.move_pointer((step * 7) % 800, 560)
        session.update(16)
        if not session.is_running:
            assert session.final_score >= prev_score
            break
        for item in session.store:
            assert 0 <= item.rotation < 360
            assert -40 <= item.y <= 700
            assert 0 <= item.x <= 760
        assert session.score >= prev_score
        assert 0 <= session.lives <= prev_lives
        prev_score, prev_lives = session.score, session.lives


def test_spawning_starts_with_the_session(settings, score_board):
    session = GameSession(settings=settings, score_board=score_board, rng=random.Random(1))
    session.update(5_000)
    assert len(session.store) == 0

    session.start("AB")
    session.update(0)
    assert len(session.store) == 1

    session.stop()
    session.update(5_000)
    assert len(session.store) == 0


def test_pointer_moves_are_clamped(session):
    session.start("AB")

    session.move_pointer(-100, 5_000)
    assert (session.avatar.x, session.avatar.y) == (0, 620)

    session.move_pointer(400, 350)
    assert (session.avatar.x, session.avatar.y) == (360, 310)


def test_input_is_ignored_unless_running(session):
    before = (session.avatar.x, session.avatar.y)

    session.move_pointer(10, 10)
    session.move_touch(10)

    assert (session.avatar.x, session.avatar.y) == before


def test_touch_mode_keeps_avatar_on_bottom_edge(score_board):
    settings = GameSettings(
        area_width=800,
        area_height=700,
        avatar_size=80,
        initial_items=0,
        spawn_interval_ms=10_000_000,
        input_mode="touch",
    )
    session = GameSession(settings=settings, score_board=score_board)
    session.start("AB")

    assert (session.avatar.x, session.avatar.y) == (360, 600)

    session.move_touch(10)
    assert (session.avatar.x, session.avatar.y) == (0, 600)

    session.move_touch(5_000)
    assert (session.avatar.x, session.avatar.y) == (720, 600)


def test_snapshot_reflects_session(session):
    session.start("ab")
    snap = session.snapshot()

    assert snap["state"] == "RUNNING"
    assert snap["nickname"] == "AB"
    assert snap["lives"] == 3
    assert snap["interaction"] == "NEUTRAL"
