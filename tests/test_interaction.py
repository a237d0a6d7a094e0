from dropik.core.scheduler import Scheduler
from dropik.game.entities import Avatar
from dropik.game.interaction import InteractionState, InteractionTracker

from conftest import make_item


def make_tracker():
    scheduler = Scheduler()
    changes = []
    tracker = InteractionTracker(
        scheduler, distance=200, feedback_ms=500, on_change=changes.append
    )
    return tracker, scheduler, changes


AVATAR = Avatar(x=0, y=0, width=80, height=80)  # center (40, 40)
NEAR = make_item(x=100, y=20)  # center (120, 40), 80 away
FAR = make_item(x=500, y=500)


def test_proximity_only_changes_on_flip():
    tracker, _, changes = make_tracker()

    assert tracker.update_proximity(AVATAR, [FAR]) is False
    assert tracker.update_proximity(AVATAR, [NEAR]) is True
    assert tracker.update_proximity(AVATAR, [NEAR, FAR]) is False
    assert tracker.state is InteractionState.PROXIMITY
    assert tracker.update_proximity(AVATAR, [FAR]) is True
    assert tracker.state is InteractionState.NEUTRAL

    assert changes == [InteractionState.PROXIMITY, InteractionState.NEUTRAL]


def test_empty_store_is_not_near():
    tracker, _, _ = make_tracker()
    tracker.update_proximity(AVATAR, [NEAR])

    tracker.update_proximity(AVATAR, [])

    assert tracker.state is InteractionState.NEUTRAL


def test_distance_threshold_is_exclusive():
    tracker, _, _ = make_tracker()
    inside = make_item(x=200, y=20)  # center (220, 40), 180 away
    assert tracker.update_proximity(AVATAR, [inside]) is True

    tracker.reset()
    edge = make_item(x=220, y=20)  # center (240, 40), 200 away
    assert tracker.update_proximity(AVATAR, [edge]) is False


def test_feedback_locks_out_proximity_until_revert():
    tracker, scheduler, _ = make_tracker()

    tracker.show_feedback(positive=False)
    assert tracker.state is InteractionState.NEGATIVE_FEEDBACK
    assert tracker.is_locked

    assert tracker.update_proximity(AVATAR, [NEAR]) is False
    assert tracker.state is InteractionState.NEGATIVE_FEEDBACK

    scheduler.advance(499)
    assert tracker.is_locked

    scheduler.advance(1)
    assert not tracker.is_locked
    assert tracker.state is InteractionState.NEUTRAL
    assert not tracker.has_pending_revert

    assert tracker.update_proximity(AVATAR, [NEAR]) is True
    assert tracker.state is InteractionState.PROXIMITY


def test_new_feedback_replaces_pending_revert():
    tracker, scheduler, _ = make_tracker()

    tracker.show_feedback(positive=True)
    scheduler.advance(300)
    tracker.show_feedback(positive=False)
    scheduler.advance(300)

    # The first revert would have fired at 500
    assert tracker.is_locked
    assert tracker.state is InteractionState.NEGATIVE_FEEDBACK
    assert scheduler.pending == 1

    scheduler.advance(200)
    assert not tracker.is_locked
    assert tracker.state is InteractionState.NEUTRAL
    assert scheduler.pending == 0


def test_cancel_feedback_unlocks_and_keeps_state():
    tracker, scheduler, _ = make_tracker()
    tracker.show_feedback(positive=True)

    tracker.cancel_feedback()

    assert not tracker.is_locked
    assert not tracker.has_pending_revert
    assert tracker.state is InteractionState.POSITIVE_FEEDBACK
    assert scheduler.pending == 0


def test_reset_returns_to_neutral():
    tracker, scheduler, changes = make_tracker()
    tracker.show_feedback(positive=True)

    tracker.reset()

    assert tracker.state is InteractionState.NEUTRAL
    assert not tracker.is_locked
    assert scheduler.pending == 0
    assert changes[-1] is InteractionState.NEUTRAL
