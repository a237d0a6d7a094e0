import pytest

from dropik.core.scheduler import Scheduler


def test_call_later_fires_once_after_delay():
    scheduler = Scheduler()
    calls = []
    scheduler.call_later(500, lambda: calls.append(scheduler.now))

    scheduler.advance(499)
    assert calls == []

    scheduler.advance(1)
    assert calls == [500]

    scheduler.advance(10_000)
    assert calls == [500]


def test_call_every_fires_at_fixed_rate_and_catches_up():
    scheduler = Scheduler()
    calls = []
    scheduler.call_every(100, lambda: calls.append(scheduler.now))

    scheduler.advance(50)
    assert calls == []

    scheduler.advance(300)
    assert calls == [100, 200, 300]
    assert scheduler.now == 350


def test_first_delay_overrides_interval():
    scheduler = Scheduler()
    calls = []
    scheduler.call_every(100, lambda: calls.append(scheduler.now), first_delay_ms=0)

    scheduler.advance(0)
    assert calls == [0]


def test_cancelled_handle_never_fires():
    scheduler = Scheduler()
    calls = []
    handle = scheduler.call_every(10, lambda: calls.append(1))

    scheduler.advance(25)
    handle.cancel()
    handle.cancel()
    scheduler.advance(100)

    assert calls == [1, 1]
    assert handle.cancelled
    assert scheduler.pending == 0


def test_repeating_timer_can_cancel_itself():
    scheduler = Scheduler()
    calls = []

    def callback():
        calls.append(1)
        if len(calls) == 3:
            handle.cancel()

    handle = scheduler.call_every(10, callback)
    scheduler.advance(1000)

    assert len(calls) == 3


def test_due_callbacks_run_in_time_then_schedule_order():
    scheduler = Scheduler()
    order = []
    scheduler.call_later(20, lambda: order.append("late"))
    scheduler.call_later(10, lambda: order.append("a"))
    scheduler.call_later(10, lambda: order.append("b"))

    scheduler.advance(30)

    assert order == ["a", "b", "late"]


def test_failing_callback_does_not_stop_later_ticks(caplog):
    scheduler = Scheduler()
    calls = []

    def flaky():
        calls.append(scheduler.now)
        if len(calls) == 1:
            raise RuntimeError("boom")

    scheduler.call_every(10, flaky, name="flaky")
    scheduler.advance(30)

    assert calls == [10, 20, 30]
    assert "flaky" in caplog.text


def test_callback_scheduled_during_advance_runs_when_due():
    scheduler = Scheduler()
    calls = []
    scheduler.call_later(10, lambda: scheduler.call_later(5, lambda: calls.append(scheduler.now)))

    scheduler.advance(20)

    assert calls == [15]


def test_cancel_all():
    scheduler = Scheduler()
    calls = []
    scheduler.call_later(10, lambda: calls.append(1))
    scheduler.call_every(10, lambda: calls.append(2))

    scheduler.cancel_all()
    scheduler.advance(100)

    assert calls == []
    assert scheduler.pending == 0


def test_interval_must_be_positive():
    with pytest.raises(ValueError):
        Scheduler().call_every(0, lambda: None)
