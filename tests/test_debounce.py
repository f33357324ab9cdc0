"""Unit tests for app.services.debounce.DebounceTimer.

The ``timers`` fixture (conftest) replaces threading.Timer so quiet periods
end only when a test fires them.  One test uses a real timer thread.
"""

import threading

from app.services.debounce import DebounceTimer


class Counter:
    def __init__(self):
        self.calls = 0

    def __call__(self):
        self.calls += 1


class TestArm:
    def test_burst_collapses_to_one_call(self, timers):
        cb = Counter()
        debounce = DebounceTimer(0.8, cb, timer_factory=timers)
        for _ in range(3):
            debounce.arm()

        assert len(timers.timers) == 3
        assert [t.cancelled for t in timers.timers] == [True, True, False]
        assert timers.fire_pending() == 1
        assert cb.calls == 1
        assert not debounce.pending

    def test_interval_is_passed_to_factory(self, timers):
        DebounceTimer(0.8, Counter(), timer_factory=timers).arm()
        assert timers.timers[0].interval == 0.8

    def test_superseded_timer_that_fires_anyway_is_ignored(self, timers):
        cb = Counter()
        debounce = DebounceTimer(0.8, cb, timer_factory=timers)
        debounce.arm()
        first = timers.timers[0]
        debounce.arm()

        first.fire()
        assert cb.calls == 0
        assert debounce.pending

        timers.timers[1].fire()
        assert cb.calls == 1

    def test_fired_timer_does_not_fire_twice(self, timers):
        cb = Counter()
        debounce = DebounceTimer(0.8, cb, timer_factory=timers)
        debounce.arm()
        timer = timers.timers[0]
        timer.fire()
        timer.fire()
        assert cb.calls == 1


class TestCancelAndFlush:
    def test_cancel(self, timers):
        cb = Counter()
        debounce = DebounceTimer(0.8, cb, timer_factory=timers)
        assert debounce.cancel() is False

        debounce.arm()
        assert debounce.cancel() is True
        assert not debounce.pending

        timers.timers[0].fire()
        assert cb.calls == 0

    def test_flush_runs_pending_callback_now(self, timers):
        cb = Counter()
        debounce = DebounceTimer(0.8, cb, timer_factory=timers)
        debounce.arm()

        assert debounce.flush() is True
        assert cb.calls == 1
        assert timers.timers[0].cancelled

        assert debounce.flush() is False
        assert cb.calls == 1

    def test_flush_without_pending(self, timers):
        cb = Counter()
        assert DebounceTimer(0.8, cb, timer_factory=timers).flush() is False
        assert cb.calls == 0


class TestRealTimer:
    def test_threading_timer_fires(self):
        done = threading.Event()
        debounce = DebounceTimer(0.01, done.set, name="test-debounce")
        debounce.arm()
        assert done.wait(timeout=5)
        assert not debounce.pending
