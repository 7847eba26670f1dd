"""Tests for the tick schedulers."""

import time

from PySide6.QtCore import QCoreApplication

from surfaceviz.controller.scheduler import ManualTickScheduler, QtTickScheduler


class Counter:
    def __init__(self, finish_after=None):
        self.calls = 0
        self.finish_after = finish_after

    def __call__(self):
        self.calls += 1
        return self.finish_after is not None and self.calls >= self.finish_after


class TestManualTickScheduler:
    def test_records_timing(self):
        scheduler = ManualTickScheduler()
        scheduler.start(4, 0.5, 0.3, Counter())
        assert scheduler.last_interval == 0.5
        assert scheduler.last_delay == 0.3
        assert scheduler.runs_started == 1
        assert scheduler.remaining == 4

    def test_fires_at_most_step_count_ticks(self):
        scheduler = ManualTickScheduler()
        counter = Counter()
        scheduler.start(3, 0.1, 0.0, counter)
        assert scheduler.advance(5) == 3
        assert counter.calls == 3
        assert not scheduler.is_active

    def test_finished_callback_ends_the_run(self):
        scheduler = ManualTickScheduler()
        counter = Counter(finish_after=2)
        scheduler.start(10, 0.1, 0.0, counter)
        assert scheduler.run_until_idle() == 2
        assert scheduler.remaining == 0

    def test_stop(self):
        scheduler = ManualTickScheduler()
        counter = Counter()
        scheduler.start(3, 0.1, 0.0, counter)
        scheduler.stop()
        assert scheduler.advance() == 0
        assert counter.calls == 0

    def test_new_run_replaces_the_old_one(self):
        scheduler = ManualTickScheduler()
        first, second = Counter(), Counter()
        scheduler.start(5, 0.1, 0.0, first)
        scheduler.advance(2)
        scheduler.start(3, 0.1, 0.0, second)
        scheduler.run_until_idle()
        assert (first.calls, second.calls) == (2, 3)

    def test_callback_may_start_a_new_run(self):
        scheduler = ManualTickScheduler()
        follow_up = Counter()

        def restart():
            scheduler.start(2, 0.1, 0.0, follow_up)
            return True

        scheduler.start(5, 0.1, 0.0, restart)
        scheduler.advance()
        assert scheduler.is_active
        assert scheduler.run_until_idle() == 2
        assert follow_up.calls == 2


class TestQtTickScheduler:
    def test_active_until_stopped(self):
        scheduler = QtTickScheduler()
        scheduler.start(3, 0.5, 1.0, Counter())
        assert scheduler.is_active
        scheduler.stop()
        assert not scheduler.is_active

    def test_runs_on_the_event_loop(self):
        scheduler = QtTickScheduler()
        counter = Counter()
        scheduler.start(3, 0.005, 0.0, counter)

        deadline = time.monotonic() + 5.0
        while scheduler.is_active and time.monotonic() < deadline:
            QCoreApplication.processEvents()
            time.sleep(0.001)

        assert counter.calls == 3
        assert not scheduler.is_active
