"""
Tick Schedulers
===============
Drive an animation as a series of discrete tick callbacks.

Why is this file needed?
------------------------
1. Responsiveness: A transition must never block the GUI thread with sleeps.
   Each tick is a short callback fired by the Qt event loop (QTimer).
2. Testability: The controller only sees `TickScheduler`. Tests plug in
   `ManualTickScheduler` and advance ticks by hand, no real time passes.

Only one run is active per scheduler. Starting a new run replaces the one in
flight; there is no pause.

Classes:
    TickScheduler: Abstract interface.
    QtTickScheduler: QTimer based implementation for the application.
    ManualTickScheduler: Deterministic implementation for tests and scripts.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
import logging
from typing import Callable, Optional

from PySide6.QtCore import QObject, QTimer

logger = logging.getLogger(__name__)

# Returns True once the run is complete
TickCallback = Callable[[], bool]


class TickScheduler(ABC):
    @abstractmethod
    def start(self, step_count: int, interval: float, delay: float, on_tick: TickCallback) -> None:
        """
        Call `on_tick` up to `step_count` times, `interval` seconds apart,
        starting `delay` seconds from now. Replaces any run in progress.
        """
        pass

    @abstractmethod
    def stop(self) -> None:
        pass

    @property
    @abstractmethod
    def is_active(self) -> bool:
        pass


class QtTickScheduler(TickScheduler):
    """Owns two QTimers; `parent` ties their lifetime to a Qt object."""
    def __init__(self, parent: Optional[QObject] = None) -> None:
        self._callback: Optional[TickCallback] = None
        self._remaining: int = 0

        self._delay_timer = QTimer(parent)
        self._delay_timer.setSingleShot(True)
        self._delay_timer.timeout.connect(self._begin)

        self._timer = QTimer(parent)
        self._timer.timeout.connect(self._tick)

    def start(self, step_count: int, interval: float, delay: float, on_tick: TickCallback) -> None:
        self.stop()
        self._callback = on_tick
        self._remaining = step_count
        self._timer.setInterval(max(int(round(interval * 1000)), 1))
        self._delay_timer.start(max(int(round(delay * 1000)), 0))
        logger.debug(f"Scheduled {step_count} ticks every {interval:.3f}s after {delay:.2f}s.")

    def stop(self) -> None:
        self._delay_timer.stop()
        self._timer.stop()
        self._callback = None
        self._remaining = 0

    @property
    def is_active(self) -> bool:
        return self._delay_timer.isActive() or self._timer.isActive()

    def _begin(self) -> None:
        if self._remaining > 0:
            self._timer.start()

    def _tick(self) -> None:
        callback = self._callback
        if callback is None:
            self._timer.stop()
            return

        self._remaining -= 1
        finished = callback()
        # The callback may have started a new run; only stop our own
        if callback is self._callback and (finished or self._remaining <= 0):
            self._timer.stop()
            self._callback = None


class ManualTickScheduler(TickScheduler):
    """Records the requested timing and fires ticks only when asked to."""
    def __init__(self) -> None:
        self._callback: Optional[TickCallback] = None
        self._remaining: int = 0
        self.last_delay: Optional[float] = None
        self.last_interval: Optional[float] = None
        self.runs_started: int = 0

    def start(self, step_count: int, interval: float, delay: float, on_tick: TickCallback) -> None:
        self._callback = on_tick
        self._remaining = step_count
        self.last_delay = delay
        self.last_interval = interval
        self.runs_started += 1

    def stop(self) -> None:
        self._callback = None
        self._remaining = 0

    @property
    def is_active(self) -> bool:
        return self._callback is not None and self._remaining > 0

    @property
    def remaining(self) -> int:
        return self._remaining if self._callback is not None else 0

    def advance(self, ticks: int = 1) -> int:
        """Fire up to `ticks` ticks. Returns how many were fired."""
        fired = 0
        while fired < ticks and self.is_active:
            callback = self._callback
            self._remaining -= 1
            finished = callback()
            fired += 1
            if callback is self._callback and (finished or self._remaining <= 0):
                self._callback = None
        return fired

    def run_until_idle(self) -> int:
        fired = 0
        while self.is_active:
            fired += self.advance()
        return fired
