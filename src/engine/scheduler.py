"""
Hangman - Cooperative Scheduler

Single-threaded timer queue. Tasks never run on their own: the host loop
calls run_pending() and every due callback runs synchronously, in due-time
order, on the caller's thread. Every task is cancellable.
"""

from __future__ import annotations

import heapq
import itertools
import logging
import time
from typing import Callable

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


def monotonic_ms() -> float:
    """Default clock: monotonic milliseconds."""
    return time.monotonic() * 1000


class ManualClock:
    """A clock that only moves when told to, for tests and replays."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> float:
        self.now += ms
        return self.now


class ScheduledTask:
    """Handle to a pending one-shot or repeating callback."""

    def __init__(
        self,
        callback: Callable[[], None],
        due: float,
        interval: float | None,
        name: str,
    ) -> None:
        self.callback = callback
        self.due = due
        self.interval = interval
        self.name = name
        self.cancelled = False

    @property
    def repeating(self) -> bool:
        return self.interval is not None

    def cancel(self) -> None:
        self.cancelled = True

    def __repr__(self) -> str:
        state = "cancelled" if self.cancelled else f"due={self.due:.0f}"
        return f"<ScheduledTask {self.name} {state}>"


class Scheduler:
    """Owns every timer in the engine."""

    def __init__(self, clock: Clock | None = None) -> None:
        self.clock = clock or monotonic_ms
        self._queue: list[tuple[float, int, ScheduledTask]] = []
        self._counter = itertools.count()

    def call_later(self, delay_ms: float, callback: Callable[[], None], name: str = "timeout") -> ScheduledTask:
        """Run `callback` once, `delay_ms` from now."""
        task = ScheduledTask(callback, self.clock() + max(0.0, delay_ms), None, name)
        self._push(task)
        return task

    def call_every(self, interval_ms: float, callback: Callable[[], None], name: str = "interval") -> ScheduledTask:
        """Run `callback` every `interval_ms` until cancelled."""
        if interval_ms <= 0:
            raise ValueError(f"Interval must be positive, got {interval_ms}.")
        task = ScheduledTask(callback, self.clock() + interval_ms, interval_ms, name)
        self._push(task)
        return task

    def run_pending(self) -> int:
        """
        Run every task due at the current clock reading.

        Repeating tasks that fell behind fire once per missed interval.

        Returns:
            Number of callbacks run
        """
        now = self.clock()
        ran = 0
        while self._queue and self._queue[0][0] <= now:
            _, _, task = heapq.heappop(self._queue)
            if task.cancelled:
                continue
            try:
                task.callback()
            except Exception:
                logger.exception("Scheduled task %s failed", task.name)
            ran += 1
            if task.repeating and not task.cancelled:
                task.due += task.interval
                self._push(task)
        return ran

    def advance(self, ms: float, step: float | None = None) -> int:
        """
        Move a ManualClock forward and run whatever comes due.

        Args:
            ms: Total time to advance
            step: Optional granularity; due tasks run after each step

        Returns:
            Number of callbacks run
        """
        if not isinstance(self.clock, ManualClock):
            raise TypeError("advance() requires a ManualClock.")
        ran = 0
        if step is None:
            self.clock.advance(ms)
            return self.run_pending()
        remaining = ms
        while remaining > 0:
            delta = min(step, remaining)
            self.clock.advance(delta)
            remaining -= delta
            ran += self.run_pending()
        return ran

    def cancel_all(self) -> None:
        for _, _, task in self._queue:
            task.cancel()
        self._queue.clear()

    @property
    def pending(self) -> list[ScheduledTask]:
        return sorted(
            (task for _, _, task in self._queue if not task.cancelled),
            key=lambda t: t.due,
        )

    def _push(self, task: ScheduledTask) -> None:
        heapq.heappush(self._queue, (task.due, next(self._counter), task))
