"""
Scheduled-task abstraction for timer-driven callbacks.

Supports a manual, clock-driven scheduler for tests and a thread-backed
implementation for real sessions.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, Optional, Protocol

logger = logging.getLogger(__name__)


class ScheduledTask(Protocol):
    """Handle returned for every scheduled callback."""

    def cancel(self) -> None:
        ...

    @property
    def cancelled(self) -> bool:
        ...


class Scheduler(Protocol):
    """Runs callbacks once after a delay or repeatedly at a fixed interval."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledTask:
        ...

    def call_every(self, interval: float, callback: Callable[[], None]) -> ScheduledTask:
        ...


@dataclass(eq=False)
class ManualTask:
    due: float
    callback: Callable[[], None]
    interval: Optional[float] = None
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


@dataclass
class ManualScheduler:
    """Deterministic scheduler for tests: time only moves on advance()."""

    now: float = 0.0
    tasks: list[ManualTask] = field(default_factory=list)

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualTask:
        task = ManualTask(due=self.now + delay, callback=callback)
        self.tasks.append(task)
        return task

    def call_every(self, interval: float, callback: Callable[[], None]) -> ManualTask:
        task = ManualTask(due=self.now + interval, callback=callback, interval=interval)
        self.tasks.append(task)
        return task

    def pending(self) -> list[ManualTask]:
        return [task for task in self.tasks if not task.cancelled]

    def advance(self, seconds: float) -> None:
        """Move the clock forward, firing due callbacks in time order."""
        target = self.now + seconds
        while True:
            due = [t for t in self.pending() if t.due <= target]
            if not due:
                break
            task = min(due, key=lambda t: t.due)
            self.now = task.due
            if task.interval is None:
                self.tasks.remove(task)
            else:
                task.due += task.interval
            task.callback()
        self.now = target
        self.tasks = self.pending()


class _TimerTask:
    def __init__(self, delay: float, callback: Callable[[], None]):
        self._cancelled = False
        self._timer = threading.Timer(delay, callback)
        self._timer.daemon = True
        self._timer.start()

    def cancel(self) -> None:
        self._cancelled = True
        self._timer.cancel()

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class _IntervalTask:
    def __init__(self, interval: float, callback: Callable[[], None]):
        self._interval = interval
        self._callback = callback
        self._stopped = threading.Event()
        self._thread = threading.Thread(target=self._run, daemon=True)
        self._thread.start()

    def _run(self) -> None:
        while not self._stopped.wait(self._interval):
            try:
                self._callback()
            except Exception:
                # Keep the interval alive; the next tick retries.
                logger.exception("Interval callback %r failed", self._callback)

    def cancel(self) -> None:
        self._stopped.set()

    @property
    def cancelled(self) -> bool:
        return self._stopped.is_set()


class ThreadingScheduler:
    """Runs callbacks on daemon timer threads."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledTask:
        return _TimerTask(delay, callback)

    def call_every(self, interval: float, callback: Callable[[], None]) -> ScheduledTask:
        return _IntervalTask(interval, callback)
