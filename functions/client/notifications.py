"""
Single-slot notification display.

Only one notification is visible at a time: a new notify() replaces the
current one and cancels its auto-dismiss timer (last writer wins).
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Callable, Optional

from client.scheduler import ScheduledTask, Scheduler

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 5.0


class Severity(StrEnum):
    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


ICONS = {
    Severity.SUCCESS: "fa-check-circle",
    Severity.ERROR: "fa-exclamation-circle",
    Severity.WARNING: "fa-exclamation-triangle",
    Severity.INFO: "fa-info-circle",
}


def _coerce_severity(value) -> Severity:
    try:
        return Severity(value)
    except ValueError:
        logger.debug("Unknown severity %r, using info", value)
        return Severity.INFO


@dataclass
class Notification:
    message: str
    severity: Severity = Severity.INFO
    timeout: float = DEFAULT_TIMEOUT_SECONDS
    created_at: float = field(default_factory=lambda: time.time())

    @property
    def icon(self) -> str:
        return ICONS[self.severity]


class NotificationQueue:
    """Shows at most one notification and removes it after its timeout."""

    def __init__(
        self,
        scheduler: Scheduler,
        default_timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        self.scheduler = scheduler
        self.default_timeout = default_timeout
        self._current: Optional[Notification] = None
        self._dismiss_task: Optional[ScheduledTask] = None
        self._listeners: list[Callable[[Optional[Notification]], None]] = []
        self._lock = threading.RLock()

    @property
    def current(self) -> Optional[Notification]:
        return self._current

    def on_change(self, listener: Callable[[Optional[Notification]], None]) -> None:
        """Register a display observer; it receives the visible notification or None."""
        if listener not in self._listeners:
            self._listeners.append(listener)

    def notify(
        self,
        message: str,
        severity: Severity | str = Severity.INFO,
        timeout: Optional[float] = None,
    ) -> Notification:
        notification = Notification(
            message=message,
            severity=_coerce_severity(severity),
            timeout=self.default_timeout if timeout is None else timeout,
        )
        with self._lock:
            self._cancel_pending()
            self._current = notification
            self._dismiss_task = self.scheduler.call_later(
                notification.timeout, lambda: self._expire(notification)
            )
            logger.debug("Showing %s notification: %s", notification.severity, message)
            # Listeners run under the lock so they see changes in display order.
            self._emit(notification)
        return notification

    def dismiss(self, notification: Optional[Notification] = None) -> None:
        """
        Remove the visible notification and cancel its auto-removal.

        When a notification is given, nothing happens unless it is still the
        one on display.
        """
        with self._lock:
            if self._current is None:
                return
            if notification is not None and self._current is not notification:
                return
            self._cancel_pending()
            self._current = None
            self._emit(None)

    def _expire(self, notification: Notification) -> None:
        with self._lock:
            # A replaced notification's timer must not remove its successor.
            if self._current is not notification:
                return
            self._current = None
            self._dismiss_task = None
            self._emit(None)

    def _cancel_pending(self) -> None:
        if self._dismiss_task is not None:
            self._dismiss_task.cancel()
            self._dismiss_task = None

    def _emit(self, notification: Optional[Notification]) -> None:
        for listener in list(self._listeners):
            try:
                listener(notification)
            except Exception:
                logger.exception("Notification listener %r failed", listener)
