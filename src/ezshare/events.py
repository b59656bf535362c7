# Change and notification listeners shared by the controllers.
# Created: 2026-10-03

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from ezshare.models import Notification, OperationResult

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[Any], None]
NotificationCallback = Callable[[Notification], None]


class StatePublisher:
    """Base for controllers that publish state changes and notifications.

    Change listeners are called with the publisher itself after every state
    mutation. Notification listeners receive exactly one Notification per
    settled operation. A failing listener is logged and never affects the
    publisher's state.
    """

    def __init__(self) -> None:
        self._change_callbacks: list[ChangeCallback] = []
        self._notification_callbacks: list[NotificationCallback] = []

    def on_change(self, callback: ChangeCallback) -> Callable[[], None]:
        """Register a change listener. Returns a function that removes it."""
        self._change_callbacks.append(callback)
        return lambda: self._remove(self._change_callbacks, callback)

    def on_notification(self, callback: NotificationCallback) -> Callable[[], None]:
        """Register a notification listener. Returns a function that removes it."""
        self._notification_callbacks.append(callback)
        return lambda: self._remove(self._notification_callbacks, callback)

    @staticmethod
    def _remove(callbacks: list, callback: Callable) -> None:
        if callback in callbacks:
            callbacks.remove(callback)

    def _publish(self) -> None:
        for cb in list(self._change_callbacks):
            try:
                cb(self)
            except Exception:
                logger.warning("Change listener %r failed", cb, exc_info=True)

    def _report(self, result: OperationResult) -> OperationResult:
        """Emit the notification for ``result`` (unless discarded) and return it."""
        if result.discarded:
            return result

        self._emit(result.to_notification())
        return result

    def _emit(self, notification: Notification) -> None:
        for cb in list(self._notification_callbacks):
            try:
                cb(notification)
            except Exception:
                logger.warning("Notification listener %r failed", cb, exc_info=True)
