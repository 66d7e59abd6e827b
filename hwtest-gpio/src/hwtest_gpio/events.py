"""Synchronous notifications emitted by the GPIO controller."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable

logger = logging.getLogger(__name__)

Subscriber = Callable[..., Any]


class NotificationKind(Enum):
    """Notification kinds and their payloads.

    Attributes:
        MODE_CHANGE: Numbering mode changed; payload is the new NumberingMode.
        EXPORT: A channel was set up; payload is the caller's channel.
        CHANGE: A watched value changed; payload is the channel and new bool.
    """

    MODE_CHANGE = "modeChange"
    EXPORT = "export"
    CHANGE = "change"


class Notifier:
    """Delivers notifications to subscribers in registration order.

    Delivery is synchronous. A subscriber that raises is logged and does not
    prevent delivery to the remaining subscribers.
    """

    def __init__(self) -> None:
        self._subscribers: list[tuple[NotificationKind, Subscriber]] = []

    def subscribe(self, kind: NotificationKind | str, callback: Subscriber) -> None:
        """Register a callback for one notification kind."""
        self._subscribers.append((NotificationKind(kind), callback))

    def unsubscribe(self, kind: NotificationKind | str, callback: Subscriber) -> None:
        """Remove the first registration of a callback for a kind.

        Raises:
            ValueError: If the callback is not registered for the kind.
        """
        self._subscribers.remove((NotificationKind(kind), callback))

    def subscriber_count(self, kind: NotificationKind | None = None) -> int:
        """Return the number of subscribers, optionally for one kind."""
        if kind is None:
            return len(self._subscribers)
        return sum(1 for k, _ in self._subscribers if k is kind)

    def emit(self, kind: NotificationKind, *args: Any) -> None:
        """Deliver a notification to the subscribers registered right now."""
        for sub_kind, callback in list(self._subscribers):
            if sub_kind is not kind:
                continue
            try:
                callback(*args)
            except Exception:  # pylint: disable=broad-exception-caught
                logger.warning("Subscriber for %s notification failed", kind.value, exc_info=True)

    def clear(self) -> None:
        """Remove every subscriber."""
        self._subscribers.clear()
