"""
In-process change notifications for the event store.
"""

import logging
from typing import Callable

logger = logging.getLogger(__name__)

ChangeCallback = Callable[[dict], None]


class ChangeFeed:
    """
    Fan-out of store change notifications to subscribers.

    Example change: {"table": "events", "type": "INSERT", "id": "12"}
    """

    def __init__(self):
        self._subscribers: list[ChangeCallback] = []

    def subscribe(self, callback: ChangeCallback) -> Callable[[], None]:
        """Register callback; returns a function that removes it again."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def publish(self, change: dict) -> None:
        # Copy so callbacks may unsubscribe while being notified
        for callback in list(self._subscribers):
            try:
                callback(change)
            except Exception:
                logger.exception("Change subscriber failed for %s", change)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)
