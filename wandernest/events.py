"""Minimal typed observer used by stateful controllers and preferences."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable
from enum import Enum
from typing import Any

Subscriber = Callable[..., None]


class EventEmitter:
    """Registers subscribers per event and calls them synchronously on emit."""

    def __init__(self):
        self._subscribers: dict[Enum, list[Subscriber]] = defaultdict(list)

    def subscribe(self, event: Enum, callback: Subscriber) -> Callable[[], None]:
        """
        Register ``callback`` for ``event``.

        Returns:
            A function that removes the subscription when called
        """
        self._subscribers[event].append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers[event]:
                self._subscribers[event].remove(callback)

        return unsubscribe

    def emit(self, event: Enum, *args: Any) -> None:
        # Copy so subscribers may unsubscribe while being notified.
        for callback in list(self._subscribers.get(event, ())):
            callback(*args)

    def subscriber_count(self, event: Enum) -> int:
        return len(self._subscribers.get(event, ()))
