"""Synchronous publish/subscribe event bus with bounded history.

``emit`` calls every matching subscriber in registration order, on the
caller's stack, and only then appends the event to history.  A subscriber
that raises propagates out of ``emit``; later subscribers are not called
and the event is not recorded.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Callable
from dataclasses import dataclass

import structlog

from kubesim.models.events import ClusterEvent

_log = structlog.get_logger(component="cluster.bus")

EventCallback = Callable[[ClusterEvent], None]
EventPredicate = Callable[[ClusterEvent], bool]
Unsubscribe = Callable[[], None]

DEFAULT_HISTORY_SIZE = 1000


def _match_all(event: ClusterEvent) -> bool:
    return True


@dataclass(eq=False)
class _Subscription:
    predicate: EventPredicate
    callback: EventCallback


class EventBus:
    """In-process event bus.  Single-threaded; not safe for concurrent emit."""

    def __init__(self, history_size: int = DEFAULT_HISTORY_SIZE, history_enabled: bool = True) -> None:
        if history_size < 1:
            raise ValueError(f"history_size must be >= 1, got {history_size}")
        self._subscriptions: list[_Subscription] = []
        self._history: deque[ClusterEvent] = deque(maxlen=history_size)
        self._history_enabled = history_enabled

    def subscribe(self, predicate: EventPredicate, callback: EventCallback) -> Unsubscribe:
        """Register *callback* for events matching *predicate*."""
        sub = _Subscription(predicate=predicate, callback=callback)
        self._subscriptions.append(sub)

        def _unsubscribe() -> None:
            if sub in self._subscriptions:
                self._subscriptions.remove(sub)

        return _unsubscribe

    def subscribe_all(self, callback: EventCallback) -> Unsubscribe:
        return self.subscribe(_match_all, callback)

    def emit(self, event: ClusterEvent) -> None:
        _log.debug("event_emitted", type=event.type, name=event.name, namespace=event.namespace)
        # Snapshot so a callback may (un)subscribe without skipping anyone.
        for sub in list(self._subscriptions):
            if sub.predicate(event):
                sub.callback(event)
        if self._history_enabled:
            self._history.append(event)

    def history(self) -> list[ClusterEvent]:
        """Recorded events, oldest first."""
        return list(self._history)

    def clear_history(self) -> None:
        self._history.clear()

    @property
    def history_capacity(self) -> int:
        return self._history.maxlen or 0

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)
