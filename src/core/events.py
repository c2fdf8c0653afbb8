"""
Typed observer list for broadcasting derived telemetry state.

Publishers hand an event object to :meth:`EventBus.publish`; every callback
subscribed to that event's exact type is invoked synchronously, in
subscription order.  Subscription is explicit lifecycle management: the
handle returned by :meth:`EventBus.subscribe` removes the callback again.

Usage:
    bus = EventBus()
    unsubscribe = bus.subscribe(StageUpdated, lambda event: print(event.stage))
    bus.publish(StageUpdated(stage))
    unsubscribe()
"""

import logging
from collections import defaultdict
from typing import Any, Callable, Dict, List, Type

logger = logging.getLogger(__name__)

Callback = Callable[[Any], None]


class EventBus:
    """Synchronous publish/subscribe dispatcher keyed by event type.

    Callbacks are not shielded from each other: an exception raised by a
    subscriber propagates to the publisher.
    """

    def __init__(self) -> None:
        self._subscribers: Dict[Type, List[Callback]] = defaultdict(list)

    def subscribe(self, event_type: Type, callback: Callback) -> Callable[[], None]:
        """
        Register ``callback`` for events of ``event_type``.

        Returns:
            A zero-argument function that unsubscribes the callback.
        """
        self._subscribers[event_type].append(callback)
        logger.debug("Subscribed %r to %s", callback, event_type.__name__)

        def _unsubscribe() -> None:
            self.unsubscribe(event_type, callback)

        return _unsubscribe

    def unsubscribe(self, event_type: Type, callback: Callback) -> bool:
        """
        Remove ``callback`` from ``event_type``.

        Returns:
            True if the callback was registered, False otherwise.
        """
        callbacks = self._subscribers.get(event_type, [])
        if callback not in callbacks:
            return False
        callbacks.remove(callback)
        logger.debug("Unsubscribed %r from %s", callback, event_type.__name__)
        return True

    def publish(self, event: Any) -> int:
        """
        Deliver ``event`` to every subscriber of its type.

        Returns:
            Number of callbacks invoked.
        """
        # Copy so callbacks may unsubscribe themselves during dispatch
        callbacks = list(self._subscribers.get(type(event), []))
        for callback in callbacks:
            callback(event)
        return len(callbacks)

    def subscriber_count(self, event_type: Type) -> int:
        """Return the number of callbacks registered for ``event_type``."""
        return len(self._subscribers.get(event_type, []))

    def clear(self) -> None:
        """Drop every subscription."""
        self._subscribers.clear()

    def __repr__(self) -> str:
        counts = {t.__name__: len(cbs) for t, cbs in self._subscribers.items() if cbs}
        return f"EventBus({counts})"
