"""
Event Bus - Named publish/subscribe channels.

Two topics are published by the core: ``update`` (UpdateEvent) and ``alert``
(AlertEvent). Handlers run synchronously, in subscription order, on the
publishing coroutine.
"""

import logging
from collections import defaultdict
from typing import Any, Callable, Dict, List

logger = logging.getLogger(__name__)

UPDATE = "update"
ALERT = "alert"
TOPICS = (UPDATE, ALERT)

Handler = Callable[[Any], None]


class Subscription:
    """Detachable handle returned by EventBus.subscribe."""

    def __init__(self, bus: "EventBus", topic: str, handler: Handler):
        self.topic = topic
        self.handler = handler
        self._bus = bus
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self._bus._remove(self)
            self.active = False


class EventBus:
    """Publish/subscribe over the ``update`` and ``alert`` topics."""

    def __init__(self):
        self._subscriptions: Dict[str, List[Subscription]] = defaultdict(list)

    def subscribe(self, topic: str, handler: Handler) -> Subscription:
        if topic not in TOPICS:
            raise ValueError(f"Unknown topic: {topic} (expected one of {TOPICS})")
        subscription = Subscription(self, topic, handler)
        self._subscriptions[topic].append(subscription)
        return subscription

    def publish(self, topic: str, payload: Any) -> int:
        """
        Deliver a payload to every handler on a topic.

        A failing handler is logged and does not stop delivery to the others.

        Returns:
            Number of handlers that received the payload
        """
        delivered = 0
        for subscription in list(self._subscriptions.get(topic, [])):
            try:
                subscription.handler(payload)
                delivered += 1
            except Exception:
                logger.exception("Handler for '%s' failed", topic)
        return delivered

    def subscriber_count(self, topic: str) -> int:
        return len(self._subscriptions.get(topic, []))

    def _remove(self, subscription: Subscription) -> None:
        handlers = self._subscriptions.get(subscription.topic, [])
        if subscription in handlers:
            handlers.remove(subscription)
