"""
Subscription registry: topic to ordered, deduplicated subscriptions.

Subscribers are stored by reference and matched by identity. Mutations and
snapshot reads share one lock, so a dispatch never sees a half-applied
subscribe or unsubscribe.
"""

import threading
from typing import Any, Optional

import structlog

from ..delivery.base import Subscriber
from ..errors import InvalidArgumentError
from ..models import Subscription, normalize_price, normalize_topic, subscriber_name
from ..store.event_log import EventLog

logger = structlog.get_logger(__name__)


class SubscriptionRegistry:
    """Maps each topic to its subscriptions in insertion order."""

    def __init__(self, event_log: EventLog) -> None:
        self.logger = logger
        self.event_log = event_log
        self._subscriptions: dict[str, list[Subscription]] = {}
        self._lock = threading.Lock()

    def subscribe(self, topic: Any, subscriber: Subscriber, min_notify_price: Any = None) -> bool:
        """
        Subscribe a subscriber to a topic.

        Args:
            topic: Topic identifier
            subscriber: Object implementing on_price_changed
            min_notify_price: Optional positive filter; updates below it are skipped

        Returns:
            True if a subscription was created, False for a duplicate

        Raises:
            InvalidArgumentError: blank topic, missing subscriber or invalid filter
        """
        symbol = normalize_topic(topic)

        if subscriber is None:
            raise InvalidArgumentError("Subscriber must be set", field="subscriber", value=None)

        if not callable(getattr(subscriber, "on_price_changed", None)):
            raise InvalidArgumentError(
                "Subscriber must implement on_price_changed",
                field="subscriber",
                value=subscriber
            )

        minimum = None
        if min_notify_price is not None:
            minimum = normalize_price(min_notify_price, field="min_notify_price")

        name = subscriber_name(subscriber)

        with self._lock:
            subscriptions = self._subscriptions.setdefault(symbol, [])

            # Re-subscribing keeps the existing filter and counters
            if any(sub.is_for(subscriber) for sub in subscriptions):
                self.event_log.append(f"duplicate subscription skipped: {name} -> {symbol}")
                self.logger.debug("Duplicate subscription skipped", topic=symbol, subscriber=name)
                return False

            subscriptions.append(Subscription(subscriber=subscriber, min_notify_price=minimum))

            filter_text = f" (filter >= {minimum})" if minimum is not None else ""
            self.event_log.append(f"subscription added: {name} -> {symbol}{filter_text}")

        self.logger.info(
            "Subscription added",
            topic=symbol,
            subscriber=name,
            min_notify_price=str(minimum) if minimum is not None else None
        )
        return True

    def unsubscribe(self, topic: Any, subscriber: Any) -> bool:
        """
        Remove a subscription.

        Unset arguments and unknown subscriptions are ignored silently.

        Returns:
            True if a subscription was removed
        """
        if subscriber is None or not isinstance(topic, str) or not topic.strip():
            return False

        symbol = normalize_topic(topic)

        with self._lock:
            subscriptions = self._subscriptions.get(symbol)
            if not subscriptions:
                return False

            match = self._find(subscriptions, subscriber)
            if match is None:
                return False

            subscriptions.remove(match)
            self.event_log.append(f"subscription removed: {match.name} -> {symbol}")

        self.logger.info("Subscription removed", topic=symbol, subscriber=match.name)
        return True

    def matching_subscriptions(self, topic: Any) -> tuple[Subscription, ...]:
        """Snapshot of a topic's subscriptions in insertion order."""
        if not isinstance(topic, str) or not topic.strip():
            return ()

        symbol = normalize_topic(topic)

        with self._lock:
            return tuple(self._subscriptions.get(symbol, ()))

    def topics(self) -> list[str]:
        """Topics that have ever had a subscription, in first-subscribe order."""
        with self._lock:
            return list(self._subscriptions)

    def snapshot_all(self) -> list[tuple[str, tuple[Subscription, ...]]]:
        """Every topic with a snapshot of its subscriptions."""
        with self._lock:
            return [(symbol, tuple(subs)) for symbol, subs in self._subscriptions.items()]

    def _find(self, subscriptions: list[Subscription], subscriber: Any) -> Optional[Subscription]:
        for sub in subscriptions:
            if sub.is_for(subscriber):
                return sub
        return None

    def __len__(self) -> int:
        with self._lock:
            return sum(len(subs) for subs in self._subscriptions.values())
