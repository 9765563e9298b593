"""Subscription state and report rows."""

import threading
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Optional


def subscriber_name(subscriber: Any) -> str:
    """Display name of a subscriber, falling back to its type name."""
    name = getattr(subscriber, "name", None)
    if isinstance(name, str) and name:
        return name
    return type(subscriber).__name__


@dataclass(eq=False)
class Subscription:
    """
    Relationship between a topic and a subscriber.

    The subscriber is held by reference only; the registry never owns or
    mutates it. Counters only move forward and are changed through
    record_delivery() / record_failure(), which serialize on a
    per-subscription lock so concurrent completions never lose an increment.
    """
    subscriber: Any
    min_notify_price: Optional[Decimal] = None
    _delivery_count: int = field(default=0, init=False, repr=False)
    _failure_count: int = field(default=0, init=False, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    @property
    def name(self) -> str:
        return subscriber_name(self.subscriber)

    @property
    def delivery_count(self) -> int:
        with self._lock:
            return self._delivery_count

    @property
    def failure_count(self) -> int:
        with self._lock:
            return self._failure_count

    @property
    def filter_description(self) -> str:
        if self.min_notify_price is None:
            return "no filter"
        return f"filter >= {self.min_notify_price}"

    def is_for(self, subscriber: Any) -> bool:
        """Identity match, never equality."""
        return self.subscriber is subscriber

    def accepts(self, price: Decimal) -> bool:
        """Filter rule: skip when a minimum is set and price is below it."""
        return self.min_notify_price is None or price >= self.min_notify_price

    def record_delivery(self) -> int:
        with self._lock:
            self._delivery_count += 1
            return self._delivery_count

    def record_failure(self) -> int:
        with self._lock:
            self._failure_count += 1
            return self._failure_count


@dataclass(frozen=True)
class SubscriptionInfo:
    """Read-only subscriptions report row."""
    topic: str
    subscriber: str
    filter: str
    delivery_count: int
    failure_count: int = 0
