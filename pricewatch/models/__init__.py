"""
Data models module.

Immutable value objects for topics, prices, notification events and log
entries, plus the mutable Subscription record owned by the registry.
"""

from .market import (
    LogEntry,
    NotificationEvent,
    PriceRecord,
    normalize_price,
    normalize_topic,
)
from .subscription import Subscription, SubscriptionInfo, subscriber_name

__all__ = [
    "LogEntry",
    "NotificationEvent",
    "PriceRecord",
    "Subscription",
    "SubscriptionInfo",
    "normalize_price",
    "normalize_topic",
    "subscriber_name",
]
