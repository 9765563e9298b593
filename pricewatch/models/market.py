"""Topic, price and event value objects."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from ..errors import InvalidArgumentError
from ..utils.time import format_clock_time


def normalize_topic(topic: Any) -> str:
    """
    Normalize a topic identifier.

    Topics are case-insensitive and surrounding whitespace is ignored,
    so " aapl" and "AAPL" address the same topic.

    Raises:
        InvalidArgumentError: topic is not a string or is blank
    """
    if not isinstance(topic, str) or not topic.strip():
        raise InvalidArgumentError(
            "Topic must be a non-empty string",
            field="topic",
            value=topic
        )

    return topic.strip().upper()


def normalize_price(price: Any, field: str = "price") -> Decimal:
    """
    Convert a price to a positive Decimal.

    Floats go through their repr so 0.1 stays 0.1 rather than its binary
    expansion.

    Raises:
        InvalidArgumentError: price is not numeric, not finite, or <= 0
    """
    if isinstance(price, bool) or not isinstance(price, (Decimal, int, float, str)):
        raise InvalidArgumentError(
            f"{field} must be a number",
            field=field,
            value=price
        )

    try:
        value = price if isinstance(price, Decimal) else Decimal(str(price).strip())
    except InvalidOperation:
        raise InvalidArgumentError(
            f"{field} must be a number",
            field=field,
            value=price
        ) from None

    if not value.is_finite():
        raise InvalidArgumentError(
            f"{field} must be finite",
            field=field,
            value=price
        )

    if value <= 0:
        raise InvalidArgumentError(
            f"{field} must be greater than 0",
            field=field,
            value=price
        )

    return value


@dataclass(frozen=True)
class PriceRecord:
    """Last known price for a topic."""
    topic: str
    price: Decimal
    timestamp: datetime


@dataclass(frozen=True)
class NotificationEvent:
    """
    Price change delivered to a single subscriber.

    Every eligible subscriber of an update receives its own instance; all
    instances of one update compare equal.
    """
    topic: str
    price: Decimal
    timestamp: datetime
    reason: str = ""


@dataclass(frozen=True)
class LogEntry:
    """One line of the exchange event log."""
    timestamp: datetime
    text: str

    def format(self, time_format: str = "%H:%M:%S") -> str:
        """Render as '[HH:MM:SS] text'."""
        return f"[{format_clock_time(self.timestamp, time_format)}] {self.text}"
