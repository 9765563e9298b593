"""Last known price per topic."""

import threading
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

import structlog

from ..errors import TopicNotFoundError
from ..models import PriceRecord, normalize_price, normalize_topic
from ..utils.time import ensure_utc

logger = structlog.get_logger(__name__)


class PriceStore:
    """Thread-safe map of topic to its most recent PriceRecord."""

    def __init__(self) -> None:
        self.logger = logger
        self._records: dict[str, PriceRecord] = {}
        self._lock = threading.Lock()

    def set_price(self, topic: Any, price: Any, timestamp: Optional[datetime] = None) -> PriceRecord:
        """
        Record a new price, overwriting the previous one.

        Args:
            topic: Topic identifier, normalized before storage
            price: Positive price
            timestamp: Update time, defaults to now

        Returns:
            The stored record

        Raises:
            InvalidArgumentError: blank topic or non-positive price
        """
        record = PriceRecord(
            topic=normalize_topic(topic),
            price=normalize_price(price),
            timestamp=ensure_utc(timestamp),
        )

        with self._lock:
            previous = self._records.get(record.topic)
            self._records[record.topic] = record

        self.logger.debug(
            "Price stored",
            topic=record.topic,
            price=str(record.price),
            previous_price=str(previous.price) if previous else None
        )

        return record

    def get_record(self, topic: Any) -> Optional[PriceRecord]:
        """Stored record for topic, or None when the topic is unknown or blank."""
        if not isinstance(topic, str) or not topic.strip():
            return None

        with self._lock:
            return self._records.get(normalize_topic(topic))

    def get_price(self, topic: Any) -> Optional[Decimal]:
        """Last price for topic, or None when nothing was recorded."""
        record = self.get_record(topic)
        return record.price if record else None

    def require_price(self, topic: Any) -> Decimal:
        """Last price for topic; raises TopicNotFoundError when unknown."""
        price = self.get_price(topic)
        if price is None:
            raise TopicNotFoundError(f"No price recorded for topic {topic!r}", topic=topic)
        return price

    def snapshot(self) -> dict[str, PriceRecord]:
        with self._lock:
            return dict(self._records)

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
