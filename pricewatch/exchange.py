"""
Exchange facade.

Composes the price store, subscription registry, event log and
notification dispatcher behind one API:
Validate → Store Price → Log → Fan-out → Join → Report
"""

import threading
from collections.abc import Callable
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Any, Optional

import structlog

from .config.defaults import ExchangeConfig, get_default_config
from .config.loader import ConfigLoader
from .delivery.base import DispatchReport, Subscriber
from .delivery.dispatcher import NotificationDispatcher
from .errors import ExchangeError
from .models import LogEntry, SubscriptionInfo, normalize_price, normalize_topic
from .reporting import format_event_log, format_subscriptions_report
from .store.event_log import EventLog
from .store.price_store import PriceStore
from .subscriptions.registry import SubscriptionRegistry
from .utils.time import utc_now

logger = structlog.get_logger(__name__)


class Exchange:
    """
    Topic-based price exchange with concurrent subscriber notification.

    Updates for the same topic are serialized: each update's fan-out
    finishes before the next update for that topic starts, so subscribers
    observe a topic's prices in the order the updates were applied.
    Updates for different topics never wait on each other.
    """

    def __init__(
        self,
        config: Optional[ExchangeConfig] = None,
        clock: Callable[[], datetime] = utc_now
    ) -> None:
        """Initialize the exchange and its components."""
        self.logger = logger
        self.config = config or get_default_config()
        self._clock = clock

        self.event_log = EventLog(self.config.event_log, clock=clock)
        self.price_store = PriceStore()
        self.registry = SubscriptionRegistry(self.event_log)
        self.dispatcher = NotificationDispatcher(
            self.registry,
            self.event_log,
            self.config.dispatch
        )

        self._topic_locks: dict[str, threading.Lock] = {}
        self._topic_locks_guard = threading.Lock()
        self._closed = False

        self.logger.info(
            "Exchange initialized",
            max_workers=self.config.dispatch.max_workers,
            notify_timeout_seconds=self.config.dispatch.notify_timeout_seconds
        )

    @classmethod
    def from_config_dir(
        cls,
        config_dir: Optional[Path] = None,
        overrides: Optional[dict[str, Any]] = None
    ) -> "Exchange":
        """Build an exchange from exchange.yaml plus explicit overrides."""
        return cls(ConfigLoader.create(config_dir).load(overrides))

    def subscribe(self, topic: Any, subscriber: Subscriber, min_notify_price: Any = None) -> bool:
        """Subscribe to a topic; a duplicate is a logged no-op returning False."""
        return self.registry.subscribe(topic, subscriber, min_notify_price)

    def unsubscribe(self, topic: Any, subscriber: Any) -> bool:
        """Unsubscribe from a topic; unknown subscriptions are ignored."""
        return self.registry.unsubscribe(topic, subscriber)

    def update_price(self, topic: Any, price: Any, reason: str = "") -> DispatchReport:
        """
        Publish a new price and notify matching subscribers.

        Args:
            topic: Topic identifier
            price: New positive price
            reason: Free-text reason passed through to subscribers

        Returns:
            Dispatch report, available once every notification has finished

        Raises:
            InvalidArgumentError: blank topic or non-positive price; nothing
                is stored, logged or delivered
            ExchangeError: the exchange has been closed
        """
        symbol = normalize_topic(topic)
        value = normalize_price(price)
        reason = "" if reason is None else str(reason)

        if self._closed:
            raise ExchangeError("Exchange is closed", context={"topic": symbol})

        with self._topic_lock(symbol):
            # close() may have run while this update waited for the topic
            if self._closed:
                raise ExchangeError("Exchange is closed", context={"topic": symbol})

            record = self.price_store.set_price(symbol, value, timestamp=self._clock())
            self.event_log.append(f"price updated: {symbol} = {value} | reason: {reason}")

            report = self.dispatcher.dispatch(symbol, value, reason, timestamp=record.timestamp)

        self.logger.info(
            "Price update dispatched",
            topic=symbol,
            price=str(value),
            delivered=len(report.delivered),
            failed=len(report.failed),
            skipped=len(report.skipped)
        )
        return report

    def get_price(self, topic: Any) -> Optional[Decimal]:
        """Last price for a topic, or None if it was never updated."""
        return self.price_store.get_price(topic)

    def subscriptions_report(self) -> list[SubscriptionInfo]:
        """Snapshot of every subscription with its filter and counters."""
        rows = []
        for symbol, subscriptions in self.registry.snapshot_all():
            for sub in subscriptions:
                rows.append(SubscriptionInfo(
                    topic=symbol,
                    subscriber=sub.name,
                    filter=sub.filter_description,
                    delivery_count=sub.delivery_count,
                    failure_count=sub.failure_count
                ))
        return rows

    def event_log_snapshot(self) -> tuple[LogEntry, ...]:
        """Ordered copy of the event log."""
        return self.event_log.snapshot()

    def render_subscriptions_report(self) -> str:
        """Subscriptions report text; topics emptied by unsubscribe are kept."""
        return format_subscriptions_report(self.subscriptions_report(), topics=self.registry.topics())

    def render_event_log(self) -> str:
        """Event log text using the configured clock format."""
        return format_event_log(self.event_log_snapshot(), self.config.event_log.time_format)

    def get_stats(self) -> dict[str, Any]:
        """Get exchange statistics."""
        stats = self.dispatcher.get_stats()
        stats.update({
            "topics_priced": len(self.price_store),
            "subscriptions": len(self.registry),
            "log_entries": len(self.event_log),
        })
        return stats

    def close(self) -> None:
        """Reject further updates and shut the notification pool down."""
        if self._closed:
            return
        self._closed = True
        self.dispatcher.close()
        self.logger.info("Exchange closed")

    @property
    def closed(self) -> bool:
        return self._closed

    def _topic_lock(self, symbol: str) -> threading.Lock:
        with self._topic_locks_guard:
            lock = self._topic_locks.get(symbol)
            if lock is None:
                lock = self._topic_locks[symbol] = threading.Lock()
            return lock

    def __enter__(self) -> "Exchange":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
