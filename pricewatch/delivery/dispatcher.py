"""
Concurrent notification fan-out.

One price update becomes one task per eligible subscription on a shared
thread pool. The dispatcher blocks on an explicit join barrier until every
task has finished or the notification timeout has expired, then settles
counters and event log entries in subscription order.
"""

import threading
import time
import concurrent.futures
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime
from typing import Any, Optional

import structlog

from ..config.defaults import DispatchParams
from ..errors import DeliveryError, DeliveryTimeoutError, ExchangeError
from ..logging.config import log_delivery
from ..models import NotificationEvent, Subscription, normalize_price, normalize_topic
from ..store.event_log import EventLog
from ..subscriptions.registry import SubscriptionRegistry
from ..utils.time import elapsed_ms, ensure_utc, monotonic_ms
from .base import DeliveryResult, DeliveryStatus, DispatchReport

logger = structlog.get_logger(__name__)


class NotificationDispatcher:
    """Fans a price update out to matching subscribers and waits for all of them."""

    def __init__(
        self,
        registry: SubscriptionRegistry,
        event_log: EventLog,
        params: Optional[DispatchParams] = None
    ) -> None:
        self.logger = logger
        self.registry = registry
        self.event_log = event_log
        self.params = params or DispatchParams()
        self._executor = ThreadPoolExecutor(
            max_workers=self.params.max_workers,
            thread_name_prefix=self.params.thread_name_prefix
        )
        self._stats_lock = threading.Lock()
        self._dispatch_count = 0
        self._delivery_count = 0
        self._error_count = 0
        self._closed = False

    def dispatch(
        self,
        topic: Any,
        price: Any,
        reason: str = "",
        timestamp: Optional[datetime] = None
    ) -> DispatchReport:
        """
        Notify every subscription of topic whose filter accepts price.

        Returns once all notifications have completed, failed or timed out.
        Subscriber failures are recorded in the report and the event log;
        they are never raised.
        """
        if self._closed:
            raise ExchangeError("Cannot dispatch on a closed dispatcher", context={"topic": topic})

        symbol = normalize_topic(topic)
        value = normalize_price(price)
        ts = ensure_utc(timestamp)
        report = DispatchReport(topic=symbol, price=value)

        snapshot = self.registry.matching_subscriptions(symbol)
        eligible = []
        for sub in snapshot:
            if sub.accepts(value):
                eligible.append(sub)
            else:
                report.skipped.append(sub.name)

        with self._stats_lock:
            self._dispatch_count += 1

        if not snapshot:
            self.event_log.append(f"no subscribers for {symbol}")
            return report

        if not eligible:
            self.event_log.append(
                f"no subscribers matched {symbol} at {value} ({len(report.skipped)} filtered)"
            )
            return report

        futures: list[tuple[Subscription, Future, threading.Event]] = []
        for sub in eligible:
            # Each subscriber gets its own event instance
            event = NotificationEvent(topic=symbol, price=value, timestamp=ts, reason=reason)
            abandoned = threading.Event()
            future = self._executor.submit(self._notify, sub, event, abandoned)
            futures.append((sub, future, abandoned))

        self.logger.debug(
            "Fan-out submitted",
            topic=symbol,
            price=str(value),
            eligible=len(eligible),
            skipped=len(report.skipped)
        )

        concurrent.futures.wait(
            [future for _, future, _ in futures],
            timeout=self.params.notify_timeout_seconds
        )

        # Mark every overdue task before settling any of them
        for _, future, abandoned in futures:
            if not future.done():
                abandoned.set()

        for sub, future, abandoned in futures:
            report.results.append(self._settle(sub, future, abandoned, symbol))

        return report

    def _notify(
        self,
        subscription: Subscription,
        event: NotificationEvent,
        abandoned: threading.Event
    ) -> Optional[int]:
        """
        Worker body: run one subscriber and return its duration in ms.

        Returns None without calling the subscriber when the dispatch gave
        up on this task during the simulated latency.
        """
        if self.params.simulated_latency_ms:
            time.sleep(self.params.simulated_latency_ms / 1000.0)
            if abandoned.is_set():
                return None

        start = monotonic_ms()
        subscription.subscriber.on_price_changed(event)
        return elapsed_ms(start)

    def _settle(
        self,
        sub: Subscription,
        future: Future,
        abandoned: threading.Event,
        symbol: str
    ) -> DeliveryResult:
        """Turn a finished, failed or overdue future into a DeliveryResult."""
        name = sub.name

        if abandoned.is_set():
            # Queued tasks are dropped; tasks still in their latency sleep skip the subscriber
            future.cancel()
            timeout = self.params.notify_timeout_seconds
            error: DeliveryError = DeliveryTimeoutError(
                f"{name} did not finish within {timeout}s",
                subscriber_name=name,
                topic=symbol,
                timeout_seconds=timeout
            )
            sub.record_failure()
            self._count(success=False)
            self.event_log.append(f"delivery timed out: {name} for {symbol} after {timeout}s")
            log_delivery(self.logger, name, symbol, DeliveryStatus.TIMED_OUT.value, error=str(error))
            return DeliveryResult(
                subscriber=name,
                status=DeliveryStatus.TIMED_OUT,
                message=str(error),
                error=error
            )

        # Cancelled only when the pool is shut down mid-dispatch
        if future.cancelled():
            exc: Optional[BaseException] = RuntimeError("notification cancelled")
        else:
            exc = future.exception()

        if exc is not None:
            error = DeliveryError(
                f"{name} failed: {exc}",
                subscriber_name=name,
                topic=symbol,
                context={"exception_type": type(exc).__name__}
            )
            error.__cause__ = exc
            sub.record_failure()
            self._count(success=False)
            self.event_log.append(f"delivery failed: {name} for {symbol}: {exc}")
            log_delivery(self.logger, name, symbol, DeliveryStatus.FAILED.value, error=str(exc))
            return DeliveryResult(
                subscriber=name,
                status=DeliveryStatus.FAILED,
                message=str(error),
                error=error
            )

        delivery_time_ms = future.result()
        sub.record_delivery()
        self._count(success=True)
        self.event_log.append(f"notified {name} for {symbol}")
        log_delivery(self.logger, name, symbol, DeliveryStatus.SUCCESS.value,
                     delivery_time_ms=delivery_time_ms)
        return DeliveryResult(
            subscriber=name,
            status=DeliveryStatus.SUCCESS,
            message="Notified",
            delivery_time_ms=delivery_time_ms
        )

    def _count(self, success: bool) -> None:
        with self._stats_lock:
            if success:
                self._delivery_count += 1
            else:
                self._error_count += 1

    def get_stats(self) -> dict[str, Any]:
        """Get cumulative dispatch statistics."""
        with self._stats_lock:
            attempts = self._delivery_count + self._error_count
            return {
                "dispatch_count": self._dispatch_count,
                "delivery_count": self._delivery_count,
                "error_count": self._error_count,
                "success_rate": self._delivery_count / attempts if attempts > 0 else 0.0,
            }

    def reset_stats(self) -> None:
        """Reset dispatch statistics."""
        with self._stats_lock:
            self._dispatch_count = 0
            self._delivery_count = 0
            self._error_count = 0

    def close(self, wait: bool = True) -> None:
        """Shut the worker pool down; further dispatches are rejected."""
        self._closed = True
        self._executor.shutdown(wait=wait, cancel_futures=True)

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self) -> "NotificationDispatcher":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
