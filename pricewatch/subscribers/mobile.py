"""Simulated mobile push subscriber."""

import threading
import time

import structlog

from ..models import NotificationEvent

logger = structlog.get_logger(__name__)


class MobilePushNotifier:
    """
    Records a push message for every notification.

    Messages are kept in an outbox instead of being sent anywhere; an
    optional latency stands in for the round trip to a push service.
    """

    def __init__(self, name: str, push_latency_ms: int = 0):
        self.name = name
        self.push_latency_ms = push_latency_ms
        self.logger = logger.bind(subscriber=name)
        self._outbox: list[str] = []
        self._lock = threading.Lock()

    def on_price_changed(self, event: NotificationEvent) -> None:
        if self.push_latency_ms:
            time.sleep(self.push_latency_ms / 1000.0)

        message = f"Push: {event.topic} = {event.price}"
        with self._lock:
            self._outbox.append(message)

        self.logger.info("Push sent", topic=event.topic, price=str(event.price))

    @property
    def outbox(self) -> list[str]:
        """Copy of the messages pushed so far, oldest first."""
        with self._lock:
            return list(self._outbox)

    def __repr__(self) -> str:
        return f"MobilePushNotifier(name={self.name!r})"
