"""Pytest configuration and shared fixtures."""

import threading
import time
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Optional

import pytest

from pricewatch.config.defaults import (
    DispatchParams,
    EventLogParams,
    ExchangeConfig,
    LoggingParams,
)
from pricewatch.exchange import Exchange
from pricewatch.models import NotificationEvent


class RecordingSubscriber:
    """Test subscriber that records every event it receives."""

    def __init__(
        self,
        name: str,
        delay: float = 0.0,
        fail_with: Optional[Exception] = None,
        hook: Optional[Callable[[NotificationEvent], None]] = None
    ):
        self.name = name
        self.delay = delay
        self.fail_with = fail_with
        self.hook = hook
        self.events: list[NotificationEvent] = []
        self._lock = threading.Lock()

    def on_price_changed(self, event: NotificationEvent) -> None:
        if self.hook is not None:
            self.hook(event)
        if self.delay:
            time.sleep(self.delay)
        if self.fail_with is not None:
            raise self.fail_with
        with self._lock:
            self.events.append(event)

    @property
    def prices(self) -> list:
        with self._lock:
            return [event.price for event in self.events]


class FakeClock:
    """Deterministic clock advancing one second per reading."""

    def __init__(self, start: Optional[datetime] = None):
        self.current = start or datetime(2024, 1, 2, 9, 30, 0, tzinfo=timezone.utc)
        self._lock = threading.Lock()

    def __call__(self) -> datetime:
        with self._lock:
            value = self.current
            self.current = self.current + timedelta(seconds=1)
            return value


@pytest.fixture
def fast_config() -> ExchangeConfig:
    """Exchange configuration suited to tests: wide pool, quiet event log."""
    return ExchangeConfig(
        dispatch=DispatchParams(max_workers=16, notify_timeout_seconds=5.0),
        event_log=EventLogParams(mirror_to_logger=False),
        logging=LoggingParams(),
    )


@pytest.fixture
def exchange(fast_config):
    """Exchange that is closed after the test."""
    ex = Exchange(fast_config)
    yield ex
    ex.close()


@pytest.fixture
def make_subscriber():
    """Factory for RecordingSubscriber instances."""
    def _make(name: str, **kwargs) -> RecordingSubscriber:
        return RecordingSubscriber(name, **kwargs)
    return _make


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sample_event() -> NotificationEvent:
    """Sample notification event for subscriber tests."""
    return NotificationEvent(
        topic="AAPL",
        price=Decimal("175"),
        timestamp=datetime(2024, 1, 2, 9, 30, 0, tzinfo=timezone.utc),
        reason="Regular trading session",
    )
