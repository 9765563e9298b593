"""End-to-end tests for the Exchange facade."""

import threading
import time
from decimal import Decimal

import pytest

from pricewatch.config.defaults import DispatchParams, EventLogParams, ExchangeConfig, LoggingParams
from pricewatch.errors import ExchangeError, InvalidArgumentError
from pricewatch.exchange import Exchange
from pricewatch.models import SubscriptionInfo
from pricewatch.reporting import format_subscriptions_report
from pricewatch.subscribers import Decision, MobilePushNotifier, TradingRobot


def log_texts(exchange):
    return [entry.text for entry in exchange.event_log_snapshot()]


class TestTeslaScenario:
    """A unfiltered, B filtered at 200, two TSLA updates."""

    def test_filtered_fan_out(self, exchange, make_subscriber):
        """190 reaches only A; 205 reaches both; counts are cumulative."""
        a, b = make_subscriber("A"), make_subscriber("B")
        exchange.subscribe("TSLA", a)
        exchange.subscribe("TSLA", b, min_notify_price=200)

        first = exchange.update_price("TSLA", 190, "news")
        second = exchange.update_price("TSLA", 205, "rally")

        assert first.delivered == ["A"]
        assert first.skipped == ["B"]
        assert second.delivered == ["A", "B"]
        assert a.prices == [Decimal("190"), Decimal("205")]
        assert b.prices == [Decimal("205")]

        report = exchange.subscriptions_report()
        assert report == [
            SubscriptionInfo("TSLA", "A", "no filter", 2),
            SubscriptionInfo("TSLA", "B", "filter >= 200", 1),
        ]
        assert exchange.get_price("tsla") == Decimal("205")

    def test_event_log_sequence(self, exchange, make_subscriber):
        """The audit log records every step in order."""
        a, b = make_subscriber("A"), make_subscriber("B")
        exchange.subscribe("TSLA", a)
        exchange.subscribe("TSLA", b, min_notify_price=200)
        exchange.update_price("TSLA", 190, "news")

        assert log_texts(exchange) == [
            "subscription added: A -> TSLA",
            "subscription added: B -> TSLA (filter >= 200)",
            "price updated: TSLA = 190 | reason: news",
            "notified A for TSLA",
        ]


class TestSubscriptionManagement:
    """Subscribe / unsubscribe through the facade."""

    def test_duplicate_subscription(self, exchange, make_subscriber):
        """Re-subscribing does not reset the delivery count."""
        a = make_subscriber("A")
        exchange.subscribe("AAPL", a)
        exchange.update_price("AAPL", 175, "open")

        assert exchange.subscribe("aapl", a) is False

        assert exchange.subscriptions_report() == [SubscriptionInfo("AAPL", "A", "no filter", 1)]
        assert "duplicate subscription skipped: A -> AAPL" in log_texts(exchange)

    def test_unsubscribed_subscriber_not_notified(self, exchange, make_subscriber):
        """After unsubscribe the subscriber is neither invoked nor logged."""
        a, b = make_subscriber("A"), make_subscriber("B")
        exchange.subscribe("AAPL", a)
        exchange.subscribe("AAPL", b)
        exchange.update_price("AAPL", 175, "open")

        exchange.unsubscribe("AAPL", b)
        before = len(exchange.event_log_snapshot())
        exchange.update_price("AAPL", 168, "correction")

        assert b.prices == [Decimal("175")]
        assert a.prices == [Decimal("175"), Decimal("168")]
        new_entries = log_texts(exchange)[before:]
        assert new_entries == [
            "price updated: AAPL = 168 | reason: correction",
            "notified A for AAPL",
        ]

    def test_update_without_subscribers(self, exchange):
        """Prices are still stored when nobody listens."""
        report = exchange.update_price("BTC", "33400000", "rally")

        assert report.results == []
        assert exchange.get_price("BTC") == Decimal("33400000")
        assert log_texts(exchange)[-1] == "no subscribers for BTC"


class TestInvalidUpdates:
    """Rejected updates leave no trace."""

    @pytest.mark.parametrize("topic,price", [
        ("X", -1),
        ("X", 0),
        ("", 100),
        ("   ", 100),
        ("X", "not-a-price"),
    ])
    def test_rejected_before_mutation(self, exchange, make_subscriber, topic, price):
        """No price, no log entry and no notification for invalid input."""
        a = make_subscriber("A")
        exchange.subscribe("X", a)
        before = exchange.event_log_snapshot()

        with pytest.raises(InvalidArgumentError):
            exchange.update_price(topic, price, "bad")

        assert exchange.event_log_snapshot() == before
        assert exchange.get_price("X") is None
        assert a.events == []

    def test_closed_exchange_rejects_updates(self, fast_config):
        """Updates after close raise without storing the price."""
        exchange = Exchange(fast_config)
        exchange.close()

        with pytest.raises(ExchangeError):
            exchange.update_price("AAPL", 175, "late")
        assert exchange.get_price("AAPL") is None

    def test_close_while_update_waits_for_topic(self, fast_config, make_subscriber):
        """An update queued behind the topic lock is rejected once close() has run."""
        entered = threading.Event()
        release = threading.Event()

        def block_first(event):
            entered.set()
            release.wait(5)

        slow = make_subscriber("Slow", hook=block_first)
        exchange = Exchange(fast_config)
        exchange.subscribe("X", slow)

        errors = []

        def second_update():
            try:
                exchange.update_price("X", 2, "b")
            except Exception as exc:
                errors.append(exc)

        first = threading.Thread(target=exchange.update_price, args=("X", 1, "a"))
        first.start()
        assert entered.wait(5)

        second = threading.Thread(target=second_update)
        second.start()
        time.sleep(0.1)

        closer = threading.Thread(target=exchange.close)
        closer.start()
        deadline = time.monotonic() + 5
        while not exchange.closed and time.monotonic() < deadline:
            time.sleep(0.01)

        release.set()
        for thread in (first, second, closer):
            thread.join(5)

        assert len(errors) == 1
        assert isinstance(errors[0], ExchangeError)
        assert exchange.get_price("X") == Decimal("1")
        assert "price updated: X = 2 | reason: b" not in log_texts(exchange)
        assert slow.prices == [Decimal("1")]


class TestTradingSession:
    """The full demo session with the reference subscribers."""

    def test_session(self, fast_config: ExchangeConfig, make_subscriber):
        """Counts, pushes and robot decisions after a mixed session."""
        decisions = []
        trader = make_subscriber("Amir")
        mobile = MobilePushNotifier("Alikhan")
        robot = TradingRobot(
            "RBT-01",
            buy_thresholds={"AAPL": 170, "TSLA": 210},
            sell_thresholds={"AAPL": 210, "TSLA": 280},
            on_decision=lambda event, decision: decisions.append(
                (event.topic, event.price, decision)
            ),
        )

        with Exchange(fast_config) as exchange:
            exchange.subscribe("AAPL", trader)
            exchange.subscribe("TSLA", trader, 200)
            exchange.subscribe("AAPL", mobile, 180)
            exchange.subscribe("TSLA", robot)
            exchange.subscribe("AAPL", robot)

            exchange.update_price("AAPL", 175, "Regular trading session")
            exchange.update_price("TSLA", 205, "Positive company news")
            exchange.update_price("AAPL", 215, "Quarterly earnings release")
            exchange.unsubscribe("AAPL", mobile)
            exchange.update_price("AAPL", 168, "Market correction")
            exchange.update_price("TSLA", 290, "EV demand growth")

            report = exchange.subscriptions_report()
            stats = exchange.get_stats()

        assert report == [
            SubscriptionInfo("AAPL", "Amir", "no filter", 3),
            SubscriptionInfo("AAPL", "RBT-01", "no filter", 3),
            SubscriptionInfo("TSLA", "Amir", "filter >= 200", 2),
            SubscriptionInfo("TSLA", "RBT-01", "no filter", 2),
        ]
        assert mobile.outbox == ["Push: AAPL = 215"]
        assert decisions == [
            ("AAPL", Decimal("175"), Decision.HOLD),
            ("TSLA", Decimal("205"), Decision.BUY),
            ("AAPL", Decimal("215"), Decision.SELL),
            ("AAPL", Decimal("168"), Decision.BUY),
            ("TSLA", Decimal("290"), Decision.SELL),
        ]
        assert stats["dispatch_count"] == 5
        assert stats["delivery_count"] == 11
        assert stats["error_count"] == 0
        assert stats["topics_priced"] == 2
        assert stats["subscriptions"] == 4

        text = format_subscriptions_report(report)
        assert "Topic: TSLA" in text
        assert "  RBT-01 | no filter | notifications: 2" in text


class TestConfiguredExchange:
    """Exchange built from a config directory."""

    def test_from_config_dir(self, tmp_path):
        """exchange.yaml values reach the dispatcher."""
        (tmp_path / "exchange.yaml").write_text(
            "dispatch:\n  max_workers: 3\n  notify_timeout_seconds: 1.5\n"
            "event_log:\n  mirror_to_logger: false\n"
        )

        with Exchange.from_config_dir(tmp_path) as exchange:
            assert exchange.config.dispatch.max_workers == 3
            assert exchange.dispatcher.params.notify_timeout_seconds == 1.5
            assert exchange.event_log.params.mirror_to_logger is False

    def test_rendered_reports(self, make_subscriber):
        """Rendered reports keep emptied topics and use the configured clock format."""
        config = ExchangeConfig(
            dispatch=DispatchParams(max_workers=4),
            event_log=EventLogParams(mirror_to_logger=False, time_format="%H:%M"),
            logging=LoggingParams(),
        )
        a = make_subscriber("A")

        with Exchange(config) as exchange:
            exchange.subscribe("AAPL", a)
            exchange.subscribe("MSFT", a)
            exchange.unsubscribe("MSFT", a)
            exchange.update_price("AAPL", 175, "open")

            report = exchange.render_subscriptions_report()
            log = exchange.render_event_log()

        assert report == "\n".join([
            "Subscriptions report",
            "Topic: AAPL",
            "  A | no filter | notifications: 1",
            "Topic: MSFT",
            "  no subscribers",
        ])
        lines = log.splitlines()
        assert lines[0] == "Event log"
        assert lines[1].endswith("] subscription added: A -> AAPL")
        assert all(len(line.split("]")[0]) == len("[HH:MM") for line in lines[1:])
