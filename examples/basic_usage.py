#!/usr/bin/env python3
"""
Basic Usage Example - Pricewatch Notification Engine

This script walks through a short trading session. It shows how to:
- Configure logging and build an exchange
- Subscribe console, mobile and robot subscribers with optional filters
- Publish price updates and unsubscribe mid-session
- Print the subscriptions report and the event log

Run: python examples/basic_usage.py
"""

from pricewatch.config.loader import ConfigLoader
from pricewatch.exchange import Exchange
from pricewatch.logging import configure_logging
from pricewatch.subscribers import ConsoleNotifier, MobilePushNotifier, TradingRobot


def print_decision(event, decision):
    """Robot decision callback."""
    print(f"[Robot RBT-01] {decision.value} {event.topic} at {event.price}")


def main():
    """Main demonstration function."""
    # 100 ms per notification, as a slow downstream would behave
    config = ConfigLoader.create().load({
        "dispatch": {"simulated_latency_ms": 100},
        "logging": {"level": "WARNING"},
    })
    configure_logging(
        level=config.logging.level,
        format_json=config.logging.format_json,
        include_timestamp=config.logging.include_timestamp,
        include_caller=config.logging.include_caller,
    )

    print("Pricewatch - Basic Usage Demo")
    print("=" * 60)

    with Exchange(config) as exchange:
        trader = ConsoleNotifier("Amir")
        mobile = MobilePushNotifier("Alikhan")
        robot = TradingRobot(
            "RBT-01",
            buy_thresholds={"AAPL": 170, "TSLA": 210},
            sell_thresholds={"AAPL": 210, "TSLA": 280},
            on_decision=print_decision,
        )

        exchange.subscribe("AAPL", trader)
        exchange.subscribe("TSLA", trader, min_notify_price=200)
        exchange.subscribe("AAPL", mobile, min_notify_price=180)
        exchange.subscribe("TSLA", robot)
        exchange.subscribe("AAPL", robot)

        exchange.update_price("AAPL", 175, "Regular trading session")
        exchange.update_price("TSLA", 205, "Positive company news")
        exchange.update_price("AAPL", 215, "Quarterly earnings release")

        exchange.unsubscribe("AAPL", mobile)

        exchange.update_price("AAPL", 168, "Market correction")
        exchange.update_price("TSLA", 290, "EV demand growth")

        print()
        print(exchange.render_subscriptions_report())
        print()
        print(exchange.render_event_log())
        print()
        print(f"Mobile outbox: {mobile.outbox}")
        print(f"Stats: {exchange.get_stats()}")


if __name__ == "__main__":
    main()
