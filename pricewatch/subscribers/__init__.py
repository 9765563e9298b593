"""
Reference subscriber implementations.

Each variant is independent; the engine only relies on the name attribute
and on_price_changed().
"""

from .console import ConsoleNotifier
from .mobile import MobilePushNotifier
from .robot import Decision, TradingRobot

__all__ = ["ConsoleNotifier", "Decision", "MobilePushNotifier", "TradingRobot"]
