"""
Error classification for the price notification engine.

Argument errors are raised synchronously before any state changes.
Delivery errors describe a single subscriber's failure and are recorded
in dispatch results rather than raised to the publisher.
"""

from .validation import (
    ExchangeError,
    InvalidArgumentError,
    TopicNotFoundError,
    ConfigurationError,
)
from .delivery import (
    DeliveryError,
    DeliveryTimeoutError,
)

__all__ = [
    # Base
    "ExchangeError",
    # Caller errors
    "InvalidArgumentError",
    "TopicNotFoundError",
    "ConfigurationError",
    # Delivery failures
    "DeliveryError",
    "DeliveryTimeoutError",
]
