"""
Delivery failure classifications.

A delivery error belongs to one subscriber and one update. The dispatcher
attaches it to the matching DeliveryResult; it never aborts the update.
"""

from typing import Optional

from .validation import ExchangeError


class DeliveryError(ExchangeError):
    """A subscriber failed to handle a price notification."""

    def __init__(self, message: str, subscriber_name: Optional[str] = None,
                 topic: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.subscriber_name = subscriber_name
        self.topic = topic


class DeliveryTimeoutError(DeliveryError):
    """A subscriber did not finish within the notification timeout."""

    def __init__(self, message: str, timeout_seconds: Optional[float] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.timeout_seconds = timeout_seconds
