"""
Caller-facing error classifications.

These exceptions are raised before any state mutation, so a rejected call
leaves the price store, subscription registry and event log unchanged.
"""

from typing import Optional, Dict, Any


class ExchangeError(Exception):
    """Base class for all price notification engine errors."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}


class InvalidArgumentError(ExchangeError, ValueError):
    """Empty topic, non-positive price or unset subscriber."""

    def __init__(self, message: str, field: Optional[str] = None,
                 value: Any = None, **kwargs):
        super().__init__(message, **kwargs)
        self.field = field
        self.value = value


class TopicNotFoundError(ExchangeError, LookupError):
    """No price has been recorded for the requested topic."""

    def __init__(self, message: str, topic: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.topic = topic


class ConfigurationError(ExchangeError):
    """Configuration values failed validation."""

    def __init__(self, message: str, errors: Optional[list] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.errors = errors or []
