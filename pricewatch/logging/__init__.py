"""
Logging configuration and utilities for the pricewatch engine.
"""
from .config import configure_logging, get_audit_logger, get_logger, log_delivery

__all__ = ["configure_logging", "get_audit_logger", "get_logger", "log_delivery"]
