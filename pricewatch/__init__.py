"""
Pricewatch - Topic-based Price Notification Engine

Publish/subscribe engine that fans price-change events out to subscribers
concurrently, applies per-subscription price filters, and keeps an ordered
audit log of every registry and dispatch operation.
"""

__version__ = "0.1.0"
__author__ = "Pricewatch Team"
