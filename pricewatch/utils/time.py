"""
Time utilities for event timestamps and delivery latency.

Engine timestamps are always UTC. Latency is measured with a monotonic
clock so that wall-clock adjustments never produce negative durations.
"""

import time
from datetime import datetime, timezone
from typing import Optional


def utc_now() -> datetime:
    """
    Get the current wall-clock time as a timezone-aware UTC datetime.

    Returns:
        Current UTC datetime
    """
    return datetime.now(timezone.utc)


def ensure_utc(ts: Optional[datetime] = None) -> datetime:
    """
    Normalize an optional timestamp to UTC.

    Args:
        ts: Timestamp to normalize; naive values are assumed to be UTC

    Returns:
        UTC datetime, falling back to the current time when ts is None
    """
    if ts is None:
        return utc_now()

    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)

    return ts.astimezone(timezone.utc)


def format_clock_time(ts: datetime, fmt: str = "%H:%M:%S") -> str:
    """
    Format a timestamp for event log lines.

    Args:
        ts: Timestamp to format
        fmt: strftime format, defaults to HH:MM:SS

    Returns:
        Formatted time string
    """
    return ts.strftime(fmt)


def monotonic_ms() -> float:
    """Monotonic clock reading in milliseconds."""
    return time.monotonic() * 1000.0


def elapsed_ms(start_ms: float, end_ms: Optional[float] = None) -> int:
    """
    Calculate elapsed milliseconds between two monotonic readings.

    Args:
        start_ms: Start reading from monotonic_ms()
        end_ms: End reading, defaults to now

    Returns:
        Elapsed whole milliseconds, never negative
    """
    if end_ms is None:
        end_ms = monotonic_ms()

    return max(0, int(end_ms - start_ms))
