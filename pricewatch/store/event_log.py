"""Append-only event log for registry and dispatch operations."""

import threading
from collections.abc import Callable
from datetime import datetime
from typing import Optional

import structlog

from ..config.defaults import EventLogParams
from ..logging.config import get_audit_logger
from ..models import LogEntry
from ..utils.time import utc_now

logger = structlog.get_logger(__name__)


class EventLog:
    """
    Thread-safe, timestamp-ordered audit log.

    Timestamps are taken while holding the lock, so entry order and
    timestamp order always agree. A clock that steps backwards is clamped
    to the previous entry's timestamp.
    """

    def __init__(
        self,
        params: Optional[EventLogParams] = None,
        clock: Callable[[], datetime] = utc_now
    ) -> None:
        self.params = params or EventLogParams()
        self._clock = clock
        self._entries: list[LogEntry] = []
        self._lock = threading.Lock()
        self.audit_logger = get_audit_logger(__name__)

    def append(self, text: str) -> LogEntry:
        """Append a line and return the stored entry."""
        with self._lock:
            timestamp = self._clock()
            if self._entries and timestamp < self._entries[-1].timestamp:
                timestamp = self._entries[-1].timestamp

            entry = LogEntry(timestamp=timestamp, text=text)
            self._entries.append(entry)

        if self.params.mirror_to_logger:
            self.audit_logger.info(text, logged_at=timestamp.isoformat())

        return entry

    def snapshot(self) -> tuple[LogEntry, ...]:
        """Ordered copy of all entries."""
        with self._lock:
            return tuple(self._entries)

    def find(self, fragment: str) -> list[LogEntry]:
        """Entries whose text contains fragment, in log order."""
        return [entry for entry in self.snapshot() if fragment in entry.text]

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
