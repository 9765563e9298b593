"""Pass-through subscriber that prints every notification."""

import sys
import threading
from typing import Optional, TextIO

from ..models import NotificationEvent


class ConsoleNotifier:
    """Displays price changes on a text stream."""

    def __init__(self, name: str, stream: Optional[TextIO] = None):
        self.name = name
        self._stream = stream
        self._lock = threading.Lock()

    def on_price_changed(self, event: NotificationEvent) -> None:
        line = f"[Trader {self.name}] {event.topic} -> {event.price}"
        if event.reason:
            line += f" | {event.reason}"

        # Resolved per call so pytest's capsys sees the output
        stream = self._stream or sys.stdout
        with self._lock:
            print(line, file=stream, flush=True)

    def __repr__(self) -> str:
        return f"ConsoleNotifier(name={self.name!r})"
