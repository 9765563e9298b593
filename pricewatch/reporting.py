"""Plain-text rendering of the subscriptions report and the event log."""

from collections.abc import Iterable
from typing import Optional

from .models import LogEntry, SubscriptionInfo


def format_subscriptions_report(
    rows: Iterable[SubscriptionInfo],
    topics: Optional[Iterable[str]] = None
) -> str:
    """
    Render subscriptions grouped by topic.

    Topics listed in topics but without rows are shown with a
    "no subscribers" line.

    Example:
        Subscriptions report
        Topic: AAPL
          Amir | no filter | notifications: 3
        Topic: MSFT
          no subscribers
    """
    grouped: dict[str, list[SubscriptionInfo]] = {}
    for topic in topics or ():
        grouped.setdefault(topic, [])
    for row in rows:
        grouped.setdefault(row.topic, []).append(row)

    lines = ["Subscriptions report"]
    if not grouped:
        lines.append("No subscriptions.")

    for topic, topic_rows in grouped.items():
        lines.append(f"Topic: {topic}")
        if not topic_rows:
            lines.append("  no subscribers")

        for row in topic_rows:
            line = f"  {row.subscriber} | {row.filter} | notifications: {row.delivery_count}"
            if row.failure_count:
                line += f" | failures: {row.failure_count}"
            lines.append(line)

    return "\n".join(lines)


def format_event_log(entries: Iterable[LogEntry], time_format: str = "%H:%M:%S") -> str:
    """Render the event log one '[HH:MM:SS] text' line per entry."""
    lines = ["Event log"]
    rendered = [entry.format(time_format) for entry in entries]
    lines.extend(rendered or ["Log is empty."])
    return "\n".join(lines)
