"""
Centralized logging configuration for the pricewatch engine.

All components log through structlog. The exchange's own event log is the
ordered audit record; these loggers mirror it for operators and add
structured context (topic, subscriber, status) to every line.
"""
import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import FilteringBoundLogger


def configure_logging(
    level: str = "INFO",
    format_json: bool = False,
    include_timestamp: bool = True,
    include_caller: bool = False,
    extra_processors: Optional[list] = None
) -> None:
    """
    Configure structlog for the entire application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_json: If True, output JSON format; otherwise human-readable
        include_timestamp: Include timestamp in log output
        include_caller: Include caller information (filename, line number)
        extra_processors: Additional structlog processors to include
    """
    log_level = getattr(logging, level.upper())

    logging.basicConfig(
        level=log_level,
        stream=sys.stdout,
        format="%(message)s"  # structlog will handle formatting
    )

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))

    if include_caller:
        processors.append(structlog.processors.CallsiteParameterAdder(
            parameters=[structlog.processors.CallsiteParameter.FILENAME,
                        structlog.processors.CallsiteParameter.LINENO,
                        structlog.processors.CallsiteParameter.THREAD_NAME]
        ))

    if extra_processors:
        processors.extend(extra_processors)

    if format_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    """
    Get a configured structlog logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger instance
    """
    return structlog.get_logger(name)


def get_audit_logger(name: str) -> FilteringBoundLogger:
    """
    Get a logger that mirrors event log entries.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger bound to the event log subsystem
    """
    logger = get_logger(name)

    return logger.bind(
        subsystem="event_log",
        audit_trail=True
    )


def log_delivery(
    logger: FilteringBoundLogger,
    subscriber: str,
    topic: str,
    status: str,
    delivery_time_ms: Optional[int] = None,
    error: Optional[str] = None,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log the outcome of one subscriber notification with standardized format.

    Args:
        logger: Structlog logger instance
        subscriber: Subscriber display name
        topic: Normalized topic
        status: Delivery status value
        delivery_time_ms: Time spent in the subscriber, if known
        error: Error description for failed deliveries
        context: Additional context data
    """
    bound_logger = logger.bind(
        subscriber=subscriber,
        topic=topic,
        delivery_status=status,
        delivery_time_ms=delivery_time_ms,
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    if error is None:
        bound_logger.info("Subscriber notified")
    else:
        bound_logger.warning("Subscriber notification failed", error=error)
