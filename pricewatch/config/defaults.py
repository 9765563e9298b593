"""Default configuration parameters for the price notification engine."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class DispatchParams:
    """Fan-out worker pool parameters."""
    max_workers: int = 8                             # Concurrent notifications
    notify_timeout_seconds: Optional[float] = 5.0    # None waits forever
    simulated_latency_ms: int = 0                    # Delay before each notification
    thread_name_prefix: str = "pricewatch-notify"


@dataclass(frozen=True)
class EventLogParams:
    """Event log parameters."""
    mirror_to_logger: bool = True                    # Echo entries to structlog
    time_format: str = "%H:%M:%S"                    # Rendered log line clock


@dataclass(frozen=True)
class LoggingParams:
    """Structured logging parameters."""
    level: str = "INFO"
    format_json: bool = False
    include_timestamp: bool = True
    include_caller: bool = False


@dataclass(frozen=True)
class ExchangeConfig:
    """Complete exchange configuration."""
    dispatch: DispatchParams
    event_log: EventLogParams
    logging: LoggingParams


def get_default_config() -> ExchangeConfig:
    """Get the default configuration instance."""
    return ExchangeConfig(
        dispatch=DispatchParams(),
        event_log=EventLogParams(),
        logging=LoggingParams(),
    )
