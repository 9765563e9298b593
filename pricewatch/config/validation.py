"""Configuration validation utilities."""

from dataclasses import dataclass
from typing import Any

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class ValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class ConfigValidator:
    """Validates configuration parameters."""

    @staticmethod
    def validate_dispatch_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate fan-out worker pool parameters."""
        errors = []

        if "max_workers" in params:
            value = params["max_workers"]
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                errors.append(ValidationError(
                    field="max_workers",
                    message="Must be a positive integer",
                    value=value
                ))

        # None disables the timeout
        if "notify_timeout_seconds" in params:
            value = params["notify_timeout_seconds"]
            if value is not None and (not _is_number(value) or value <= 0):
                errors.append(ValidationError(
                    field="notify_timeout_seconds",
                    message="Must be a positive number or null",
                    value=value
                ))

        if "simulated_latency_ms" in params:
            value = params["simulated_latency_ms"]
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                errors.append(ValidationError(
                    field="simulated_latency_ms",
                    message="Must be a non-negative integer",
                    value=value
                ))

        if "thread_name_prefix" in params:
            value = params["thread_name_prefix"]
            if not isinstance(value, str) or not value.strip():
                errors.append(ValidationError(
                    field="thread_name_prefix",
                    message="Must be a non-empty string",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_event_log_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate event log parameters."""
        errors = []

        if "mirror_to_logger" in params:
            value = params["mirror_to_logger"]
            if not isinstance(value, bool):
                errors.append(ValidationError(
                    field="mirror_to_logger",
                    message="Must be a boolean",
                    value=value
                ))

        if "time_format" in params:
            value = params["time_format"]
            if not isinstance(value, str) or "%" not in value:
                errors.append(ValidationError(
                    field="time_format",
                    message="Must be a strftime format string",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_logging_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate structured logging parameters."""
        errors = []

        if "level" in params:
            value = params["level"]
            if not isinstance(value, str) or value.upper() not in VALID_LOG_LEVELS:
                errors.append(ValidationError(
                    field="level",
                    message=f"Must be one of {', '.join(VALID_LOG_LEVELS)}",
                    value=value
                ))

        for flag in ("format_json", "include_timestamp", "include_caller"):
            if flag in params and not isinstance(params[flag], bool):
                errors.append(ValidationError(
                    field=flag,
                    message="Must be a boolean",
                    value=params[flag]
                ))

        return errors

    @classmethod
    def validate_config(cls, config: dict[str, Any]) -> list[ValidationError]:
        """Validate a merged configuration dictionary section by section."""
        errors = []
        validators = (
            ("dispatch", cls.validate_dispatch_params),
            ("event_log", cls.validate_event_log_params),
            ("logging", cls.validate_logging_params),
        )
        for section, validate in validators:
            params = config.get(section)
            if isinstance(params, dict):
                errors.extend(validate(params))
        return errors
