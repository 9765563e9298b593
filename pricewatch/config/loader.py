"""Configuration loader with 3-tier parameter precedence."""

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Optional

import yaml

from ..errors import ConfigurationError
from .defaults import (
    DispatchParams,
    EventLogParams,
    ExchangeConfig,
    LoggingParams,
    get_default_config,
)
from .validation import ConfigValidator, ValidationError

CONFIG_FILE_NAME = "exchange.yaml"

_SECTIONS = {
    "dispatch": DispatchParams,
    "event_log": EventLogParams,
    "logging": LoggingParams,
}


@dataclass(frozen=True)
class ConfigLoader:
    """Manages configuration loading with 3-tier precedence."""

    config_dir: Path
    defaults: ExchangeConfig

    @classmethod
    def create(cls, config_dir: Optional[Path] = None) -> "ConfigLoader":
        """Create a ConfigLoader instance."""
        if config_dir is None:
            config_dir = Path(__file__).parent.parent.parent / "config"

        return cls(
            config_dir=Path(config_dir),
            defaults=get_default_config(),
        )

    def load_file(self) -> dict[str, Any]:
        """Load overrides from exchange.yaml, if present."""
        config_file = self.config_dir / CONFIG_FILE_NAME

        if not config_file.exists():
            return {}

        with open(config_file) as f:
            file_config = yaml.safe_load(f)

        if file_config is None:
            return {}

        if not isinstance(file_config, dict):
            raise ConfigurationError(
                f"{config_file} must contain a mapping",
                context={"path": str(config_file)}
            )

        return file_config

    def merge_config(self, overrides: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        """
        Merge configuration with 3-tier precedence.

        Priority order:
        1. Explicit overrides (highest priority)
        2. exchange.yaml in the config directory
        3. Global defaults (lowest priority)
        """
        config = self._dataclass_to_dict(self.defaults)

        config = self._deep_merge(config, self.load_file())

        if overrides:
            config = self._deep_merge(config, overrides)

        return config

    def load(self, overrides: Optional[dict[str, Any]] = None) -> ExchangeConfig:
        """Merge, validate and build an ExchangeConfig."""
        merged = self.merge_config(overrides)

        errors = ConfigValidator.validate_config(merged)
        errors.extend(self._unknown_keys(merged))
        if errors:
            error_msgs = [f"{err.field}: {err.message} (got: {err.value})" for err in errors]
            raise ConfigurationError(
                "Invalid exchange configuration: " + "; ".join(error_msgs),
                errors=errors
            )

        return ExchangeConfig(**{
            section: params_cls(**merged[section])
            for section, params_cls in _SECTIONS.items()
        })

    def _unknown_keys(self, config: dict[str, Any]) -> list[ValidationError]:
        errors = []
        for key, value in config.items():
            params_cls = _SECTIONS.get(key)
            if params_cls is None:
                errors.append(ValidationError(field=key, message="Unknown section", value=value))
                continue
            if not isinstance(value, dict):
                errors.append(ValidationError(field=key, message="Must be a mapping", value=value))
                continue
            known = {f.name for f in fields(params_cls)}
            for name in value:
                if name not in known:
                    errors.append(ValidationError(
                        field=f"{key}.{name}",
                        message="Unknown parameter",
                        value=value[name]
                    ))
        return errors

    def _dataclass_to_dict(self, obj: Any) -> dict[str, Any]:
        """Convert nested dataclasses to dictionary."""
        if hasattr(obj, '__dataclass_fields__'):
            result = {}
            for field_name in obj.__dataclass_fields__:
                value = getattr(obj, field_name)
                if hasattr(value, '__dataclass_fields__'):
                    result[field_name] = self._dataclass_to_dict(value)
                else:
                    result[field_name] = value
            return result
        return obj  # type: ignore[no-any-return]

    def _deep_merge(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """Deep merge two dictionaries."""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value

        return result
