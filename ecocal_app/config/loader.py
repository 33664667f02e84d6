"""Configuration loader with layered parameter precedence."""

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import yaml

from ..errors import ConfigurationError
from .defaults import (
    ClientParams,
    DefaultConfig,
    LoggingParams,
    OriginParams,
    ProjectionParams,
    RetryParams,
    SharedCacheParams,
    get_default_config,
)
from .validation import ConfigValidator

CONFIG_FILENAME = "ecocal.yaml"

# Environment variable -> (section, field)
ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "FRED_API_KEY": ("origin", "api_key"),
    "KV_REST_API_URL": ("shared_cache", "rest_url"),
    "KV_REST_API_TOKEN": ("shared_cache", "rest_token"),
    "ECOCAL_SHARED_CACHE_BACKEND": ("shared_cache", "backend"),
    "ECOCAL_ENDPOINT_URL": ("client", "endpoint_url"),
    "ECOCAL_CLIENT_STORE": ("client", "store_path"),
    "ECOCAL_LOG_LEVEL": ("logging", "level"),
}

_SECTIONS = {
    "projection": ProjectionParams,
    "origin": OriginParams,
    "retry": RetryParams,
    "shared_cache": SharedCacheParams,
    "client": ClientParams,
    "logging": LoggingParams,
}


@dataclass(frozen=True)
class ConfigLoader:
    """Manages configuration loading with layered precedence."""

    config_dir: Path
    defaults: DefaultConfig

    @classmethod
    def create(cls, config_dir: Optional[Path] = None) -> "ConfigLoader":
        """Create a ConfigLoader instance."""
        if config_dir is None:
            config_dir = Path(__file__).parent.parent.parent / "config"

        return cls(
            config_dir=Path(config_dir),
            defaults=get_default_config(),
        )

    def load_file_config(self) -> dict[str, Any]:
        """Load overrides from the YAML config file, if present."""
        config_file = self.config_dir / CONFIG_FILENAME

        if not config_file.exists():
            return {}

        with open(config_file) as f:
            file_config = yaml.safe_load(f) or {}

        if not isinstance(file_config, dict):
            raise ConfigurationError(
                f"{config_file} must contain a mapping at the top level",
                setting=str(config_file)
            )
        return file_config

    def load_env_config(self, environ: Optional[Mapping[str, str]] = None) -> dict[str, Any]:
        """Collect overrides from environment variables."""
        if environ is None:
            environ = os.environ

        config: dict[str, Any] = {}
        for var, (section, field_name) in ENV_OVERRIDES.items():
            value = environ.get(var)
            if value:
                config.setdefault(section, {})[field_name] = value
        return config

    def merge_config(
        self,
        overrides: Optional[dict[str, Any]] = None,
        environ: Optional[Mapping[str, str]] = None
    ) -> dict[str, Any]:
        """
        Merge configuration with layered precedence.

        Priority order:
        1. Explicit overrides (highest priority)
        2. Environment variables
        3. YAML config file
        4. Global defaults (lowest priority)
        """
        config = self._dataclass_to_dict(self.defaults)
        config = self._deep_merge(config, self.load_file_config())
        config = self._deep_merge(config, self.load_env_config(environ))

        if overrides:
            config = self._deep_merge(config, overrides)

        return config

    def load(
        self,
        overrides: Optional[dict[str, Any]] = None,
        environ: Optional[Mapping[str, str]] = None
    ) -> DefaultConfig:
        """
        Merge all layers, validate and build the typed configuration.

        Raises:
            ConfigurationError: if any merged value fails validation
        """
        config = self.merge_config(overrides, environ)

        errors = ConfigValidator.validate_full_config(config)
        if errors:
            raise ConfigurationError(
                "; ".join(f"{e.field}: {e.message} (got {e.value!r})" for e in errors),
                setting=errors[0].field
            )

        return build_config(config)

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


def build_config(config: dict[str, Any]) -> DefaultConfig:
    """
    Build a typed DefaultConfig from a merged configuration dictionary.

    Raises:
        ConfigurationError: on unknown sections or fields
    """
    sections = {}
    for name, params_cls in _SECTIONS.items():
        raw = config.get(name) or {}
        if not isinstance(raw, dict):
            raise ConfigurationError(f"Section '{name}' must be a mapping", setting=name)
        values = dict(raw)
        unknown = set(values) - set(params_cls.__dataclass_fields__)
        if unknown:
            raise ConfigurationError(
                f"Unknown settings in '{name}': {', '.join(sorted(unknown))}",
                setting=name
            )
        if "missing_markers" in values:
            values["missing_markers"] = tuple(values["missing_markers"])
        sections[name] = params_cls(**values)

    unknown_sections = set(config) - set(_SECTIONS)
    if unknown_sections:
        raise ConfigurationError(
            f"Unknown configuration sections: {', '.join(sorted(unknown_sections))}"
        )

    return DefaultConfig(**sections)
