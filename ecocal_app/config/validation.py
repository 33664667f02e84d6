"""Configuration validation utilities."""

from dataclasses import dataclass
from typing import Any
from urllib.parse import urlparse

SHARED_CACHE_BACKENDS = ("memory", "upstash")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class ValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def _is_url(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    parsed = urlparse(value)
    return bool(parsed.scheme and parsed.netloc)


class ConfigValidator:
    """Validates configuration parameters."""

    @staticmethod
    def validate_projection_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate release window parameters."""
        errors = []

        for name in ("lookback_days", "horizon_days"):
            if name in params:
                value = params[name]
                if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                    errors.append(ValidationError(
                        field=name,
                        message="Must be a non-negative integer",
                        value=value
                    ))

        if "month_span" in params:
            value = params["month_span"]
            if not _is_positive_int(value):
                errors.append(ValidationError(
                    field="month_span",
                    message="Must be a positive integer",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_origin_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate origin provider parameters."""
        errors = []

        if "base_url" in params and not _is_url(params["base_url"]):
            errors.append(ValidationError(
                field="base_url",
                message="Must be an absolute URL",
                value=params["base_url"]
            ))

        if "observation_limit" in params:
            value = params["observation_limit"]
            if not isinstance(value, int) or isinstance(value, bool) or value < 2:
                errors.append(ValidationError(
                    field="observation_limit",
                    message="Must be an integer of at least 2",
                    value=value
                ))

        for name in ("timeout_seconds", "max_workers"):
            if name in params and not _is_positive_int(params[name]):
                errors.append(ValidationError(
                    field=name,
                    message="Must be a positive integer",
                    value=params[name]
                ))

        return errors

    @staticmethod
    def validate_retry_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate backoff parameters."""
        errors = []

        if "max_retries" in params:
            value = params["max_retries"]
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                errors.append(ValidationError(
                    field="max_retries",
                    message="Must be a non-negative integer",
                    value=value
                ))

        for name in ("base_delay_seconds", "max_delay_seconds"):
            if name in params:
                value = params[name]
                if not isinstance(value, (int, float)) or value < 0:
                    errors.append(ValidationError(
                        field=name,
                        message="Must be a non-negative number",
                        value=value
                    ))

        base = params.get("base_delay_seconds")
        cap = params.get("max_delay_seconds")
        if isinstance(base, (int, float)) and isinstance(cap, (int, float)) and cap < base:
            errors.append(ValidationError(
                field="max_delay_seconds",
                message="Must not be smaller than base_delay_seconds",
                value=cap
            ))

        return errors

    @staticmethod
    def validate_shared_cache_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate shared cache parameters."""
        errors = []

        backend = params.get("backend", "memory")
        if backend not in SHARED_CACHE_BACKENDS:
            errors.append(ValidationError(
                field="backend",
                message=f"Must be one of {', '.join(SHARED_CACHE_BACKENDS)}",
                value=backend
            ))

        if backend == "upstash":
            if not _is_url(params.get("rest_url")):
                errors.append(ValidationError(
                    field="rest_url",
                    message="Required absolute URL for the upstash backend",
                    value=params.get("rest_url")
                ))
            if not params.get("rest_token"):
                errors.append(ValidationError(
                    field="rest_token",
                    message="Required for the upstash backend",
                    value=params.get("rest_token")
                ))

        if "key" in params and not params["key"]:
            errors.append(ValidationError(
                field="key",
                message="Must be a non-empty string",
                value=params["key"]
            ))

        return errors

    @staticmethod
    def validate_client_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate client controller parameters."""
        errors = []

        if "endpoint_url" in params and not _is_url(params["endpoint_url"]):
            errors.append(ValidationError(
                field="endpoint_url",
                message="Must be an absolute URL",
                value=params["endpoint_url"]
            ))

        for name in ("request_timeout_seconds", "refresh_interval_seconds"):
            if name in params and not _is_positive_int(params[name]):
                errors.append(ValidationError(
                    field=name,
                    message="Must be a positive integer",
                    value=params[name]
                ))

        if "cache_key" in params and not params["cache_key"]:
            errors.append(ValidationError(
                field="cache_key",
                message="Must be a non-empty string",
                value=params["cache_key"]
            ))

        return errors

    @staticmethod
    def validate_logging_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate logging parameters."""
        errors = []

        level = params.get("level", "INFO")
        if not isinstance(level, str) or level.upper() not in LOG_LEVELS:
            errors.append(ValidationError(
                field="level",
                message=f"Must be one of {', '.join(LOG_LEVELS)}",
                value=level
            ))

        return errors

    @classmethod
    def validate_full_config(cls, config: dict[str, Any]) -> list[ValidationError]:
        """Validate a complete merged configuration."""
        errors = []

        sections = {
            "projection": cls.validate_projection_params,
            "origin": cls.validate_origin_params,
            "retry": cls.validate_retry_params,
            "shared_cache": cls.validate_shared_cache_params,
            "client": cls.validate_client_params,
            "logging": cls.validate_logging_params,
        }

        for section, validator in sections.items():
            if isinstance(config.get(section), dict):
                for error in validator(config[section]):
                    errors.append(ValidationError(
                        field=f"{section}.{error.field}",
                        message=error.message,
                        value=error.value
                    ))

        return errors
