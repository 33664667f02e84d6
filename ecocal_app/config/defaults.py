"""Default configuration parameters for the economic calendar service."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ProjectionParams:
    """Release schedule window parameters."""
    lookback_days: int = 7                  # Past events kept in the window
    horizon_days: int = 21                  # Future events kept in the window
    month_span: int = 3                     # Current month plus the next two


@dataclass(frozen=True)
class OriginParams:
    """Upstream observations provider parameters."""
    base_url: str = "https://api.stlouisfed.org/fred/series/observations"
    api_key: Optional[str] = None
    observation_limit: int = 3
    timeout_seconds: int = 10
    missing_markers: tuple[str, ...] = (".", "")
    max_workers: int = 12


@dataclass(frozen=True)
class RetryParams:
    """Backoff applied to rate-limited origin calls."""
    max_retries: int = 3
    base_delay_seconds: float = 0.5
    max_delay_seconds: float = 8.0


@dataclass(frozen=True)
class SharedCacheParams:
    """Shared remote cache parameters."""
    backend: str = "memory"                 # memory, upstash
    rest_url: Optional[str] = None
    rest_token: Optional[str] = None
    key: str = "fred_calendar"
    timeout_seconds: int = 10


@dataclass(frozen=True)
class ClientParams:
    """Client freshness controller parameters."""
    endpoint_url: str = "http://localhost:8000/api/fred"
    request_timeout_seconds: int = 15
    refresh_interval_seconds: int = 3600
    store_path: str = "ecocal_client.db"
    cache_key: str = "eco_calendar_cache"
    per_indicator_fallback: bool = True


@dataclass(frozen=True)
class LoggingParams:
    """Logging output parameters."""
    level: str = "INFO"
    format_json: bool = False


@dataclass(frozen=True)
class DefaultConfig:
    """Complete default configuration."""
    projection: ProjectionParams
    origin: OriginParams
    retry: RetryParams
    shared_cache: SharedCacheParams
    client: ClientParams
    logging: LoggingParams


def get_default_config() -> DefaultConfig:
    """Get the default configuration instance."""
    return DefaultConfig(
        projection=ProjectionParams(),
        origin=OriginParams(),
        retry=RetryParams(),
        shared_cache=SharedCacheParams(),
        client=ClientParams(),
        logging=LoggingParams(),
    )
