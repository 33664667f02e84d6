"""
Error classification for the economic calendar freshness service.

Exceptions are grouped by how the fallback chain treats them: data quality
issues and origin failures degrade locally, cache-read failures fall back to
the persisted client cache, configuration failures are fatal.
"""

from .data_quality import (
    DataQualityError,
    MissingDataError,
    MalformedDataError,
)
from .system_failures import (
    SystemFailureError,
    ConfigurationError,
    StateTransitionError,
    PersistenceError,
    SharedCacheError,
    OriginFetchError,
    OriginRetryableError,
    OriginPermanentError,
    CacheReadError,
)
from .recovery import (
    RecoverableError,
    UnrecoverableError,
    GracefulDegradationError,
)

__all__ = [
    # Data Quality Errors
    "DataQualityError",
    "MissingDataError",
    "MalformedDataError",
    # System Failures
    "SystemFailureError",
    "ConfigurationError",
    "StateTransitionError",
    "PersistenceError",
    "SharedCacheError",
    # Origin Failures
    "OriginFetchError",
    "OriginRetryableError",
    "OriginPermanentError",
    "CacheReadError",
    # Recovery Categories
    "RecoverableError",
    "UnrecoverableError",
    "GracefulDegradationError",
]
