"""
System failure error classifications.

Origin, shared-cache, client-store and configuration failures. Origin and
cache-read failures are recovered by the fallback chain; configuration
failures are fatal for the component that raised them.
"""

from typing import Any, Optional

from .recovery import GracefulDegradationError, RecoverableError, UnrecoverableError


class SystemFailureError(Exception):
    """Base class for system-level failures."""

    def __init__(self, message: str, context: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = False


class ConfigurationError(SystemFailureError, UnrecoverableError):
    """Required configuration is missing or invalid. Never retried."""

    def __init__(self, message: str, setting: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.setting = setting


class StateTransitionError(SystemFailureError):
    """Invalid controller state transition."""

    def __init__(self, message: str, current_state: Optional[str] = None,
                 attempted_transition: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.current_state = current_state
        self.attempted_transition = attempted_transition


class PersistenceError(SystemFailureError, GracefulDegradationError):
    """Client-local store read or write failure."""

    degraded_functionality = "persisted client cache"
    fallback_strategy = "keep_in_memory_view"

    def __init__(self, message: str, operation: Optional[str] = None,
                 target: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.operation = operation
        self.target = target


class SharedCacheError(SystemFailureError):
    """Shared remote key/value store failure."""

    def __init__(self, message: str, operation: Optional[str] = None,
                 key: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.operation = operation
        self.key = key


class OriginFetchError(Exception):
    """Base exception for upstream provider fetch errors."""

    def __init__(self, message: str, indicator_id: Optional[str] = None,
                 status_code: Optional[int] = None):
        super().__init__(message)
        self.indicator_id = indicator_id
        self.status_code = status_code


class OriginRetryableError(OriginFetchError):
    """Rate limits, server errors and network failures."""
    pass


class OriginPermanentError(OriginFetchError):
    """Client errors that should not be retried."""
    pass


class CacheReadError(RecoverableError):
    """Transport failure reading the cache endpoint."""

    def __init__(self, message: str, url: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.url = url
