"""
Recovery categories for the fallback chain.

Each failure type mixes in one of these to say how callers react to it:
retry or fall back to the next cache tier, stop, or keep going with one
feature switched off.
"""

from typing import Optional


class RecoverableError(Exception):
    """The next cache tier or a later tick can serve the data instead."""

    def __init__(self, message: str, retry_count: int = 0,
                 max_retries: int = 3, **kwargs):
        super().__init__(message)
        self.retry_count = retry_count
        self.max_retries = max_retries
        self.recoverable = True


class UnrecoverableError(Exception):
    """No tier can compensate; the component cannot start or continue."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message)
        self.recoverable = False


class GracefulDegradationError(Exception):
    """The view stays usable but one feature is lost until the fault clears."""

    degraded_functionality: Optional[str] = None
    fallback_strategy: Optional[str] = None

    def __init__(self, message: str, degraded_functionality: Optional[str] = None,
                 fallback_strategy: Optional[str] = None, **kwargs):
        super().__init__(message)
        if degraded_functionality is not None:
            self.degraded_functionality = degraded_functionality
        if fallback_strategy is not None:
            self.fallback_strategy = fallback_strategy
        self.allows_degradation = True
