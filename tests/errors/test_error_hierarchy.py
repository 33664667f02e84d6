"""Tests for the error classification hierarchy."""

import pytest

from ecocal_app.errors import (
    CacheReadError,
    ConfigurationError,
    DataQualityError,
    GracefulDegradationError,
    MalformedDataError,
    MissingDataError,
    OriginFetchError,
    OriginPermanentError,
    OriginRetryableError,
    PersistenceError,
    RecoverableError,
    SharedCacheError,
    StateTransitionError,
    SystemFailureError,
    UnrecoverableError,
)


class TestDataQualityErrors:
    """Test data quality errors."""

    def test_missing_data(self):
        error = MissingDataError("no indicator", data_type="indicator", context={"id": "GONE"})

        assert isinstance(error, DataQualityError)
        assert error.recoverable
        assert error.data_type == "indicator"
        assert error.context == {"id": "GONE"}

    def test_malformed_data(self):
        error = MalformedDataError("bad", raw_data="n/a", expected_format="decimal string")

        assert error.raw_data == "n/a"
        assert error.expected_format == "decimal string"
        assert str(error) == "bad"


class TestSystemFailures:
    """Test system failure errors."""

    @pytest.mark.parametrize("error", [
        ConfigurationError("missing key", setting="origin.api_key"),
        StateTransitionError("bad move", current_state="idle", attempted_transition="settled"),
        PersistenceError("disk full", operation="save", target="eco_calendar_cache"),
        SharedCacheError("down", operation="get", key="fred_calendar"),
    ])
    def test_not_recoverable(self, error):
        assert isinstance(error, SystemFailureError)
        assert not error.recoverable

    def test_attributes(self):
        error = SharedCacheError("down", operation="set", key="fred_calendar")
        assert (error.operation, error.key) == ("set", "fred_calendar")


class TestOriginErrors:
    """Test origin fetch errors."""

    def test_retryable_and_permanent_share_base(self):
        retryable = OriginRetryableError("429", indicator_id="GDP", status_code=429)
        permanent = OriginPermanentError("400", indicator_id="GDP", status_code=400)

        assert isinstance(retryable, OriginFetchError)
        assert isinstance(permanent, OriginFetchError)
        assert not isinstance(permanent, OriginRetryableError)
        assert retryable.status_code == 429


class TestRecoveryCategories:
    """Test recovery mixins."""

    def test_cache_read_error_is_recoverable(self):
        error = CacheReadError("unreachable", url="http://cache.test/api/fred")

        assert isinstance(error, RecoverableError)
        assert error.recoverable
        assert error.url == "http://cache.test/api/fred"

    def test_configuration_error_is_unrecoverable(self):
        error = ConfigurationError("FRED_API_KEY is not set", setting="origin.api_key")

        assert isinstance(error, UnrecoverableError)
        assert isinstance(error, SystemFailureError)
        assert not error.recoverable

    def test_persistence_error_degrades(self):
        """Test a store failure keeps the view and drops reload persistence."""
        error = PersistenceError("disk full", operation="save", target="eco_calendar_cache")

        assert isinstance(error, GracefulDegradationError)
        assert error.allows_degradation
        assert error.degraded_functionality == "persisted client cache"
        assert error.fallback_strategy == "keep_in_memory_view"
        assert not error.recoverable

    def test_graceful_degradation(self):
        error = GracefulDegradationError(
            "showing cache",
            degraded_functionality="live refresh",
            fallback_strategy="client_cache"
        )
        assert error.allows_degradation
        assert error.fallback_strategy == "client_cache"
