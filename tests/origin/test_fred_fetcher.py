"""Tests for observation parsing and the FRED fetcher."""

import io
import json
from http.client import IncompleteRead
from unittest.mock import MagicMock, patch
from urllib.error import HTTPError, URLError

import pytest

from ecocal_app.config.defaults import OriginParams
from ecocal_app.errors import (
    ConfigurationError,
    MalformedDataError,
    OriginPermanentError,
    OriginRetryableError,
)
from ecocal_app.events.models import ObservationPair
from ecocal_app.origin.base import pair_from_observations
from ecocal_app.origin.fred import FredOriginFetcher


def _response(payload) -> MagicMock:
    body = payload if isinstance(payload, str) else json.dumps(payload)
    response = MagicMock()
    response.read.return_value = body.encode("utf-8")
    response.__enter__.return_value = response
    return response


def _http_error(code: int) -> HTTPError:
    return HTTPError("https://api.stlouisfed.org", code, "error", {}, io.BytesIO(b""))


class TestPairFromObservations:
    """Test parsing provider observations."""

    def test_newest_two(self):
        """Test the newest value becomes actual, the next one prior."""
        pair = pair_from_observations([{"value": "3.1"}, {"value": "3.0"}, {"value": "2.9"}])
        assert pair == ObservationPair(actual=3.1, prior=3.0)

    def test_missing_markers_are_skipped(self):
        """Test '.' placeholders are dropped before parsing."""
        pair = pair_from_observations([{"value": "."}, {"value": "3.0"}, {"value": "2.9"}])
        assert pair == ObservationPair(actual=3.0, prior=2.9)

    def test_single_value(self):
        pair = pair_from_observations([{"value": "4.33"}])
        assert pair == ObservationPair(actual=4.33, prior=None)

    def test_no_values(self):
        assert pair_from_observations([]).is_empty
        assert pair_from_observations([{"value": "."}, {"value": ""}]).is_empty

    def test_non_numeric(self):
        """Test values that are neither numbers nor markers are rejected."""
        with pytest.raises(MalformedDataError):
            pair_from_observations([{"value": "n/a"}], indicator_id="GDP")


class TestFredOriginFetcher:
    """Test the HTTP fetcher."""

    def setup_method(self):
        self.params = OriginParams(api_key="test-key")
        self.fetcher = FredOriginFetcher(self.params)

    def test_missing_api_key(self):
        """Test construction fails fast without an API key."""
        with pytest.raises(ConfigurationError) as exc_info:
            FredOriginFetcher(OriginParams())
        assert exc_info.value.setting == "origin.api_key"

    def test_invalid_base_url(self):
        with pytest.raises(ConfigurationError):
            FredOriginFetcher(OriginParams(api_key="k", base_url="not a url"))

    def test_build_url(self):
        """Test the query asks for the newest observations first."""
        url = self.fetcher.build_url("CPIAUCSL")

        assert url.startswith("https://api.stlouisfed.org/fred/series/observations?")
        assert "series_id=CPIAUCSL" in url
        assert "api_key=test-key" in url
        assert "sort_order=desc" in url
        assert "limit=3" in url
        assert "file_type=json" in url

    @patch("ecocal_app.origin.fred.urlopen")
    def test_fetch(self, mock_urlopen):
        """Test a successful fetch."""
        mock_urlopen.return_value = _response({"observations": [{"value": "3.1"}, {"value": "."}, {"value": "3.0"}]})

        pair = self.fetcher.fetch("CPIAUCSL")

        assert pair == ObservationPair(actual=3.1, prior=3.0)
        assert self.fetcher.get_stats()["fetch_count"] == 1
        assert self.fetcher.get_stats()["error_count"] == 0

    @patch("ecocal_app.origin.fred.urlopen")
    def test_missing_observations_key(self, mock_urlopen):
        """Test a body without observations yields a null pair."""
        mock_urlopen.return_value = _response({"error_message": "none"})
        assert self.fetcher.fetch("GDP").is_empty

    @pytest.mark.parametrize("code", [429, 500, 503])
    @patch("ecocal_app.origin.fred.urlopen")
    def test_retryable_status(self, mock_urlopen, code):
        """Test rate limits and server errors are retryable."""
        mock_urlopen.side_effect = _http_error(code)

        with pytest.raises(OriginRetryableError) as exc_info:
            self.fetcher.fetch("GDP")

        assert exc_info.value.status_code == code
        assert exc_info.value.indicator_id == "GDP"
        assert self.fetcher.get_stats()["error_count"] == 1

    @patch("ecocal_app.origin.fred.urlopen")
    def test_permanent_status(self, mock_urlopen):
        """Test client errors are not retryable."""
        mock_urlopen.side_effect = _http_error(400)

        with pytest.raises(OriginPermanentError):
            self.fetcher.fetch("GDP")

    @patch("ecocal_app.origin.fred.urlopen")
    def test_network_error(self, mock_urlopen):
        mock_urlopen.side_effect = URLError("connection refused")

        with pytest.raises(OriginRetryableError):
            self.fetcher.fetch("GDP")

    @patch("ecocal_app.origin.fred.urlopen")
    def test_invalid_json(self, mock_urlopen):
        mock_urlopen.return_value = _response("<html>")

        with pytest.raises(MalformedDataError):
            self.fetcher.fetch("GDP")

    @patch("ecocal_app.origin.fred.urlopen")
    def test_truncated_response_is_retryable(self, mock_urlopen):
        mock_urlopen.side_effect = IncompleteRead(b'{"observ')

        with pytest.raises(OriginRetryableError):
            self.fetcher.fetch("GDP")

    @patch("ecocal_app.origin.fred.urlopen")
    def test_non_utf8_body(self, mock_urlopen):
        response = MagicMock()
        response.read.return_value = b"\xff\xfe{}"
        response.__enter__.return_value = response
        mock_urlopen.return_value = response

        with pytest.raises(MalformedDataError):
            self.fetcher.fetch("GDP")
