"""FRED observations fetcher over HTTP."""

import json
import socket
from http.client import HTTPException
from typing import Optional
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode, urlparse
from urllib.request import Request, urlopen

from ..config.defaults import OriginParams
from ..errors import (
    ConfigurationError,
    MalformedDataError,
    OriginPermanentError,
    OriginRetryableError,
)
from ..events.models import ObservationPair
from .base import OriginFetcher, pair_from_observations

RETRYABLE_STATUS = {429, 500, 502, 503, 504}


class FredOriginFetcher(OriginFetcher):
    """Fetches the latest observations for a series from the FRED API."""

    def __init__(self, params: OriginParams, name: str = "fred"):
        super().__init__(name)
        self.params = params

        if not params.api_key:
            raise ConfigurationError(
                "FRED_API_KEY is not set; the observations provider cannot be queried",
                setting="origin.api_key"
            )

        parsed = urlparse(params.base_url)
        if not parsed.scheme or not parsed.netloc:
            raise ConfigurationError(f"Invalid origin URL: {params.base_url}", setting="origin.base_url")

    def build_url(self, indicator_id: str) -> str:
        query = urlencode({
            "series_id": indicator_id,
            "api_key": self.params.api_key,
            "file_type": "json",
            "sort_order": "desc",
            "limit": self.params.observation_limit,
        })
        return f"{self.params.base_url}?{query}"

    def fetch(self, indicator_id: str) -> ObservationPair:
        """Fetch the two most recent non-missing observations, newest first."""
        self._fetch_count += 1
        try:
            payload = self._get_json(indicator_id)
        except Exception:
            self._error_count += 1
            raise

        observations = payload.get("observations") if isinstance(payload, dict) else None
        if observations is None:
            observations = []
        if not isinstance(observations, list):
            self._error_count += 1
            raise MalformedDataError(
                f"Provider response for {indicator_id} has no observations list",
                raw_data=repr(payload)[:200]
            )

        return pair_from_observations(
            observations,
            missing_markers=self.params.missing_markers,
            indicator_id=indicator_id
        )

    def _get_json(self, indicator_id: str) -> Optional[dict]:
        req = Request(
            self.build_url(indicator_id),
            headers={
                'Accept': 'application/json',
                'User-Agent': 'ecocal/1.0'
            },
            method='GET'
        )

        try:
            with urlopen(req, timeout=self.params.timeout_seconds) as response:
                body = response.read().decode('utf-8')

        except HTTPError as e:
            self.logger.warning(
                "Origin HTTP error",
                origin=self.name,
                indicator_id=indicator_id,
                error_code=e.code,
                error_reason=str(e.reason)
            )
            if e.code in RETRYABLE_STATUS:
                raise OriginRetryableError(
                    f"{self.name} {indicator_id} HTTP {e.code}",
                    indicator_id=indicator_id,
                    status_code=e.code
                )
            raise OriginPermanentError(
                f"{self.name} {indicator_id} HTTP {e.code}",
                indicator_id=indicator_id,
                status_code=e.code
            )

        except (OSError, URLError, socket.timeout, HTTPException) as e:
            self.logger.warning(
                "Origin network error",
                origin=self.name,
                indicator_id=indicator_id,
                error=str(e)
            )
            raise OriginRetryableError(
                f"{self.name} {indicator_id} network error: {e}",
                indicator_id=indicator_id
            )

        except UnicodeDecodeError as e:
            raise MalformedDataError(
                f"Provider response for {indicator_id} is not UTF-8: {e}",
                expected_format="utf-8 json"
            )

        try:
            return json.loads(body)
        except json.JSONDecodeError as e:
            raise MalformedDataError(
                f"Provider response for {indicator_id} is not JSON: {e}",
                raw_data=body[:200],
                expected_format="json"
            )
