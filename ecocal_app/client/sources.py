"""
Sources the client controller reads observation snapshots from.

The primary source asks the cache read endpoint for the whole snapshot. The
per-indicator source uses the endpoint's single-series compatibility mode
and is tried when the whole-snapshot request fails.
"""

import json
import socket
from abc import ABC, abstractmethod
from datetime import datetime
from http.client import HTTPException
from typing import Any, Optional, Sequence
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode, urlparse
from urllib.request import Request, urlopen

import structlog

from ..errors import (
    CacheReadError,
    ConfigurationError,
    DataQualityError,
    SharedCacheError,
    OriginFetchError,
)
from ..events.models import ObservationPair, ObservationSnapshot
from ..origin.base import pair_from_observations
from ..refresh.endpoint import CacheReadEndpoint
from ..schedule.indicators import INDICATOR_IDS
from ..utils.time import parse_iso, utc_now

logger = structlog.get_logger(__name__)


class SnapshotSource(ABC):
    """Provides the current observation snapshot to the client."""

    name: str = "source"

    @abstractmethod
    def fetch_snapshot(self) -> ObservationSnapshot:
        """
        Fetch the current snapshot.

        Raises:
            CacheReadError: on any transport or payload failure
        """
        pass


class HttpSnapshotSource(SnapshotSource):
    """Reads the cache read endpoint over HTTP."""

    name = "http"

    def __init__(self, endpoint_url: str, timeout_seconds: int = 15):
        parsed = urlparse(endpoint_url or "")
        if not parsed.scheme or not parsed.netloc:
            raise ConfigurationError(
                f"Invalid cache endpoint URL: {endpoint_url}",
                setting="client.endpoint_url"
            )
        self.endpoint_url = endpoint_url
        self.timeout_seconds = timeout_seconds

    def _get_json(self, params: Optional[dict[str, str]] = None) -> Any:
        url = self.endpoint_url
        if params:
            url = f"{url}?{urlencode(params)}"

        req = Request(url, headers={'Accept': 'application/json', 'User-Agent': 'ecocal-client/1.0'})

        try:
            with urlopen(req, timeout=self.timeout_seconds) as response:
                return json.loads(response.read().decode('utf-8'))

        except HTTPError as e:
            raise CacheReadError(f"Cache endpoint HTTP {e.code}", url=url)

        except (OSError, URLError, socket.timeout) as e:
            raise CacheReadError(f"Cache endpoint unreachable: {e}", url=url)

        except HTTPException as e:
            raise CacheReadError(f"Cache endpoint sent a broken response: {e!r}", url=url)

        except UnicodeDecodeError as e:
            raise CacheReadError(f"Cache endpoint response is not UTF-8: {e}", url=url)

        except json.JSONDecodeError as e:
            raise CacheReadError(f"Cache endpoint returned invalid JSON: {e}", url=url)

    def fetch_snapshot(self) -> ObservationSnapshot:
        payload = self._get_json()
        try:
            return ObservationSnapshot.from_payload(payload)
        except DataQualityError as e:
            raise CacheReadError(f"Cache endpoint returned a malformed snapshot: {e}", url=self.endpoint_url)

    def fetch_indicator(self, indicator_id: str) -> tuple[ObservationPair, Optional[datetime]]:
        """
        Read one indicator through the single-series compatibility envelope.

        Returns:
            (pair, cachedAt if present)

        Raises:
            CacheReadError: on transport failure or a malformed envelope
        """
        payload = self._get_json({"seriesId": indicator_id})
        if not isinstance(payload, dict) or not isinstance(payload.get("observations"), list):
            raise CacheReadError(
                f"Cache endpoint returned no observations for {indicator_id}",
                url=self.endpoint_url
            )

        try:
            pair = pair_from_observations(payload["observations"], indicator_id=indicator_id)
        except DataQualityError as e:
            raise CacheReadError(str(e), url=self.endpoint_url)

        cached_at = None
        if payload.get("cachedAt"):
            try:
                cached_at = parse_iso(payload["cachedAt"])
            except (TypeError, ValueError):
                cached_at = None
        return pair, cached_at


class PerIndicatorSnapshotSource(SnapshotSource):
    """Assembles a snapshot one indicator at a time."""

    name = "per_indicator"

    def __init__(self, http_source: HttpSnapshotSource, indicator_ids: Sequence[str] = INDICATOR_IDS):
        self.http_source = http_source
        self.indicator_ids = tuple(indicator_ids)

    def fetch_snapshot(self) -> ObservationSnapshot:
        observation_map: dict[str, ObservationPair] = {}
        stamps: list[datetime] = []
        failures = 0

        for indicator_id in self.indicator_ids:
            try:
                pair, cached_at = self.http_source.fetch_indicator(indicator_id)
            except CacheReadError as e:
                failures += 1
                logger.warning("Per-indicator read failed", indicator_id=indicator_id, error=str(e))
                observation_map[indicator_id] = ObservationPair.empty()
                continue
            observation_map[indicator_id] = pair
            if cached_at is not None:
                stamps.append(cached_at)

        if self.indicator_ids and failures == len(self.indicator_ids):
            raise CacheReadError("Every per-indicator read failed", url=self.http_source.endpoint_url)

        return ObservationSnapshot(
            observation_map=observation_map,
            cached_at=min(stamps) if stamps else utc_now(),
        )


class LocalEndpointSource(SnapshotSource):
    """Calls an in-process CacheReadEndpoint, for single-process deployments."""

    name = "local"

    def __init__(self, endpoint: CacheReadEndpoint):
        self.endpoint = endpoint

    def fetch_snapshot(self) -> ObservationSnapshot:
        try:
            return self.endpoint.read()
        except (SharedCacheError, OriginFetchError, DataQualityError) as e:
            raise CacheReadError(f"Local cache read failed: {e}")
