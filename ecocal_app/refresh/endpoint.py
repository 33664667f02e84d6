"""
Request-triggered read of the shared observation snapshot.

Serves whatever the refresher last wrote. When the shared cache is empty
(cold start) it performs the same fan-out fetch synchronously, writes the
result through and serves it. Repeated concurrent cold starts are safe: each
computes a full snapshot from the same origin and the last write wins.
"""

from datetime import datetime
from typing import Any, Callable, Optional, Sequence

from ..cache.policy import MergeIfBetter
from ..cache.shared import SharedCache
from ..errors import MalformedDataError
from ..events.models import ObservationSnapshot
from ..logging.config import get_refresh_logger, log_fallback_decision
from ..origin.base import OriginFetcher
from ..schedule.indicators import INDICATOR_IDS
from ..utils.time import format_iso, utc_now
from .background import DEFAULT_CACHE_KEY, build_snapshot

logger = get_refresh_logger(__name__)


def format_observation_value(value: float) -> str:
    """Render a value without a trailing ``.0`` for integral numbers."""
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def observations_envelope(snapshot: ObservationSnapshot, indicator_id: str) -> dict[str, Any]:
    """
    Wrap one indicator's pair in the provider-shaped observations envelope.

    Observations are ordered newest first and omit unknown values, so the
    list holds between zero and two entries.
    """
    pair = snapshot.get(indicator_id)
    observations = [
        {"value": format_observation_value(value)}
        for value in (pair.actual, pair.prior)
        if value is not None
    ]
    return {
        "observations": observations,
        "cachedAt": format_iso(snapshot.cached_at),
    }


class CacheReadEndpoint:
    """Reads the shared snapshot, populating it on cold start."""

    def __init__(
        self,
        shared_cache: SharedCache,
        fetcher: OriginFetcher,
        cache_key: str = DEFAULT_CACHE_KEY,
        indicator_ids: Sequence[str] = INDICATOR_IDS,
        max_workers: int = 12,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self.shared_cache = shared_cache
        self.fetcher = fetcher
        self.cache_key = cache_key
        self.indicator_ids = tuple(indicator_ids)
        self.max_workers = max_workers
        self.clock = clock or utc_now
        self.policy: MergeIfBetter[ObservationSnapshot] = MergeIfBetter()
        self.logger = logger

    def _load_cached(self) -> Optional[ObservationSnapshot]:
        raw = self.shared_cache.get(self.cache_key)
        if not raw:
            return None
        try:
            return ObservationSnapshot.from_json(raw)
        except MalformedDataError as e:
            self.logger.warning(
                "Shared snapshot unreadable, treating as cold start",
                cache_key=self.cache_key,
                error=str(e)
            )
            return None

    def _cold_start(self) -> ObservationSnapshot:
        snapshot, failed = build_snapshot(
            self.fetcher, self.indicator_ids, self.max_workers, self.clock
        )

        decision = self.policy.merge(None, snapshot)
        log_fallback_decision(
            self.logger,
            tier="cold_start",
            replaced=decision.replaced,
            reason=decision.reason,
            context={"cache_key": self.cache_key, "failed": failed}
        )

        if decision.replaced:
            self.shared_cache.set(self.cache_key, snapshot.to_json())
        return snapshot

    def read(self) -> ObservationSnapshot:
        """
        Return the current snapshot, cold-starting the shared cache if needed.

        Raises:
            SharedCacheError: if the shared cache cannot be read or written
        """
        snapshot = self._load_cached()
        if snapshot is not None:
            return snapshot

        self.logger.info("Shared cache empty, performing cold-start fetch", cache_key=self.cache_key)
        return self._cold_start()

    def handle(self, indicator_id: Optional[str] = None) -> dict[str, Any]:
        """
        Build the response body for a read request.

        Args:
            indicator_id: Optional indicator for the single-series
                compatibility envelope

        Returns:
            ``{"observationMap", "cachedAt"}``, or the observations envelope
            when a known indicator id is given
        """
        snapshot = self.read()

        if indicator_id and indicator_id in snapshot.observation_map:
            return observations_envelope(snapshot, indicator_id)

        return snapshot.to_payload()
