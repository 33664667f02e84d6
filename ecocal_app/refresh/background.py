"""
Scheduled background refresh of the shared observation snapshot.

The external scheduler invokes ``run()`` on a fixed cadence. This is the only
scheduled writer of the shared cache key; each run overwrites the previous
snapshot wholesale.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional, Sequence

from ..cache.shared import SharedCache
from ..events.models import ObservationSnapshot
from ..logging.config import get_refresh_logger
from ..origin.base import OriginFetcher
from ..origin.fanout import fetch_all
from ..schedule.indicators import INDICATOR_IDS
from ..utils.time import format_iso, utc_now

logger = get_refresh_logger(__name__)

DEFAULT_CACHE_KEY = "fred_calendar"


@dataclass(frozen=True)
class RefreshReport:
    """Summary of one refresh run."""
    cached_at: datetime
    indicator_count: int
    failed_indicators: list[str] = field(default_factory=list)

    @property
    def populated_count(self) -> int:
        return self.indicator_count - len(self.failed_indicators)


def build_snapshot(
    fetcher: OriginFetcher,
    indicator_ids: Sequence[str],
    max_workers: int,
    clock: Callable[[], datetime] = utc_now
) -> tuple[ObservationSnapshot, list[str]]:
    """
    Fetch every indicator and assemble a snapshot stamped with the clock.

    Returns:
        (snapshot, failed indicator ids)
    """
    batch = fetch_all(fetcher, indicator_ids, max_workers=max_workers)
    snapshot = ObservationSnapshot(observation_map=batch.observations, cached_at=clock())
    return snapshot, batch.failed


class BackgroundRefresher:
    """Fetches all indicators and writes one snapshot to the shared cache."""

    def __init__(
        self,
        fetcher: OriginFetcher,
        shared_cache: SharedCache,
        cache_key: str = DEFAULT_CACHE_KEY,
        indicator_ids: Sequence[str] = INDICATOR_IDS,
        max_workers: int = 12,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self.fetcher = fetcher
        self.shared_cache = shared_cache
        self.cache_key = cache_key
        self.indicator_ids = tuple(indicator_ids)
        self.max_workers = max_workers
        self.clock = clock or utc_now
        self.logger = logger

    def run(self) -> RefreshReport:
        """
        Refresh the shared snapshot.

        Per-indicator failures leave a null pair in that slot. A failure to
        write the shared cache propagates to the scheduler.

        Returns:
            RefreshReport describing the run

        Raises:
            SharedCacheError: if the snapshot cannot be written
        """
        snapshot, failed = build_snapshot(
            self.fetcher, self.indicator_ids, self.max_workers, self.clock
        )

        self.shared_cache.set(self.cache_key, snapshot.to_json())

        self.logger.info(
            "Shared snapshot refreshed",
            cache_key=self.cache_key,
            cached_at=format_iso(snapshot.cached_at),
            indicators=len(snapshot.observation_map),
            failed=failed
        )

        return RefreshReport(
            cached_at=snapshot.cached_at,
            indicator_count=len(snapshot.observation_map),
            failed_indicators=list(failed),
        )
