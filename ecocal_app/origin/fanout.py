"""
Concurrent per-indicator fetch with failure isolation.

Shared by the scheduled refresher and the endpoint's cold-start path. Every
requested indicator gets a slot in the result: a fetch that raises leaves a
null pair in its slot and never fails the batch.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Optional, Sequence

import structlog

from ..events.models import ObservationPair
from .base import OriginFetcher

logger = structlog.get_logger(__name__)


@dataclass
class FetchBatch:
    """Observation map keyed by indicator id, plus the ids whose fetch raised."""
    observations: dict[str, ObservationPair] = field(default_factory=dict)
    failed: list[str] = field(default_factory=list)


def _fetch_one(fetcher: OriginFetcher, indicator_id: str) -> tuple[ObservationPair, Optional[Exception]]:
    try:
        return fetcher.fetch(indicator_id), None
    except Exception as e:
        return ObservationPair.empty(), e


def fetch_all(
    fetcher: OriginFetcher,
    indicator_ids: Sequence[str],
    max_workers: int = 12
) -> FetchBatch:
    """
    Fetch every indicator concurrently.

    Args:
        fetcher: Origin fetcher (usually wrapped in retry/backoff)
        indicator_ids: Indicators to fetch
        max_workers: Upper bound on concurrent requests

    Returns:
        FetchBatch whose observations follow the requested order
    """
    if not indicator_ids:
        return FetchBatch()

    workers = max(1, min(max_workers, len(indicator_ids)))
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="origin-fetch") as pool:
        futures = [(indicator_id, pool.submit(_fetch_one, fetcher, indicator_id))
                   for indicator_id in indicator_ids]
        outcomes = [(indicator_id, future.result()) for indicator_id, future in futures]

    result = FetchBatch()
    for indicator_id, (pair, error) in outcomes:
        result.observations[indicator_id] = pair
        if error is not None:
            result.failed.append(indicator_id)
            logger.warning(
                "Skipping indicator after fetch failure",
                indicator_id=indicator_id,
                error_type=type(error).__name__,
                error=str(error)
            )

    logger.info(
        "Origin batch fetched",
        requested=len(indicator_ids),
        failed=len(result.failed),
        populated=sum(1 for pair in result.observations.values() if not pair.is_empty)
    )
    return result
