"""Base interface for upstream observation fetchers."""

from abc import ABC, abstractmethod
from typing import Any, Iterable

import structlog

from ..errors import MalformedDataError
from ..events.models import ObservationPair

DEFAULT_MISSING_MARKERS = (".", "")


class OriginFetcher(ABC):
    """Fetches the latest two observations for one indicator."""

    def __init__(self, name: str):
        self.name = name
        self.logger = structlog.get_logger(f"origin.{name}")
        self._fetch_count = 0
        self._error_count = 0

    @abstractmethod
    def fetch(self, indicator_id: str) -> ObservationPair:
        """
        Fetch the newest and second-newest released values.

        Args:
            indicator_id: Provider series id

        Returns:
            ObservationPair, newest value as ``actual``

        Raises:
            OriginRetryableError: rate limits, server and network errors
            OriginPermanentError: errors a retry cannot fix
            MalformedDataError: unparseable observation values
        """
        pass

    def get_stats(self) -> dict[str, Any]:
        """Get fetch statistics."""
        return {
            "name": self.name,
            "fetch_count": self._fetch_count,
            "error_count": self._error_count,
        }


def pair_from_observations(
    observations: Iterable[Any],
    missing_markers: Iterable[str] = DEFAULT_MISSING_MARKERS,
    indicator_id: str = ""
) -> ObservationPair:
    """
    Build an ObservationPair from provider observations ordered newest first.

    Values equal to a missing marker are dropped before parsing.

    Raises:
        MalformedDataError: if a remaining value is not numeric
    """
    markers = set(missing_markers)
    values = []
    for obs in observations:
        if not isinstance(obs, dict):
            raise MalformedDataError(
                f"Observation for {indicator_id} is not an object",
                raw_data=repr(obs)[:100]
            )
        raw = obs.get("value")
        if raw is None or str(raw).strip() in markers:
            continue
        try:
            values.append(float(raw))
        except (TypeError, ValueError):
            raise MalformedDataError(
                f"Observation value for {indicator_id} is not numeric",
                raw_data=repr(raw),
                expected_format="decimal string"
            )
        if len(values) == 2:
            break

    return ObservationPair(
        actual=values[0] if values else None,
        prior=values[1] if len(values) > 1 else None,
    )
