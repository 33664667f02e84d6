"""Pytest configuration and shared fixtures."""

import threading
from datetime import datetime, timezone
from typing import Callable, Optional

import pytest

from ecocal_app.errors import CacheReadError
from ecocal_app.events.models import ObservationPair, ObservationSnapshot
from ecocal_app.origin.base import OriginFetcher
from ecocal_app.schedule.indicators import INDICATOR_IDS
from ecocal_app.client.sources import SnapshotSource


class FakeOriginFetcher(OriginFetcher):
    """Origin fetcher serving canned pairs; exceptions in the table are raised."""

    def __init__(self, responses: Optional[dict] = None, default: Optional[ObservationPair] = None):
        super().__init__("fake")
        self.responses = responses or {}
        self.default = default or ObservationPair(actual=1.0, prior=0.5)
        self.calls: list[str] = []
        self._lock = threading.Lock()

    def fetch(self, indicator_id: str) -> ObservationPair:
        with self._lock:
            self.calls.append(indicator_id)
            self._fetch_count += 1
        response = self.responses.get(indicator_id, self.default)
        if isinstance(response, Exception):
            raise response
        return response


class FakeSnapshotSource(SnapshotSource):
    """Snapshot source returning a fixed snapshot or raising CacheReadError."""

    def __init__(self, snapshot: Optional[ObservationSnapshot] = None, name: str = "fake",
                 on_fetch: Optional[Callable[[], None]] = None):
        self.snapshot = snapshot
        self.name = name
        self.on_fetch = on_fetch
        self.calls = 0

    def fetch_snapshot(self) -> ObservationSnapshot:
        self.calls += 1
        if self.on_fetch is not None:
            self.on_fetch()
        if self.snapshot is None:
            raise CacheReadError(f"{self.name} unavailable", url="http://cache.test/api/fred")
        return self.snapshot


class MutableClock:
    """Clock whose current time tests can move."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def weekday_now() -> datetime:
    """Tuesday morning, UTC."""
    return datetime(2026, 10, 20, 9, 5, 0, tzinfo=timezone.utc)


@pytest.fixture
def saturday_now() -> datetime:
    """Saturday noon, UTC."""
    return datetime(2026, 10, 17, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock(weekday_now) -> MutableClock:
    return MutableClock(weekday_now)


@pytest.fixture
def full_snapshot(weekday_now) -> ObservationSnapshot:
    """Snapshot with a distinct pair for every tracked indicator."""
    return ObservationSnapshot(
        observation_map={
            indicator_id: ObservationPair(actual=100.0 + i, prior=90.0 + i)
            for i, indicator_id in enumerate(INDICATOR_IDS)
        },
        cached_at=weekday_now,
    )


@pytest.fixture
def null_snapshot(weekday_now) -> ObservationSnapshot:
    """Snapshot where every slot is a null pair."""
    return ObservationSnapshot(
        observation_map={indicator_id: ObservationPair.empty() for indicator_id in INDICATOR_IDS},
        cached_at=weekday_now,
    )


@pytest.fixture
def fake_fetcher_cls():
    return FakeOriginFetcher


@pytest.fixture
def fake_source_cls():
    return FakeSnapshotSource


@pytest.fixture
def mutable_clock_cls():
    return MutableClock
