"""Tests for event, snapshot and cache entry models."""

import json
import math
from datetime import date, datetime, timezone

import pytest

from ecocal_app.errors import MalformedDataError, MissingDataError
from ecocal_app.events.models import (
    ClientCacheEntry,
    EnrichedEvent,
    ObservationPair,
    ObservationSnapshot,
)
from ecocal_app.schedule.indicators import get_indicator

CACHED_AT = datetime(2026, 10, 20, 9, 5, 0, tzinfo=timezone.utc)


class TestObservationPair:
    """Test ObservationPair decoding."""

    def test_from_dict(self):
        """Test numeric and null values decode."""
        pair = ObservationPair.from_dict({"actual": 3, "prior": None})

        assert pair.actual == 3.0
        assert isinstance(pair.actual, float)
        assert pair.prior is None
        assert not pair.is_empty

    def test_nan_becomes_null(self):
        """Test NaN is treated as an unknown value."""
        pair = ObservationPair.from_dict({"actual": math.nan, "prior": 1.5})
        assert pair.actual is None

    @pytest.mark.parametrize("raw", [
        {"actual": "3.1", "prior": None},
        {"actual": True, "prior": None},
        ["3.1", "3.0"],
    ])
    def test_malformed(self, raw):
        """Test non-numeric values are rejected."""
        with pytest.raises(MalformedDataError):
            ObservationPair.from_dict(raw)

    def test_empty(self):
        """Test the null pair."""
        assert ObservationPair.empty().is_empty
        assert ObservationPair.empty().to_dict() == {"actual": None, "prior": None}


class TestObservationSnapshot:
    """Test the shared snapshot wire format."""

    def test_payload_shape(self):
        """Test the camelCase wire keys."""
        snapshot = ObservationSnapshot({"UNRATE": ObservationPair(4.1, 4.2)}, CACHED_AT)

        assert snapshot.to_payload() == {
            "observationMap": {"UNRATE": {"actual": 4.1, "prior": 4.2}},
            "cachedAt": "2026-10-20T09:05:00Z",
        }

    def test_from_json(self):
        """Test decoding a stored snapshot."""
        raw = json.dumps({
            "observationMap": {"UNRATE": {"actual": 4.1, "prior": None}},
            "cachedAt": "2026-10-20T09:05:00.000Z",
        })
        snapshot = ObservationSnapshot.from_json(raw)

        assert snapshot.cached_at == CACHED_AT
        assert snapshot.get("UNRATE") == ObservationPair(4.1, None)
        assert snapshot.get("GDP").is_empty
        assert snapshot.populated_count == 1

    def test_legacy_obs_map_key(self):
        """Test snapshots written under the older key still decode."""
        snapshot = ObservationSnapshot.from_payload({
            "obsMap": {"GDP": {"actual": 2.8, "prior": 3.0}},
            "cachedAt": "2026-10-20T09:05:00Z",
        })
        assert snapshot.get("GDP").actual == 2.8

    @pytest.mark.parametrize("raw", [
        "not json",
        json.dumps([1, 2]),
        json.dumps({"cachedAt": "2026-10-20T09:05:00Z"}),
        json.dumps({"observationMap": {}, "cachedAt": "yesterday"}),
        json.dumps({"observationMap": {}}),
    ])
    def test_malformed(self, raw):
        """Test unreadable snapshots raise MalformedDataError."""
        with pytest.raises(MalformedDataError):
            ObservationSnapshot.from_json(raw)

    def test_empty_map(self):
        """Test an empty observation map is an empty snapshot."""
        assert ObservationSnapshot({}, CACHED_AT).is_empty


class TestEnrichedEvent:
    """Test EnrichedEvent encoding."""

    def test_to_dict(self):
        """Test the persisted event shape."""
        event = EnrichedEvent(get_indicator("PAYEMS"), date(2026, 11, 6), None, 120.0)

        assert event.to_dict() == {
            "indicatorId": "PAYEMS",
            "date": "2026-11-06",
            "actual": None,
            "prior": 120.0,
        }

    def test_from_dict_unknown_indicator(self):
        """Test an indicator that is no longer tracked is rejected."""
        with pytest.raises(MissingDataError):
            EnrichedEvent.from_dict({"indicatorId": "GONE", "date": "2026-11-06"})

    def test_from_dict_bad_date(self):
        """Test an invalid date is rejected."""
        with pytest.raises(MalformedDataError):
            EnrichedEvent.from_dict({"indicatorId": "GDP", "date": "26/10/2026"})

    def test_day_helpers(self):
        """Test past and today checks."""
        event = EnrichedEvent(get_indicator("GDP"), date(2026, 10, 26))

        assert event.is_today(date(2026, 10, 26))
        assert event.is_past(date(2026, 10, 27))
        assert not event.is_past(date(2026, 10, 26))


class TestClientCacheEntry:
    """Test the client-persisted entry format."""

    def test_json_shape(self):
        """Test the persisted keys."""
        entry = ClientCacheEntry(
            events=(EnrichedEvent(get_indicator("GDP"), date(2026, 10, 26), None, 3.0),),
            fetched_at=CACHED_AT,
        )
        payload = json.loads(entry.to_json())

        assert payload["fetchedAt"] == "2026-10-20T09:05:00Z"
        assert payload["events"][0]["indicatorId"] == "GDP"
        assert ClientCacheEntry.from_json(entry.to_json()) == entry

    def test_skips_undecodable_events(self):
        """Test bad events are dropped and counted."""
        raw = json.dumps({
            "events": [
                {"indicatorId": "GDP", "date": "2026-10-26", "actual": None, "prior": 3.0},
                {"indicatorId": "GONE", "date": "2026-10-26", "actual": None, "prior": None},
                {"indicatorId": "GDP", "date": "soon", "actual": None, "prior": None},
            ],
            "fetchedAt": "2026-10-20T09:05:00Z",
        })
        entry = ClientCacheEntry.from_json(raw)

        assert len(entry.events) == 1
        assert entry.skipped == 2

    @pytest.mark.parametrize("raw", [
        "{",
        json.dumps({"fetchedAt": "2026-10-20T09:05:00Z"}),
        json.dumps({"events": [], "fetchedAt": None}),
    ])
    def test_malformed(self, raw):
        """Test unreadable entries raise MalformedDataError."""
        with pytest.raises(MalformedDataError):
            ClientCacheEntry.from_json(raw)
