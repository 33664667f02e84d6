"""Tests for the point-in-time disclosure rule."""

from datetime import date, datetime, timezone

from ecocal_app.events.disclosure import disclose, enrich, is_actual_visible
from ecocal_app.events.models import EventInstance, ObservationPair, ObservationSnapshot
from ecocal_app.schedule.indicators import get_indicator
from ecocal_app.schedule.projector import project_events

TODAY = date(2026, 10, 20)


def _event(indicator_id: str, day: date) -> EventInstance:
    return EventInstance(indicator=get_indicator(indicator_id), date=day)


class TestDisclose:
    """Test masking of a single event."""

    def test_past_event_shows_actual(self):
        """Test a released event keeps both figures."""
        enriched = disclose(_event("CPIAUCSL", date(2026, 10, 14)), ObservationPair(3.1, 3.0), TODAY)

        assert enriched.actual == 3.1
        assert enriched.prior == 3.0

    def test_release_day_shows_actual(self):
        """Test the release day itself counts as released."""
        enriched = disclose(_event("CPIAUCSL", TODAY), ObservationPair(3.1, 3.0), TODAY)

        assert enriched.actual == 3.1
        assert is_actual_visible(_event("CPIAUCSL", TODAY), TODAY)

    def test_future_event_masks_actual_keeps_prior(self):
        """Test an unreleased event hides the actual but shows the prior."""
        enriched = disclose(_event("PAYEMS", date(2026, 11, 6)), ObservationPair(150.0, 120.0), TODAY)

        assert enriched.actual is None
        assert enriched.prior == 120.0
        assert enriched.has_values

    def test_missing_pair(self):
        """Test events without observations stay empty."""
        enriched = disclose(_event("GDP", date(2026, 10, 26)), None, TODAY)

        assert enriched.actual is None
        assert enriched.prior is None
        assert not enriched.has_values


class TestEnrich:
    """Test enrichment of a whole projection."""

    def test_rule_holds_for_every_event(self, full_snapshot):
        """Test actual is shown exactly for events on or before today."""
        events = project_events(TODAY)
        enriched = enrich(events, full_snapshot, TODAY)

        assert [e.indicator_id for e in enriched] == [e.indicator_id for e in events]
        for event in enriched:
            pair = full_snapshot.get(event.indicator_id)
            if event.date <= TODAY:
                assert event.actual == pair.actual
            else:
                assert event.actual is None
            assert event.prior == pair.prior

    def test_missing_indicator_in_snapshot(self):
        """Test indicators absent from the snapshot get null values."""
        snapshot = ObservationSnapshot(
            observation_map={"CPIAUCSL": ObservationPair(3.1, 3.0)},
            cached_at=datetime(2026, 10, 20, tzinfo=timezone.utc)
        )
        enriched = enrich([_event("CPIAUCSL", date(2026, 10, 14)), _event("GDP", date(2026, 10, 14))],
                          snapshot, TODAY)

        assert enriched[0].actual == 3.1
        assert enriched[1].actual is None
        assert enriched[1].prior is None

    def test_no_snapshot(self):
        """Test enrichment without any snapshot keeps the projection."""
        enriched = enrich(project_events(TODAY), None, TODAY)

        assert len(enriched) == 12
        assert not any(e.has_values for e in enriched)
