"""Tests for the merge-if-better policy."""

from datetime import datetime, timezone

from ecocal_app.cache.policy import MergeIfBetter, MergeReason
from ecocal_app.events.models import ObservationPair, ObservationSnapshot

NOW = datetime(2026, 10, 20, tzinfo=timezone.utc)


class TestMergeIfBetter:
    """Test keep-or-replace decisions."""

    def setup_method(self):
        self.policy = MergeIfBetter()

    def test_non_empty_candidate_replaces(self):
        decision = self.policy.merge([1], [2])

        assert decision.replaced
        assert decision.value == [2]
        assert decision.reason == MergeReason.CANDIDATE_ACCEPTED

    def test_empty_candidate_keeps_current(self):
        """Test a populated value is never replaced by an empty one."""
        decision = self.policy.merge([1], [])

        assert not decision.replaced
        assert decision.value == [1]
        assert decision.reason == MergeReason.CANDIDATE_EMPTY

    def test_missing_candidate_keeps_current(self):
        decision = self.policy.merge([1], None)

        assert not decision.replaced
        assert decision.value == [1]
        assert decision.reason == MergeReason.CANDIDATE_MISSING

    def test_nothing_to_keep(self):
        decision = self.policy.merge(None, None)

        assert not decision.has_value
        assert not decision.replaced

    def test_uses_is_empty_attribute(self):
        """Test values exposing ``is_empty`` are judged by it."""
        empty = ObservationSnapshot({}, NOW)
        populated = ObservationSnapshot({"GDP": ObservationPair(2.8, 3.0)}, NOW)

        assert self.policy.merge(populated, empty).value is populated
        assert self.policy.merge(empty, populated).value is populated
        assert self.policy.is_empty(None)
        assert self.policy.is_empty(empty)

    def test_custom_predicate(self):
        policy = MergeIfBetter(is_empty=lambda value: value == 0)

        assert policy.merge(5, 0).value == 5
        assert policy.merge(5, 7).value == 7
