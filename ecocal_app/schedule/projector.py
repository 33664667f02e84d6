"""
Release schedule projection.

Turns the static indicator table into a rolling list of dated events around
"today". The projection is a pure function of the day and the FOMC table:
no clock reads, no network.
"""

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Optional, Sequence

import structlog

from ..config.defaults import ProjectionParams
from ..events.models import EventInstance
from ..utils.time import add_months
from .fomc import DEFAULT_FOMC_CALENDAR, FomcCalendar
from .indicators import INDICATORS, IndicatorDefinition, ReleaseRule, indicator_order
from .rules import resolve_release_date

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class Projection:
    """Projected events plus the months the FOMC table could not answer for."""
    events: list[EventInstance]
    window_start: date
    window_end: date
    uncovered_fomc_months: list[tuple[int, int]] = field(default_factory=list)

    @property
    def fomc_table_exhausted(self) -> bool:
        return bool(self.uncovered_fomc_months)


class ReleaseScheduleProjector:
    """Projects approximate release dates for the tracked indicators."""

    def __init__(
        self,
        params: Optional[ProjectionParams] = None,
        indicators: Sequence[IndicatorDefinition] = INDICATORS,
        fomc: FomcCalendar = DEFAULT_FOMC_CALENDAR
    ):
        self.params = params or ProjectionParams()
        self.indicators = tuple(indicators)
        self.fomc = fomc
        self.logger = logger

    def window(self, today: date) -> tuple[date, date]:
        """Inclusive [start, end] window around today."""
        return (
            today - timedelta(days=self.params.lookback_days),
            today + timedelta(days=self.params.horizon_days),
        )

    def project(self, today: date) -> Projection:
        """
        Project events for the rolling window around today.

        Args:
            today: UTC calendar day

        Returns:
            Projection with events deduplicated by (date, indicator) and sorted
            by date, then by indicator definition order
        """
        start, end = self.window(today)
        events: list[EventInstance] = []
        seen: set[tuple[date, str]] = set()
        uncovered: list[tuple[int, int]] = []

        for offset in range(self.params.month_span):
            year, month = add_months(today, offset)
            month_in_window = date(year, month, 1) <= end

            for indicator in self.indicators:
                if indicator.release_rule == ReleaseRule.FOMC_MEETING_DATE and not self.fomc.covers(year):
                    if month_in_window and (year, month) not in uncovered:
                        uncovered.append((year, month))
                    continue

                release_date = resolve_release_date(indicator.release_rule, year, month, self.fomc)
                if release_date is None or not (start <= release_date <= end):
                    continue

                key = (release_date, indicator.id)
                if key in seen:
                    continue
                seen.add(key)
                events.append(EventInstance(indicator=indicator, date=release_date))

        events.sort(key=lambda e: (e.date, indicator_order(e.indicator_id)))

        if uncovered:
            self.logger.warning(
                "fomc_table_exhausted",
                uncovered_months=[f"{y:04d}-{m:02d}" for y, m in uncovered],
                last_covered_year=self.fomc.last_covered_year,
                today=today.isoformat()
            )

        return Projection(
            events=events,
            window_start=start,
            window_end=end,
            uncovered_fomc_months=uncovered,
        )


def project_events(today: date, params: Optional[ProjectionParams] = None) -> list[EventInstance]:
    """Convenience wrapper returning only the projected events."""
    return ReleaseScheduleProjector(params).project(today).events
