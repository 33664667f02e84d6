"""
FOMC meeting end dates.

Each entry is the second day of a two-day meeting, the day the rate
decision is announced. The table is curated by hand and bounded to the
years listed in ``COVERED_YEARS``; lookups outside those years report
``covers() == False`` so callers can surface the gap.

Source: https://www.federalreserve.gov/monetarypolicy/fomccalendars.htm
"""

from datetime import date
from typing import Iterable, Optional

FOMC_DATES_2025 = (
    date(2025, 1, 29), date(2025, 3, 19), date(2025, 5, 7), date(2025, 6, 18),
    date(2025, 7, 30), date(2025, 9, 17), date(2025, 10, 29), date(2025, 12, 10),
)

FOMC_DATES_2026 = (
    date(2026, 1, 28), date(2026, 3, 18), date(2026, 4, 29), date(2026, 6, 17),
    date(2026, 7, 29), date(2026, 9, 16), date(2026, 10, 28), date(2026, 12, 9),
)

FOMC_DATES_2027 = (
    date(2027, 1, 27), date(2027, 3, 17), date(2027, 4, 28), date(2027, 6, 9),
    date(2027, 7, 28), date(2027, 9, 15), date(2027, 10, 27), date(2027, 12, 8),
)


class FomcCalendar:
    """Lookup of one meeting end date per (year, month)."""

    def __init__(self, meeting_dates: Iterable[date], covered_years: Optional[Iterable[int]] = None):
        self._by_month: dict[tuple[int, int], date] = {}
        for meeting in sorted(meeting_dates):
            # First listed meeting wins if a month ever holds two
            self._by_month.setdefault((meeting.year, meeting.month), meeting)

        if covered_years is None:
            covered_years = {year for year, _ in self._by_month}
        self.covered_years = frozenset(covered_years)

    def covers(self, year: int) -> bool:
        """Whether the table was curated for this year at all."""
        return year in self.covered_years

    def meeting_in(self, year: int, month: int) -> Optional[date]:
        """Meeting end date in the given month, if any."""
        return self._by_month.get((year, month))

    @property
    def last_covered_year(self) -> Optional[int]:
        return max(self.covered_years) if self.covered_years else None


DEFAULT_FOMC_CALENDAR = FomcCalendar(
    FOMC_DATES_2025 + FOMC_DATES_2026 + FOMC_DATES_2027,
    covered_years=(2025, 2026, 2027),
)
