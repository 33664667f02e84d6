"""Resolution of release rules to concrete calendar days."""

from datetime import date
from typing import Optional

from ..utils.time import FRIDAY, roll_forward_to_business_day, roll_forward_to_weekday
from .fomc import DEFAULT_FOMC_CALENDAR, FomcCalendar
from .indicators import ReleaseRule

MID_MONTH_ANCHOR_DAY = 14
END_OF_MONTH_ANCHOR_DAY = 26


def first_business_day(year: int, month: int) -> date:
    return roll_forward_to_business_day(date(year, month, 1))


def first_friday(year: int, month: int) -> date:
    return roll_forward_to_weekday(date(year, month, 1), FRIDAY)


def mid_month_business_day(year: int, month: int) -> date:
    return roll_forward_to_business_day(date(year, month, MID_MONTH_ANCHOR_DAY))


def end_of_month_business_day(year: int, month: int) -> date:
    # Day 26 rolled forward never leaves the month (at worst Monday the 28th)
    return roll_forward_to_business_day(date(year, month, END_OF_MONTH_ANCHOR_DAY))


def resolve_release_date(
    rule: ReleaseRule,
    year: int,
    month: int,
    fomc: FomcCalendar = DEFAULT_FOMC_CALENDAR
) -> Optional[date]:
    """
    Resolve a release rule to its approximate date in a given month.

    Args:
        rule: Release heuristic of the indicator
        year: Calendar year
        month: Calendar month (1-12)
        fomc: Meeting table used by FOMC_MEETING_DATE

    Returns:
        The release date, or None when the rule yields no event that month
    """
    if rule == ReleaseRule.FIRST_BUSINESS_DAY:
        return first_business_day(year, month)
    if rule == ReleaseRule.FIRST_FRIDAY_OF_MONTH:
        return first_friday(year, month)
    if rule == ReleaseRule.MID_MONTH_BUSINESS_DAY:
        return mid_month_business_day(year, month)
    if rule == ReleaseRule.END_OF_MONTH_BUSINESS_DAY:
        return end_of_month_business_day(year, month)
    if rule == ReleaseRule.FOMC_MEETING_DATE:
        return fomc.meeting_in(year, month)
    raise ValueError(f"Unknown release rule: {rule!r}")
