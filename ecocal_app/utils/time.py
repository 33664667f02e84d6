"""
Calendar-day and business-day helpers.

All "today" decisions in the service are made on the UTC calendar day so the
projector, the disclosure rule and the weekend hold agree regardless of the
clock they were handed.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Optional

SATURDAY = 5
SUNDAY = 6
FRIDAY = 4


def utc_now() -> datetime:
    """Current wall-clock time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_utc(moment: datetime) -> datetime:
    """
    Normalize a datetime to aware UTC.

    Naive datetimes are taken to already be in UTC.
    """
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def utc_today(now: Optional[datetime] = None) -> date:
    """
    UTC calendar day for a moment, defaulting to now.

    Args:
        now: Optional moment to normalize

    Returns:
        Calendar day with no time component
    """
    if now is None:
        now = utc_now()
    return to_utc(now).date()


def is_weekend(day: date) -> bool:
    return day.weekday() in (SATURDAY, SUNDAY)


def is_business_day(day: date) -> bool:
    return not is_weekend(day)


def roll_forward_to_business_day(day: date) -> date:
    """Advance a day until it falls on Monday-Friday (inclusive of the day itself)."""
    while is_weekend(day):
        day += timedelta(days=1)
    return day


def roll_forward_to_weekday(day: date, weekday: int) -> date:
    """Advance a day to the next given weekday, inclusive."""
    return day + timedelta(days=(weekday - day.weekday()) % 7)


def add_months(day: date, months: int) -> tuple[int, int]:
    """
    Year and month reached by moving ``months`` from the month of ``day``.

    Returns:
        (year, month) tuple with month in 1..12
    """
    index = day.year * 12 + (day.month - 1) + months
    return index // 12, index % 12 + 1


def format_iso(moment: datetime) -> str:
    """Serialize an aware datetime to ISO-8601 with a trailing Z."""
    return to_utc(moment).isoformat().replace("+00:00", "Z")


def parse_iso(value: str) -> datetime:
    """
    Parse an ISO-8601 timestamp into aware UTC.

    Accepts the ``Z`` suffix written by JavaScript clients.

    Raises:
        ValueError: if the value is not a valid timestamp
    """
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return to_utc(datetime.fromisoformat(value))
