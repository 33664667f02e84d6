"""Staleness labels shown above the calendar panel."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..utils.time import to_utc

PRIOR_BUSINESS_DAY_SUFFIX = " (prior business day)"
NO_DATA_TEXT = "No data"


@dataclass(frozen=True)
class StalenessLabel:
    """User-facing description of how old the visible data is."""
    text: str
    same_day: bool
    prior_business_day: bool = False


def describe_staleness(
    fetched_at: Optional[datetime],
    now: datetime,
    weekend_hold: bool = False
) -> StalenessLabel:
    """
    Label the age of the visible data.

    Same UTC day renders a clock time, anything older a dated timestamp.
    Weekend holds are flagged as showing the prior business day.

    Args:
        fetched_at: When the visible data was fetched, None if there is none
        now: Current time
        weekend_hold: Whether the view is a weekend re-surface of the cache
    """
    if fetched_at is None:
        return StalenessLabel(text=NO_DATA_TEXT, same_day=False)

    fetched = to_utc(fetched_at)
    same_day = fetched.date() == to_utc(now).date()

    if same_day:
        text = f"Updated {fetched:%H:%M} UTC"
    else:
        text = f"Updated {fetched:%b} {fetched.day}, {fetched:%H:%M} UTC"

    if weekend_hold:
        text += PRIOR_BUSINESS_DAY_SUFFIX

    return StalenessLabel(text=text, same_day=same_day, prior_business_day=weekend_hold)
