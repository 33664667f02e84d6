"""Display helpers for the calendar panel."""

from collections import OrderedDict
from datetime import date
from typing import Iterable, Optional

from .models import EnrichedEvent

MISSING_VALUE = "--"


def format_value(value: Optional[float], unit: str) -> str:
    """
    Format an observation for display.

    Payroll counts (unit ``K``) are reported by the provider in thousands of
    jobs and shown with one decimal after dividing by 1000.
    """
    if value is None:
        return MISSING_VALUE
    if unit == "K":
        return f"{value / 1000:.1f}K"
    if unit == "%":
        return f"{value:.2f}%"
    return f"{value:.2f}"


def classify_actual(event: EnrichedEvent) -> Optional[str]:
    """
    Compare the actual figure against the prior one.

    Returns:
        "positive" when the move is good for the indicator, "negative" when it
        is not, None when either value is missing or the indicator has no
        better direction
    """
    better = event.indicator.higher_is_better
    if event.actual is None or event.prior is None or better is None:
        return None
    if better:
        return "positive" if event.actual > event.prior else "negative"
    return "positive" if event.actual < event.prior else "negative"


def group_by_date(events: Iterable[EnrichedEvent]) -> "OrderedDict[date, list[EnrichedEvent]]":
    """Group events by release day, keeping first-seen day order."""
    grouped: "OrderedDict[date, list[EnrichedEvent]]" = OrderedDict()
    for event in events:
        grouped.setdefault(event.date, []).append(event)
    return grouped


def format_day_heading(day: date, today: date) -> str:
    heading = day.strftime("%a, %b ") + str(day.day)
    if day == today:
        heading += "  < TODAY"
    return heading
