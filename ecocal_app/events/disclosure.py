"""
Point-in-time disclosure rule.

An event's "actual" figure is shown only once its release day has arrived
(the day itself included). The "prior" figure was released in an earlier
period and is always shown when known, future events included.
"""

from datetime import date
from typing import Iterable, Optional

from .models import EnrichedEvent, EventInstance, ObservationPair, ObservationSnapshot


def is_actual_visible(event: EventInstance, today: date) -> bool:
    return event.date <= today


def disclose(event: EventInstance, pair: Optional[ObservationPair], today: date) -> EnrichedEvent:
    """
    Join one event with its observations, masking unreleased actuals.

    Args:
        event: Projected event
        pair: Latest known observations for the event's indicator, if any
        today: UTC calendar day the disclosure is evaluated for

    Returns:
        EnrichedEvent with ``actual`` nulled when the event is still in the future
    """
    if pair is None:
        pair = ObservationPair.empty()

    return EnrichedEvent(
        indicator=event.indicator,
        date=event.date,
        actual=pair.actual if is_actual_visible(event, today) else None,
        prior=pair.prior,
    )


def enrich(
    events: Iterable[EventInstance],
    snapshot: Optional[ObservationSnapshot],
    today: date
) -> list[EnrichedEvent]:
    """Apply the disclosure rule to every projected event, preserving order."""
    return [
        disclose(event, snapshot.get(event.indicator_id) if snapshot else None, today)
        for event in events
    ]
