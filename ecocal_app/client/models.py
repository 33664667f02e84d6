"""
Client controller data models.

The controller walks IDLE -> CHECKING -> (WEEKEND_HOLD | FETCHING) -> SETTLED
once per refresh tick. A cycle that fails while checking settles directly.
Views are immutable; every tick produces a new one or keeps the previous one.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

from ..events.models import EnrichedEvent


class ControllerState(str, Enum):
    """Refresh cycle states."""
    IDLE = "idle"
    CHECKING = "checking"
    WEEKEND_HOLD = "weekend_hold"
    FETCHING = "fetching"
    SETTLED = "settled"


ALLOWED_TRANSITIONS: dict[ControllerState, frozenset] = {
    ControllerState.IDLE: frozenset({ControllerState.CHECKING}),
    ControllerState.CHECKING: frozenset({
        ControllerState.WEEKEND_HOLD,
        ControllerState.FETCHING,
        ControllerState.SETTLED,
    }),
    ControllerState.WEEKEND_HOLD: frozenset({ControllerState.SETTLED}),
    ControllerState.FETCHING: frozenset({ControllerState.SETTLED}),
    ControllerState.SETTLED: frozenset({ControllerState.CHECKING}),
}


class ViewSource(str, Enum):
    """Where the visible events came from."""
    LIVE = "live"
    PERSISTED = "persisted"
    NONE = "none"


class TickOutcome(str, Enum):
    """Result of one refresh tick."""
    REFRESHED = "refreshed"
    KEPT_CURRENT = "kept_current"
    WEEKEND_HOLD = "weekend_hold"
    ERROR = "error"
    SKIPPED_IN_FLIGHT = "skipped_in_flight"
    SKIPPED_CLOSED = "skipped_closed"
    DISCARDED = "discarded"


@dataclass(frozen=True)
class CalendarView:
    """What the calendar panel renders."""
    events: tuple[EnrichedEvent, ...] = ()
    fetched_at: Optional[datetime] = None
    source: ViewSource = ViewSource.NONE
    weekend_hold: bool = False
    error: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.events

    @classmethod
    def blank(cls) -> "CalendarView":
        return cls()
