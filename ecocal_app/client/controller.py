"""
Client freshness controller.

Owns the calendar view shown by the dashboard. Each refresh tick either
re-surfaces the persisted cache (weekends) or reads the cache endpoint,
merges the result through the disclosure rule and keeps the best view
available. A populated view is never replaced by an empty one.
"""

import dataclasses
import threading
from datetime import date, datetime
from typing import Callable, Optional, Sequence

from ..cache.client_store import ClientCacheStore
from ..cache.policy import MergeIfBetter
from ..config.defaults import DefaultConfig
from ..errors import CacheReadError, PersistenceError, StateTransitionError
from ..events.disclosure import enrich
from ..events.models import ClientCacheEntry, ObservationSnapshot
from ..logging.config import get_state_logger, log_fallback_decision, log_state_transition
from ..schedule.projector import ReleaseScheduleProjector
from ..utils.time import format_iso, is_weekend, utc_now, utc_today
from .models import ALLOWED_TRANSITIONS, CalendarView, ControllerState, TickOutcome, ViewSource
from .sources import HttpSnapshotSource, PerIndicatorSnapshotSource, SnapshotSource
from .staleness import StalenessLabel, describe_staleness

state_logger = get_state_logger(__name__)

NO_DATA_ERROR = "Economic calendar data is unavailable"


def view_is_empty(view: CalendarView) -> bool:
    return not view.events


def view_from_entry(entry: ClientCacheEntry, weekend_hold: bool = False) -> CalendarView:
    return CalendarView(
        events=entry.events,
        fetched_at=entry.fetched_at,
        source=ViewSource.PERSISTED,
        weekend_hold=weekend_hold,
    )


class ClientFreshnessController:
    """Refresh state machine for the economic calendar panel."""

    def __init__(
        self,
        store: ClientCacheStore,
        sources: Sequence[SnapshotSource],
        cache_key: str = "eco_calendar_cache",
        projector: Optional[ReleaseScheduleProjector] = None,
        clock: Optional[Callable[[], datetime]] = None,
        controller_id: str = "eco-calendar"
    ):
        self.store = store
        self.sources = tuple(sources)
        self.cache_key = cache_key
        self.projector = projector or ReleaseScheduleProjector()
        self.clock = clock or utc_now
        self.controller_id = controller_id
        self.logger = state_logger
        self.policy: MergeIfBetter[CalendarView] = MergeIfBetter(is_empty=view_is_empty)

        self.state = ControllerState.IDLE
        self._fetch_lock = threading.Lock()
        self._active = True
        self._stop_event = threading.Event()
        self._timer: Optional[threading.Thread] = None

        # Seed synchronously so the first paint is never blank
        entry = self.store.load(self.cache_key)
        self._view = view_from_entry(entry) if entry else CalendarView.blank()
        self.logger.info(
            "Controller initialized",
            controller_id=self.controller_id,
            seeded_events=len(self._view.events),
            seeded_from=self._view.source.value
        )

    @property
    def view(self) -> CalendarView:
        return self._view

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def in_flight(self) -> bool:
        return self._fetch_lock.locked()

    def staleness(self, now: Optional[datetime] = None) -> StalenessLabel:
        return describe_staleness(
            self._view.fetched_at,
            now or self.clock(),
            weekend_hold=self._view.weekend_hold
        )

    def _transition(self, to_state: ControllerState, trigger: str, context: Optional[dict] = None) -> None:
        if to_state not in ALLOWED_TRANSITIONS[self.state]:
            raise StateTransitionError(
                f"Cannot move from {self.state.value} to {to_state.value}",
                current_state=self.state.value,
                attempted_transition=to_state.value
            )
        log_state_transition(
            self.logger,
            controller_id=self.controller_id,
            from_state=self.state.value,
            to_state=to_state.value,
            trigger=trigger,
            context=context
        )
        self.state = to_state

    def tick(self) -> TickOutcome:
        """
        Run one refresh cycle.

        A tick is a no-op when the controller is closed or another tick is
        still fetching.

        Returns:
            TickOutcome describing what happened to the view
        """
        if not self._active:
            return TickOutcome.SKIPPED_CLOSED

        if not self._fetch_lock.acquire(blocking=False):
            self.logger.debug("Refresh already in flight, skipping tick", controller_id=self.controller_id)
            return TickOutcome.SKIPPED_IN_FLIGHT

        try:
            return self._run_cycle()
        finally:
            self._fetch_lock.release()

    def _run_cycle(self) -> TickOutcome:
        now = self.clock()
        today = utc_today(now)

        self._transition(ControllerState.CHECKING, "tick", {"today": today.isoformat()})

        outcome = TickOutcome.ERROR
        try:
            if is_weekend(today):
                self._transition(ControllerState.WEEKEND_HOLD, "weekend")
                outcome = self._hold_for_weekend()
            else:
                self._transition(ControllerState.FETCHING, "business_day")
                outcome = self._fetch_and_merge(now, today)

        except Exception as e:
            self.logger.error(
                "Unexpected error during refresh cycle",
                controller_id=self.controller_id,
                state=self.state.value,
                error=str(e),
                error_type=type(e).__name__
            )
            outcome = self._fall_back_to_cache() if self._active else TickOutcome.DISCARDED

        finally:
            # The next tick always starts from SETTLED
            self._transition(ControllerState.SETTLED, outcome.value, {"events": len(self._view.events)})

        return outcome

    def _hold_for_weekend(self) -> TickOutcome:
        entry = self.store.load(self.cache_key)
        candidate = view_from_entry(entry, weekend_hold=True) if entry else None

        decision = self.policy.merge(self._view, candidate)
        log_fallback_decision(self.logger, tier="weekend_hold", replaced=decision.replaced, reason=decision.reason)

        if decision.replaced:
            self._view = candidate
        elif not self._view.is_empty:
            self._view = dataclasses.replace(self._view, weekend_hold=True)
        else:
            self._view = CalendarView(error=NO_DATA_ERROR, weekend_hold=True)
            return TickOutcome.ERROR

        return TickOutcome.WEEKEND_HOLD

    def _read_snapshot(self) -> Optional[ObservationSnapshot]:
        for source in self.sources:
            try:
                return source.fetch_snapshot()
            except CacheReadError as e:
                self.logger.warning(
                    "Snapshot source failed",
                    controller_id=self.controller_id,
                    source=source.name,
                    error=str(e)
                )
        return None

    def _fetch_and_merge(self, now: datetime, today: date) -> TickOutcome:
        snapshot = self._read_snapshot()

        if not self._active:
            self.logger.info("Controller closed during fetch, discarding result", controller_id=self.controller_id)
            return TickOutcome.DISCARDED

        candidate = None
        if snapshot is not None and snapshot.populated_count == 0 and not self._view.is_empty:
            # An all-null snapshot carries no observations; it counts as an empty success
            candidate = CalendarView.blank()
        elif snapshot is not None:
            events = enrich(self.projector.project(today).events, snapshot, today)
            candidate = CalendarView(events=tuple(events), fetched_at=now, source=ViewSource.LIVE)

        decision = self.policy.merge(self._view, candidate)
        log_fallback_decision(
            self.logger,
            tier="client_refresh",
            replaced=decision.replaced,
            reason=decision.reason,
            context={"fetched_at": format_iso(now)}
        )

        if decision.replaced:
            self._view = candidate
            self._persist(candidate)
            return TickOutcome.REFRESHED

        return self._fall_back_to_cache()

    def _fall_back_to_cache(self) -> TickOutcome:
        if self._view.is_empty:
            entry = self.store.load(self.cache_key)
            decision = self.policy.merge(self._view, view_from_entry(entry) if entry else None)
            log_fallback_decision(self.logger, tier="client_cache", replaced=decision.replaced, reason=decision.reason)
            if decision.replaced:
                self._view = decision.value

        if self._view.is_empty:
            self._view = CalendarView(error=NO_DATA_ERROR)
            return TickOutcome.ERROR

        self._view = dataclasses.replace(self._view, weekend_hold=False, error=None)
        return TickOutcome.KEPT_CURRENT

    def _persist(self, view: CalendarView) -> None:
        entry = ClientCacheEntry(events=view.events, fetched_at=view.fetched_at)
        try:
            self.store.save(self.cache_key, entry)
        except PersistenceError as e:
            self.logger.error(
                "Failed to persist calendar view",
                controller_id=self.controller_id,
                error=str(e),
                degraded=e.degraded_functionality,
                fallback=e.fallback_strategy
            )

    def start(self, interval_seconds: float) -> None:
        """Tick immediately, then every ``interval_seconds`` on a daemon thread."""
        if self._timer is not None and self._timer.is_alive():
            return

        self._stop_event.clear()

        def _loop() -> None:
            while self._active and not self._stop_event.is_set():
                try:
                    self.tick()
                except Exception as e:
                    self.logger.error(
                        "Refresh tick failed",
                        controller_id=self.controller_id,
                        error=str(e),
                        error_type=type(e).__name__
                    )
                self._stop_event.wait(interval_seconds)

        self._timer = threading.Thread(target=_loop, name=f"{self.controller_id}-ticker", daemon=True)
        self._timer.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        """Stop the ticker thread started by ``start``."""
        self._stop_event.set()
        if self._timer is not None and self._timer is not threading.current_thread():
            self._timer.join(timeout)
        self._timer = None

    def close(self) -> None:
        """Deactivate the controller; in-flight results are discarded."""
        self._active = False
        self.stop(timeout=0)


def create_controller(
    config: DefaultConfig,
    store: Optional[ClientCacheStore] = None,
    clock: Optional[Callable[[], datetime]] = None
) -> ClientFreshnessController:
    """Build a controller reading the configured HTTP endpoint."""
    http_source = HttpSnapshotSource(
        config.client.endpoint_url,
        timeout_seconds=config.client.request_timeout_seconds
    )
    sources: list[SnapshotSource] = [http_source]
    if config.client.per_indicator_fallback:
        sources.append(PerIndicatorSnapshotSource(http_source))

    return ClientFreshnessController(
        store=store or ClientCacheStore(config.client.store_path),
        sources=sources,
        cache_key=config.client.cache_key,
        projector=ReleaseScheduleProjector(config.projection),
        clock=clock,
    )
