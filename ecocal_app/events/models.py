"""
Data models for projected events, observations and cache payloads.

Wire formats (camelCase keys) are shared with the browser dashboard and the
shared cache, so every payload class owns its own encode/decode pair.
"""

import json
import math
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Optional

from ..errors import MalformedDataError, MissingDataError
from ..schedule.indicators import IndicatorDefinition, get_indicator
from ..utils.time import format_iso, parse_iso


def _coerce_value(value: Any, name: str) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise MalformedDataError(
            f"Observation '{name}' must be a number or null",
            raw_data=repr(value),
            expected_format="number|null"
        )
    if math.isnan(value):
        return None
    return float(value)


@dataclass(frozen=True)
class EventInstance:
    """One indicator release projected onto a calendar day."""
    indicator: IndicatorDefinition
    date: date

    @property
    def indicator_id(self) -> str:
        return self.indicator.id

    def is_past_or_today(self, today: date) -> bool:
        return self.date <= today


@dataclass(frozen=True)
class ObservationPair:
    """The two most recent released values of an indicator."""
    actual: Optional[float] = None
    prior: Optional[float] = None

    @classmethod
    def empty(cls) -> "ObservationPair":
        return cls(actual=None, prior=None)

    @property
    def is_empty(self) -> bool:
        return self.actual is None and self.prior is None

    def to_dict(self) -> dict[str, Optional[float]]:
        return {"actual": self.actual, "prior": self.prior}

    @classmethod
    def from_dict(cls, data: Any) -> "ObservationPair":
        """
        Decode a ``{"actual", "prior"}`` mapping.

        Raises:
            MalformedDataError: if the mapping or its values are invalid
        """
        if not isinstance(data, dict):
            raise MalformedDataError(
                "Observation pair must be an object",
                raw_data=repr(data),
                expected_format='{"actual": number|null, "prior": number|null}'
            )
        return cls(
            actual=_coerce_value(data.get("actual"), "actual"),
            prior=_coerce_value(data.get("prior"), "prior"),
        )


@dataclass(frozen=True)
class ObservationSnapshot:
    """Observation map for every indicator plus the time it was assembled."""
    observation_map: dict[str, ObservationPair]
    cached_at: datetime

    @property
    def is_empty(self) -> bool:
        return not self.observation_map

    @property
    def populated_count(self) -> int:
        return sum(1 for pair in self.observation_map.values() if not pair.is_empty)

    def get(self, indicator_id: str) -> ObservationPair:
        return self.observation_map.get(indicator_id, ObservationPair.empty())

    def to_payload(self) -> dict[str, Any]:
        return {
            "observationMap": {
                indicator_id: pair.to_dict()
                for indicator_id, pair in self.observation_map.items()
            },
            "cachedAt": format_iso(self.cached_at),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_payload())

    @classmethod
    def from_payload(cls, payload: Any) -> "ObservationSnapshot":
        """
        Decode a snapshot payload.

        Accepts the legacy ``obsMap`` key written by older refreshers.

        Raises:
            MalformedDataError: if the payload does not have snapshot shape
        """
        if not isinstance(payload, dict):
            raise MalformedDataError(
                "Snapshot payload must be an object",
                raw_data=repr(payload)[:200]
            )

        raw_map = payload.get("observationMap", payload.get("obsMap"))
        if not isinstance(raw_map, dict):
            raise MalformedDataError(
                "Snapshot payload has no observation map",
                raw_data=repr(payload)[:200],
                expected_format="observationMap"
            )

        cached_at_raw = payload.get("cachedAt")
        try:
            cached_at = parse_iso(cached_at_raw)
        except (TypeError, ValueError, AttributeError) as e:
            raise MalformedDataError(
                f"Snapshot cachedAt is not a timestamp: {e}",
                raw_data=repr(cached_at_raw),
                expected_format="ISO-8601"
            )

        return cls(
            observation_map={
                str(indicator_id): ObservationPair.from_dict(pair)
                for indicator_id, pair in raw_map.items()
            },
            cached_at=cached_at,
        )

    @classmethod
    def from_json(cls, raw: str) -> "ObservationSnapshot":
        try:
            payload = json.loads(raw)
        except (TypeError, json.JSONDecodeError) as e:
            raise MalformedDataError(
                f"Snapshot is not valid JSON: {e}",
                raw_data=str(raw)[:200],
                expected_format="json"
            )
        return cls.from_payload(payload)


@dataclass(frozen=True)
class EnrichedEvent:
    """A projected event joined with its (disclosure-masked) observations."""
    indicator: IndicatorDefinition
    date: date
    actual: Optional[float] = None
    prior: Optional[float] = None

    @property
    def indicator_id(self) -> str:
        return self.indicator.id

    @property
    def has_values(self) -> bool:
        return self.actual is not None or self.prior is not None

    def is_past(self, today: date) -> bool:
        return self.date < today

    def is_today(self, today: date) -> bool:
        return self.date == today

    def to_dict(self) -> dict[str, Any]:
        return {
            "indicatorId": self.indicator.id,
            "date": self.date.isoformat(),
            "actual": self.actual,
            "prior": self.prior,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "EnrichedEvent":
        """
        Decode a persisted event.

        Raises:
            MissingDataError: if the indicator is no longer tracked
            MalformedDataError: if the event is not well formed
        """
        if not isinstance(data, dict):
            raise MalformedDataError("Event must be an object", raw_data=repr(data)[:200])

        indicator_id = data.get("indicatorId")
        indicator = get_indicator(indicator_id) if isinstance(indicator_id, str) else None
        if indicator is None:
            raise MissingDataError(
                f"Unknown indicator in persisted event: {indicator_id!r}",
                data_type="indicator"
            )

        try:
            event_date = date.fromisoformat(data.get("date"))
        except (TypeError, ValueError) as e:
            raise MalformedDataError(
                f"Event date is invalid: {e}",
                raw_data=repr(data.get("date")),
                expected_format="YYYY-MM-DD"
            )

        return cls(
            indicator=indicator,
            date=event_date,
            actual=_coerce_value(data.get("actual"), "actual"),
            prior=_coerce_value(data.get("prior"), "prior"),
        )


@dataclass(frozen=True)
class ClientCacheEntry:
    """Client-persisted view: the last good event list and when it was fetched."""
    events: tuple[EnrichedEvent, ...]
    fetched_at: datetime
    skipped: int = field(default=0, compare=False)

    @property
    def is_empty(self) -> bool:
        return not self.events

    def to_json(self) -> str:
        return json.dumps({
            "events": [event.to_dict() for event in self.events],
            "fetchedAt": format_iso(self.fetched_at),
        })

    @classmethod
    def from_json(cls, raw: str) -> "ClientCacheEntry":
        """
        Decode a persisted entry, dropping events that no longer decode.

        Raises:
            MalformedDataError: if the entry itself is unreadable
        """
        try:
            payload = json.loads(raw)
        except (TypeError, json.JSONDecodeError) as e:
            raise MalformedDataError(f"Cache entry is not valid JSON: {e}", raw_data=str(raw)[:200])

        if not isinstance(payload, dict) or not isinstance(payload.get("events"), list):
            raise MalformedDataError("Cache entry has no event list", raw_data=str(raw)[:200])

        try:
            fetched_at = parse_iso(payload.get("fetchedAt"))
        except (TypeError, ValueError, AttributeError) as e:
            raise MalformedDataError(f"Cache entry fetchedAt is invalid: {e}")

        events = []
        skipped = 0
        for item in payload["events"]:
            try:
                events.append(EnrichedEvent.from_dict(item))
            except (MissingDataError, MalformedDataError):
                skipped += 1

        return cls(events=tuple(events), fetched_at=fetched_at, skipped=skipped)
