"""
Merge-if-better policy shared by every cache tier.

A populated value is only ever replaced by a strictly non-empty candidate.
Cold start on the server, the client refresh and the weekend hold all make
their keep-or-replace decision through this one policy.
"""

from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar

T = TypeVar("T")


class MergeReason:
    """Reasons attached to merge decisions (also used as log values)."""
    CANDIDATE_ACCEPTED = "candidate_accepted"
    CANDIDATE_MISSING = "candidate_missing"
    CANDIDATE_EMPTY = "candidate_empty"


@dataclass(frozen=True)
class MergeDecision(Generic[T]):
    """Outcome of a merge: the value to keep and whether it changed."""
    value: Optional[T]
    replaced: bool
    reason: str

    @property
    def has_value(self) -> bool:
        return self.value is not None


def _default_is_empty(value: Any) -> bool:
    flag = getattr(value, "is_empty", None)
    if flag is not None:
        return bool(flag)
    return not value


class MergeIfBetter(Generic[T]):
    """Keep-or-replace policy that never regresses to an empty value."""

    def __init__(self, is_empty: Optional[Callable[[T], bool]] = None):
        self._is_empty = is_empty or _default_is_empty

    def is_empty(self, value: Optional[T]) -> bool:
        return value is None or self._is_empty(value)

    def merge(self, current: Optional[T], candidate: Optional[T]) -> MergeDecision[T]:
        """
        Decide between the current value and a freshly obtained candidate.

        Args:
            current: Value currently held (may be None)
            candidate: New value; None means the fetch failed

        Returns:
            MergeDecision holding the candidate if it is non-empty, otherwise
            the current value unchanged
        """
        if candidate is None:
            return MergeDecision(value=current, replaced=False, reason=MergeReason.CANDIDATE_MISSING)
        if self._is_empty(candidate):
            return MergeDecision(value=current, replaced=False, reason=MergeReason.CANDIDATE_EMPTY)
        return MergeDecision(value=candidate, replaced=True, reason=MergeReason.CANDIDATE_ACCEPTED)
