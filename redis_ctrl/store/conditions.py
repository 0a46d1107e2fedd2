"""Ordered, type-keyed collection of status conditions.

Conditions keep the order in which each type was first recorded. Updating an
existing type replaces it at its current position and only moves the
transition time when the status, reason or message actually changed.
"""

from collections.abc import Callable, Iterator
from datetime import datetime, timezone
import logging

from .status import Condition, ConditionStatus

__all__ = ["ConditionTracker", "utcnow"]

_LOGGER = logging.getLogger(__name__)


def utcnow() -> datetime:
    """Return the current time in UTC."""
    return datetime.now(timezone.utc)


class ConditionTracker:
    """Upserts conditions into a list in place.

    The list passed in is the one that is mutated, typically
    `EntryStatus.conditions`, so it stays the serialization order while an
    index from type to position serves lookups.
    """

    def __init__(
        self,
        conditions: list[Condition],
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        """Initialize the ConditionTracker."""
        self._conditions = conditions
        self._clock = clock
        self._index: dict[str, int] = {}
        for position, condition in enumerate(conditions):
            if condition.type in self._index:
                raise ValueError(f"Duplicate condition type {condition.type}")
            self._index[condition.type] = position

    def upsert(
        self,
        condition_type: str,
        status: ConditionStatus,
        reason: str,
        message: str,
    ) -> bool:
        """Add or update the condition of the given type.

        Returns True if the condition list changed.
        """
        if (position := self._index.get(condition_type)) is None:
            self._index[condition_type] = len(self._conditions)
            self._conditions.append(
                Condition(
                    type=condition_type,
                    status=status,
                    reason=reason,
                    message=message,
                    last_transition_time=self._clock(),
                )
            )
            _LOGGER.debug("Added condition %s=%s (%s)", condition_type, status, reason)
            return True

        existing = self._conditions[position]
        if (existing.status, existing.reason, existing.message) == (
            status,
            reason,
            message,
        ):
            return False

        self._conditions[position] = Condition(
            type=condition_type,
            status=status,
            reason=reason,
            message=message,
            last_transition_time=self._clock(),
        )
        _LOGGER.debug("Updated condition %s=%s (%s)", condition_type, status, reason)
        return True

    def get(self, condition_type: str) -> Condition | None:
        """Return the condition of the given type, if present."""
        if (position := self._index.get(condition_type)) is None:
            return None
        return self._conditions[position]

    def __iter__(self) -> Iterator[Condition]:
        return iter(self._conditions)

    def __len__(self) -> int:
        return len(self._conditions)
