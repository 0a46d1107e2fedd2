"""Observed status information for a RedisEntry."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum

from mashumaro import DataClassDictMixin, field_options
from mashumaro.config import BaseConfig

__all__ = [
    "ConditionStatus",
    "ConditionType",
    "ConditionReason",
    "Condition",
    "EntryState",
    "EntryStatus",
]


class ConditionStatus(StrEnum):
    """Tri-state status of a condition."""

    TRUE = "True"
    FALSE = "False"
    UNKNOWN = "Unknown"


class ConditionType(StrEnum):
    """Condition types recorded by the controller."""

    AVAILABLE = "Available"
    ERROR = "Error"


class ConditionReason(StrEnum):
    """Machine readable reasons recorded on conditions."""

    SUCCESS = "Success"
    REDIS_ERROR = "RedisError"
    CLIENT_UNINITIALIZED = "ClientUninitialized"
    TIMEOUT = "ReconcileTimeout"


class EntryState(StrEnum):
    """Externally observed state of an entry."""

    UNKNOWN = "Unknown"
    AVAILABLE = "Available"
    ERROR = "Error"


@dataclass
class Condition(DataClassDictMixin):
    """One fact about the health of an entry."""

    type: str
    status: ConditionStatus
    reason: str
    message: str
    last_transition_time: datetime = field(
        metadata=field_options(alias="lastTransitionTime")
    )

    class Config(BaseConfig):
        serialize_by_alias = True


@dataclass
class EntryStatus(DataClassDictMixin):
    """The controller's account of reality for one RedisEntry.

    Only `conditions` is updated on a failed apply; `last_updated` and
    `current_value` track the last successful write.
    """

    conditions: list[Condition] = field(default_factory=list)
    last_updated: datetime | None = field(
        metadata=field_options(alias="lastUpdated"), default=None
    )
    current_value: str | None = field(
        metadata=field_options(alias="currentValue"), default=None
    )

    def get_condition(self, condition_type: str) -> Condition | None:
        """Return the condition of the given type, if present."""
        for condition in self.conditions:
            if condition.type == condition_type:
                return condition
        return None

    def latest_condition(self) -> Condition | None:
        """Return the most recently transitioned Available or Error condition.

        When both transitioned at the same time the Error condition is
        returned, so an entry is never reported healthy on a tie.
        """
        candidates = [
            condition
            for condition in self.conditions
            if condition.type in (ConditionType.AVAILABLE, ConditionType.ERROR)
            and condition.status == ConditionStatus.TRUE
        ]
        if not candidates:
            return None
        return max(
            candidates,
            key=lambda c: (c.last_transition_time, c.type == ConditionType.ERROR),
        )

    @property
    def state(self) -> EntryState:
        """Return the state derived from the latest assessment."""
        if (condition := self.latest_condition()) is None:
            return EntryState.UNKNOWN
        return EntryState(condition.type)

    class Config(BaseConfig):
        omit_none = True
        serialize_by_alias = True
