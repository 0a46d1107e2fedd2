"""
The store module tracks declared RedisEntry objects and the status the
controller observes for each of them.

- Uses NamedResource as the key for all objects.
- Stores values as dataclass instances from manifest.py for type safety.
- Provides the lookup and status persistence used by the reconciler, and
  change events used to decide when to reconcile.

This abstract interface allows for various implementations (in-memory, API
backed, etc.).
"""

from .store import Store, StoreEvent
from .in_memory import InMemoryStore
from .conditions import ConditionTracker
from .status import (
    Condition,
    ConditionReason,
    ConditionStatus,
    ConditionType,
    EntryState,
    EntryStatus,
)

__all__ = [
    "Store",
    "StoreEvent",
    "InMemoryStore",
    "ConditionTracker",
    "Condition",
    "ConditionReason",
    "ConditionStatus",
    "ConditionType",
    "EntryState",
    "EntryStatus",
]
