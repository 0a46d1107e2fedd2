"""RedisEntry reconciler and controller."""

from .controller import RedisEntryController
from .reconciler import ReconcileResult, RedisEntryReconciler, effective_ttl

__all__ = [
    "RedisEntryController",
    "ReconcileResult",
    "RedisEntryReconciler",
    "effective_ttl",
]
