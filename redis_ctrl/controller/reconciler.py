"""
RedisEntry reconciler.

A single reconcile drives the key-value store toward one declared RedisEntry
and records the outcome as conditions on the entry's observed status.

Steps:
    1. Look up the declared entry and its current status. A missing entry has
       been deleted and is a successful no-op.
    2. Check the key-value client is ready. If not, record an Error condition
       and ask to be requeued.
    3. Write the key with the effective TTL.
    4. Record an Available or Error condition and save the status.

The store write always happens before the status write so the status never
describes a write that is still in flight. A reconcile that runs past its
deadline records an Error condition once it has been stopped. Retries are requested through
`ReconcileResult.requeue_after`; no retry loop or sleep happens here.
"""

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta
import logging

from redis_ctrl.client import KeyValueClient
from redis_ctrl.config import RedisEntryControllerConfig
from redis_ctrl.exceptions import (
    ClientUninitializedError,
    KeyValueClientError,
    ObjectNotFoundError,
    ReconcileTimeoutError,
    StatusUpdateError,
)
from redis_ctrl.manifest import NamedResource, RedisEntry
from redis_ctrl.store import (
    ConditionReason,
    ConditionStatus,
    ConditionTracker,
    ConditionType,
    EntryStatus,
    Store,
)
from redis_ctrl.store.conditions import utcnow

__all__ = ["ReconcileResult", "RedisEntryReconciler", "SUCCESS_MESSAGE"]

_LOGGER = logging.getLogger(__name__)

SUCCESS_MESSAGE = "key-value pair successfully set"
CLIENT_UNINITIALIZED_MESSAGE = "key-value client is not initialized"


@dataclass(frozen=True)
class ReconcileResult:
    """Outcome of a single reconcile."""

    requeue_after: timedelta | None = None
    """Delay before the entry should be reconciled again, if at all."""

    error: Exception | None = None
    """The failure to report to the caller, if any."""

    @property
    def requeue(self) -> bool:
        """Return True if another reconcile was requested."""
        return self.requeue_after is not None


def effective_ttl(entry: RedisEntry) -> timedelta | None:
    """Return the expiry for the entry, or None if the key should not expire."""
    if not entry.ttl:
        return None
    return timedelta(seconds=entry.ttl)


class RedisEntryReconciler:
    """Reconciles RedisEntry resources against a key-value store."""

    def __init__(
        self,
        store: Store,
        client: KeyValueClient,
        config: RedisEntryControllerConfig | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        """
        Initialize the reconciler.

        Args:
            store: Holds the declared entries and persists their status
            client: The key-value store capability that keys are written to
            config: Requeue delays and the reconcile deadline
            clock: Source of timestamps for conditions and lastUpdated
        """
        self._store = store
        self._client = client
        self._config = config or RedisEntryControllerConfig()
        self._clock = clock

    async def reconcile(self, resource_id: NamedResource) -> ReconcileResult:
        """Reconcile the RedisEntry with the given identity.

        Cancellation propagates as `asyncio.CancelledError`; nothing is
        written after the point of cancellation.
        """
        _LOGGER.info("Reconciling %s", resource_id)
        if (timeout := self._config.reconcile_timeout) is None:
            return await self._reconcile(resource_id)
        try:
            async with asyncio.timeout(timeout.total_seconds()):
                return await self._reconcile(resource_id)
        except TimeoutError:
            _LOGGER.error(
                "Timeout (%s sec) reconciling %s",
                timeout.total_seconds(),
                resource_id.namespaced_name,
            )
            error = ReconcileTimeoutError(
                f"Reconcile of {resource_id.namespaced_name} exceeded {timeout}"
            )
            await self._record_timeout(resource_id, str(error))
            return ReconcileResult(
                requeue_after=self._config.requeue_after, error=error
            )

    async def _reconcile(self, resource_id: NamedResource) -> ReconcileResult:
        try:
            entry = await self._store.get_object(resource_id, RedisEntry)
            status = await self._store.get_status(resource_id) or EntryStatus()
        except ObjectNotFoundError:
            _LOGGER.info(
                "RedisEntry %s not found, ignoring since it must be deleted",
                resource_id.namespaced_name,
            )
            return ReconcileResult()
        except Exception as err:
            _LOGGER.error("Failed to read RedisEntry %s: %s", resource_id, err)
            return ReconcileResult(error=err)

        conditions = ConditionTracker(status.conditions, clock=self._clock)

        if not self._client.available:
            return await self._client_uninitialized(resource_id, status, conditions)

        ttl = effective_ttl(entry)
        _LOGGER.debug(
            "Setting key %s for %s (ttl=%s)", entry.key, resource_id.namespaced_name, ttl
        )
        try:
            await self._client.set(entry.key, entry.value, ttl)
        except ClientUninitializedError:
            return await self._client_uninitialized(resource_id, status, conditions)
        except KeyValueClientError as err:
            _LOGGER.error(
                "Failed to set key %s for %s: %s",
                entry.key,
                resource_id.namespaced_name,
                err.detail,
            )
            conditions.upsert(
                ConditionType.ERROR,
                ConditionStatus.TRUE,
                ConditionReason.REDIS_ERROR,
                err.detail,
            )
            return await self._save_status(
                resource_id,
                status,
                ReconcileResult(requeue_after=self._config.requeue_after, error=err),
            )

        conditions.upsert(
            ConditionType.AVAILABLE,
            ConditionStatus.TRUE,
            ConditionReason.SUCCESS,
            SUCCESS_MESSAGE,
        )
        status.last_updated = self._clock()
        status.current_value = entry.value
        result = await self._save_status(resource_id, status, ReconcileResult())
        if result.error is None:
            _LOGGER.info(
                "Successfully reconciled %s (key %s)",
                resource_id.namespaced_name,
                entry.key,
            )
        return result

    async def _client_uninitialized(
        self,
        resource_id: NamedResource,
        status: EntryStatus,
        conditions: ConditionTracker,
    ) -> ReconcileResult:
        _LOGGER.warning(
            "Key-value client unavailable, requeueing %s", resource_id.namespaced_name
        )
        conditions.upsert(
            ConditionType.ERROR,
            ConditionStatus.TRUE,
            ConditionReason.CLIENT_UNINITIALIZED,
            CLIENT_UNINITIALIZED_MESSAGE,
        )
        return await self._save_status(
            resource_id,
            status,
            ReconcileResult(requeue_after=self._config.requeue_after),
        )

    async def _record_timeout(self, resource_id: NamedResource, message: str) -> None:
        """Record an Error condition for a reconcile that ran out of time.

        This runs after the deadline so it is best effort: a failure here is
        logged and the timeout is still reported to the caller.
        """
        try:
            status = await self._store.get_status(resource_id) or EntryStatus()
        except Exception as err:
            _LOGGER.error("Failed to read status for %s: %s", resource_id, err)
            return
        ConditionTracker(status.conditions, clock=self._clock).upsert(
            ConditionType.ERROR,
            ConditionStatus.TRUE,
            ConditionReason.TIMEOUT,
            message,
        )
        try:
            await self._store.update_status(resource_id, status)
        except StatusUpdateError as err:
            _LOGGER.error("Failed to update status for %s: %s", resource_id, err)

    async def _save_status(
        self,
        resource_id: NamedResource,
        status: EntryStatus,
        result: ReconcileResult,
    ) -> ReconcileResult:
        """Persist the status, replacing the result if the write fails."""
        try:
            await self._store.update_status(resource_id, status)
        except StatusUpdateError as err:
            _LOGGER.error("Failed to update status for %s: %s", resource_id, err)
            return ReconcileResult(
                requeue_after=self._config.status_requeue_after, error=err
            )
        return result
