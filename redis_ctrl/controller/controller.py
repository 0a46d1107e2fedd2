"""
RedisEntry controller.

The controller watches the store for RedisEntry objects and runs the
reconciler for each of them. It is a small in-process stand-in for the
cluster's watch machinery:

    - At most one reconcile runs per entry at a time. A change that arrives
      while a reconcile is in flight triggers another reconcile afterwards.
    - A result that asks to be requeued is reconciled again after the
      requested delay, or sooner if the entry changes.
    - Deleting an entry cancels any pending work for it.
"""

import asyncio
from collections.abc import Callable
from datetime import timedelta
import logging

from redis_ctrl.manifest import BaseManifest, NamedResource, REDIS_ENTRY_KIND
from redis_ctrl.store import Store, StoreEvent
from redis_ctrl.task import TaskService

from .reconciler import ReconcileResult, RedisEntryReconciler

__all__ = ["RedisEntryController"]

_LOGGER = logging.getLogger(__name__)

DEFAULT_ERROR_BACKOFF = timedelta(seconds=5)


class RedisEntryController:
    """
    Controller for reconciling RedisEntry resources.

    This controller watches for RedisEntry objects in the store and schedules
    reconciles for them, honoring the requeue delays the reconciler returns.
    """

    def __init__(
        self,
        store: Store,
        reconciler: RedisEntryReconciler,
        task_service: TaskService | None = None,
        error_backoff: timedelta = DEFAULT_ERROR_BACKOFF,
    ) -> None:
        """
        Initialize the controller and start watching the store.

        Entries already in the store are scheduled immediately, so this must
        be called from a running event loop.

        Args:
            store: The store holding the declared entries
            reconciler: Performs a single reconcile for an entry
            task_service: Tracks the reconcile tasks
            error_backoff: Delay before retrying a failure that did not
                request a specific requeue delay
        """
        self._store = store
        self._reconciler = reconciler
        self._task_service = task_service or TaskService()
        self._error_backoff = error_backoff
        self._workers: dict[NamedResource, asyncio.Task[None]] = {}
        self._wakeups: dict[NamedResource, asyncio.Event] = {}
        self._results: dict[NamedResource, ReconcileResult] = {}
        self._remove_listeners: list[Callable[[], None]] = [
            self._store.add_listener(StoreEvent.OBJECT_DELETED, self._on_deleted),
            self._store.add_listener(
                StoreEvent.OBJECT_ADDED, self._on_added, flush=True
            ),
        ]

    async def close(self) -> None:
        """Stop watching the store and cancel all pending reconciles."""
        _LOGGER.info("Closing RedisEntryController, cancelling tasks")
        for remove in self._remove_listeners:
            remove()
        self._remove_listeners.clear()
        workers = list(self._workers.values())
        for task in workers:
            task.cancel()
        await asyncio.gather(*workers, return_exceptions=True)

    def get_result(self, resource_id: NamedResource) -> ReconcileResult | None:
        """Return the result of the most recent reconcile for the entry."""
        return self._results.get(resource_id)

    def is_reconciling(self, resource_id: NamedResource) -> bool:
        """Return True if the entry has a reconcile running or pending."""
        return resource_id in self._workers

    def _on_added(self, resource_id: NamedResource, obj: BaseManifest) -> None:
        if resource_id.kind != REDIS_ENTRY_KIND:
            return
        self.enqueue(resource_id)

    def _on_deleted(self, resource_id: NamedResource, _: None) -> None:
        if (task := self._workers.pop(resource_id, None)) is not None:
            _LOGGER.debug("Cancelling reconcile for deleted %s", resource_id)
            del self._wakeups[resource_id]
            task.cancel()
        self._results.pop(resource_id, None)

    def enqueue(self, resource_id: NamedResource) -> None:
        """Request a reconcile of the entry."""
        if resource_id in self._workers:
            _LOGGER.debug("Reconcile for %s already scheduled", resource_id)
            self._wakeups[resource_id].set()
            return
        self._wakeups[resource_id] = asyncio.Event()
        self._workers[resource_id] = self._task_service.create_task(
            self._run(resource_id), name=f"reconcile-{resource_id}"
        )

    def _next_delay(self, result: ReconcileResult) -> timedelta | None:
        if result.requeue_after is not None:
            return result.requeue_after
        if result.error is not None:
            return self._error_backoff
        return None

    async def _run(self, resource_id: NamedResource) -> None:
        """Reconcile an entry until it settles or is cancelled."""
        wakeup = self._wakeups[resource_id]
        try:
            while True:
                wakeup.clear()
                result = await self._reconciler.reconcile(resource_id)
                self._results[resource_id] = result
                if result.error is not None:
                    _LOGGER.warning(
                        "Reconcile of %s failed: %s", resource_id, result.error
                    )
                if wakeup.is_set():
                    continue
                if (delay := self._next_delay(result)) is None:
                    return
                _LOGGER.debug("Requeueing %s after %s", resource_id, delay)
                try:
                    async with asyncio.timeout(delay.total_seconds()):
                        await wakeup.wait()
                except TimeoutError:
                    pass
        finally:
            if self._workers.get(resource_id) is asyncio.current_task():
                del self._workers[resource_id]
                del self._wakeups[resource_id]
