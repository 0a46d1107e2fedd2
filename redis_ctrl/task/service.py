"""Task tracking service for redis-ctrl.

Reconcile tasks are tracked so that callers can wait for the controller to go
idle, and long running watch tasks are tracked separately so they do not block
that wait.
"""

import asyncio
from functools import partial
import logging
from typing import Any, Coroutine

_LOGGER = logging.getLogger(__name__)

__all__ = ["TaskService"]


class TaskService:
    """Service for tracking and waiting for asynchronous tasks."""

    def __init__(self) -> None:
        """Initialize the task service."""
        self._active_tasks: set[asyncio.Task[Any]] = set()
        self._background_tasks: set[asyncio.Task[Any]] = set()

    def create_task(
        self, coro: Coroutine[None, None, Any], name: str | None = None
    ) -> asyncio.Task[Any]:
        """Create a task that `block_till_done` will wait for."""
        return self._track(self._active_tasks, asyncio.create_task(coro, name=name))

    def create_background_task(
        self, coro: Coroutine[None, None, Any], name: str | None = None
    ) -> asyncio.Task[Any]:
        """Create a long running task that `block_till_done` ignores."""
        return self._track(
            self._background_tasks, asyncio.create_task(coro, name=name)
        )

    def _track(
        self, task_set: set[asyncio.Task[Any]], task: asyncio.Task[Any]
    ) -> asyncio.Task[Any]:
        task_set.add(task)
        task.add_done_callback(partial(self._task_done, task_set))
        return task

    def _task_done(
        self, task_set: set[asyncio.Task[Any]], task: asyncio.Task[Any]
    ) -> None:
        task_set.discard(task)
        if task.cancelled():
            return
        if (err := task.exception()) is not None:
            _LOGGER.error("Task %s failed: %s", task.get_name(), err)

    async def block_till_done(self) -> None:
        """Wait until no tracked non-background tasks remain.

        Tasks created while waiting are waited for as well.
        """
        while active_tasks := list(self._active_tasks):
            _LOGGER.debug("Waiting for %d tasks to complete", len(active_tasks))
            await asyncio.gather(*active_tasks, return_exceptions=True)
        await asyncio.sleep(0)

    async def cancel_all(self) -> None:
        """Cancel every tracked task and wait for them to finish."""
        tasks = list(self._active_tasks | self._background_tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
