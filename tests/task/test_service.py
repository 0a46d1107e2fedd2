"""Tests for the TaskService."""

import asyncio
import logging
from typing import Any

import pytest

from redis_ctrl.task import TaskService

_LOGGER = logging.getLogger(__name__)


@pytest.fixture
def task_service() -> TaskService:
    """Fixture for creating a TaskService instance."""
    return TaskService()


async def test_create_and_complete_task(task_service: TaskService) -> None:
    """Test a completed task is no longer tracked."""

    async def test_task() -> Any:
        await asyncio.sleep(0.01)
        return "done"

    task = task_service.create_task(test_task(), name="test")
    assert not task.done()

    assert await task == "done"
    async with asyncio.timeout(1):
        await task_service.block_till_done()


async def test_block_till_done_waits_for_new_tasks(task_service: TaskService) -> None:
    """Test tasks created while waiting are waited for too."""
    finished: list[str] = []

    async def child() -> None:
        await asyncio.sleep(0.01)
        finished.append("child")

    async def parent() -> None:
        await asyncio.sleep(0.01)
        task_service.create_task(child())
        finished.append("parent")

    task_service.create_task(parent())
    await task_service.block_till_done()

    assert finished == ["parent", "child"]


async def test_block_till_done_ignores_background_tasks(
    task_service: TaskService,
) -> None:
    """Test background tasks do not block waiting for active tasks."""
    task = task_service.create_background_task(asyncio.sleep(10))

    async with asyncio.timeout(1):
        await task_service.block_till_done()

    assert not task.done()
    await task_service.cancel_all()
    assert task.cancelled()


async def test_task_failure(
    task_service: TaskService, caplog: pytest.LogCaptureFixture
) -> None:
    """Test a failed task is logged and does not break waiting."""

    async def failing_task() -> Any:
        await asyncio.sleep(0.01)
        raise ValueError("Test error")

    task = task_service.create_task(failing_task(), name="failing")
    await task_service.block_till_done()

    assert isinstance(task.exception(), ValueError)
    assert "Task failing failed: Test error" in caplog.text


async def test_cancel_all(task_service: TaskService) -> None:
    """Test cancelling every tracked task."""
    tasks = [task_service.create_task(asyncio.sleep(10)) for _ in range(3)]

    await task_service.cancel_all()

    assert all(task.cancelled() for task in tasks)
