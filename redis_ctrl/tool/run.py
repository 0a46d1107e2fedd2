"""redis-ctrl run action."""

import asyncio
import logging
import pathlib
from argparse import (
    ArgumentParser,
    _SubParsersAction as SubParsersAction,
)
from datetime import timedelta
from typing import cast

from redis_ctrl.config import RedisEntryControllerConfig
from redis_ctrl.controller import RedisEntryController, RedisEntryReconciler
from redis_ctrl.manifest import NamedResource, read_entries
from redis_ctrl.store import EntryStatus, InMemoryStore, StoreEvent
from redis_ctrl.task import TaskService

from .common import add_common_flags, build_redis_config, connect_client

_LOGGER = logging.getLogger(__name__)


def _log_status(resource_id: NamedResource, status: EntryStatus) -> None:
    if (condition := status.latest_condition()) is None:
        return
    _LOGGER.info(
        "%s is %s (%s): %s",
        resource_id.namespaced_name,
        status.state,
        condition.reason,
        condition.message,
    )


class RunAction:
    """Keep RedisEntry objects applied until interrupted."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "run",
                help="Run the controller for RedisEntry objects",
                description=(
                    "Reconcile RedisEntry objects continuously, retrying "
                    "failures until interrupted"
                ),
            ),
        )
        add_common_flags(args)
        args.add_argument(
            "--requeue-after",
            type=float,
            default=5.0,
            help="Seconds to wait before retrying a failed entry",
        )
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        path: str,
        redis_host: str | None,
        redis_port: int | None,
        requeue_after: float,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        entries = await read_entries(pathlib.Path(path))
        store = InMemoryStore()
        for entry in entries:
            store.add_object(entry)
        store.add_listener(StoreEvent.STATUS_UPDATED, _log_status)

        config = RedisEntryControllerConfig(
            requeue_after=timedelta(seconds=requeue_after)
        )
        task_service = TaskService()
        client = await connect_client(build_redis_config(redis_host, redis_port))
        if not client.available:
            task_service.create_background_task(
                client.wait_ready(config.requeue_after), name="redis-readiness"
            )
        controller = RedisEntryController(
            store,
            RedisEntryReconciler(store, client, config),
            task_service=task_service,
            error_backoff=config.requeue_after,
        )
        _LOGGER.info("Running controller for %d RedisEntry objects", len(entries))
        try:
            await asyncio.Event().wait()
        finally:
            await controller.close()
            await task_service.cancel_all()
            await client.close()
