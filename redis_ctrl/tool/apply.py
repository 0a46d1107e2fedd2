"""redis-ctrl apply action."""

import logging
import pathlib
from argparse import (
    ArgumentParser,
    _SubParsersAction as SubParsersAction,
)
from typing import Any, cast

from redis_ctrl.config import RedisEntryControllerConfig
from redis_ctrl.controller import RedisEntryReconciler
from redis_ctrl.exceptions import RedisCtrlException
from redis_ctrl.manifest import read_entries
from redis_ctrl.store import EntryState, EntryStatus, InMemoryStore

from .common import add_common_flags, build_redis_config, connect_client
from .format import PrintFormatter, YamlFormatter

_LOGGER = logging.getLogger(__name__)

COLUMNS = ["namespace", "name", "key", "state", "reason", "message"]


def _status_row(
    namespace: str, name: str, key: str, status: EntryStatus | None
) -> dict[str, Any]:
    row = {
        "namespace": namespace,
        "name": name,
        "key": key,
        "state": EntryState.UNKNOWN,
        "reason": "",
        "message": "",
    }
    if status is not None:
        row["state"] = status.state
        if condition := status.latest_condition():
            row["reason"] = condition.reason
            row["message"] = condition.message
    return row


class ApplyAction:
    """Apply RedisEntry objects to Redis once."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "apply",
                help="Apply RedisEntry objects to Redis",
                description="Reconcile each RedisEntry once and print its status",
            ),
        )
        add_common_flags(args)
        args.add_argument(
            "--output",
            "-o",
            choices=["table", "yaml"],
            default="table",
            help="Output format of the command",
        )
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        path: str,
        output: str,
        redis_host: str | None,
        redis_port: int | None,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        entries = await read_entries(pathlib.Path(path))
        if not entries:
            print("no RedisEntry objects found")
            return

        store = InMemoryStore()
        for entry in entries:
            store.add_object(entry)

        client = await connect_client(build_redis_config(redis_host, redis_port))
        reconciler = RedisEntryReconciler(store, client, RedisEntryControllerConfig())
        try:
            results = []
            for entry in entries:
                result = await reconciler.reconcile(entry.resource_id)
                if result.error is not None:
                    _LOGGER.debug(
                        "Apply of %s failed: %s", entry.namespaced_name, result.error
                    )
                results.append((entry, await store.get_status(entry.resource_id)))
        finally:
            await client.close()

        if output == "yaml":
            YamlFormatter().print(
                [
                    {
                        "name": entry.name,
                        "namespace": entry.namespace,
                        "key": entry.key,
                        "status": status.to_dict() if status else {},
                    }
                    for entry, status in results
                ]
            )
        else:
            PrintFormatter(COLUMNS).print(
                [
                    _status_row(entry.namespace, entry.name, entry.key, status)
                    for entry, status in results
                ]
            )

        if store.has_failed_resources():
            failed = [
                entry.namespaced_name
                for entry, status in results
                if status is None or status.state != EntryState.AVAILABLE
            ]
            raise RedisCtrlException(f"Failed to apply RedisEntry objects: {failed}")
