"""Flags and helpers shared by redis-ctrl commands."""

from argparse import ArgumentParser
import logging

from redis_ctrl.client import RedisKeyValueClient
from redis_ctrl.config import RedisConfig
from redis_ctrl.exceptions import ClientUninitializedError

_LOGGER = logging.getLogger(__name__)


def add_common_flags(args: ArgumentParser) -> None:
    """Add flags for locating entries and the Redis server."""
    args.add_argument(
        "--path",
        required=True,
        help="YAML file or directory containing RedisEntry objects",
    )
    args.add_argument(
        "--redis-host",
        default=None,
        help="Redis host, overriding the REDIS_HOST environment variable",
    )
    args.add_argument(
        "--redis-port",
        type=int,
        default=None,
        help="Redis port, overriding the REDIS_PORT environment variable",
    )


def build_redis_config(
    redis_host: str | None = None, redis_port: int | None = None
) -> RedisConfig:
    """Return the Redis config from the environment with flag overrides."""
    config = RedisConfig.from_env()
    if redis_host:
        config.host = redis_host
    if redis_port:
        config.port = redis_port
    return config


async def connect_client(config: RedisConfig) -> RedisKeyValueClient:
    """Create the Redis client and run its readiness check.

    A failed check is logged and the unavailable client is still returned so
    that entries record why they could not be applied.
    """
    client = RedisKeyValueClient.from_config(config)
    try:
        await client.ping()
    except ClientUninitializedError as err:
        _LOGGER.warning("Redis readiness check failed: %s", err)
    return client
