"""Redis implementation of the key-value client."""

import asyncio
from datetime import timedelta
import logging

from redis import asyncio as aioredis
from redis.exceptions import RedisError

from redis_ctrl.config import RedisConfig
from redis_ctrl.exceptions import ClientUninitializedError, KeyValueClientError

from .client import KeyValueClient

__all__ = ["RedisKeyValueClient"]

_LOGGER = logging.getLogger(__name__)


class RedisKeyValueClient(KeyValueClient):
    """Writes keys to Redis using a shared connection pool.

    The client is not available for writes until `ping` has succeeded once.
    `wait_ready` keeps retrying the check for a server that is not up yet.
    """

    def __init__(self, redis: aioredis.Redis) -> None:
        """Initialize the client around an existing Redis connection."""
        self._redis = redis
        self._ready = False

    @classmethod
    def from_config(cls, config: RedisConfig) -> "RedisKeyValueClient":
        """Create a client from the config.

        The connection pool is created lazily, so the client is not usable
        until `ping` succeeds.
        """
        _LOGGER.info("Using Redis at %s:%s", config.host, config.port)
        return cls(
            aioredis.Redis(
                host=config.host,
                port=config.port,
                password=config.password,
                db=config.db,
                decode_responses=True,
            )
        )

    @property
    def available(self) -> bool:
        """Return True if the readiness check has passed."""
        return self._ready

    async def ping(self) -> None:
        """Check that the server responds and mark the client ready."""
        try:
            await self._redis.ping()
        except RedisError as err:
            self._ready = False
            raise ClientUninitializedError(f"Redis is not reachable: {err}") from err
        self._ready = True
        _LOGGER.debug("Redis readiness check passed")

    async def wait_ready(self, interval: timedelta) -> None:
        """Run the readiness check every interval until it passes."""
        while not self._ready:
            try:
                await self.ping()
            except ClientUninitializedError as err:
                _LOGGER.debug("Redis not ready, retrying in %s: %s", interval, err)
                await asyncio.sleep(interval.total_seconds())
        _LOGGER.info("Redis is ready")

    async def set(self, key: str, value: str, ttl: timedelta | None = None) -> None:
        """Set the key to the value, expiring after ttl if given."""
        if not self._ready:
            raise ClientUninitializedError("Redis client is not initialized")
        try:
            await self._redis.set(key, value, ex=ttl)
        except RedisError as err:
            raise KeyValueClientError(key, str(err)) from err

    async def close(self) -> None:
        """Close the connection pool."""
        self._ready = False
        await self._redis.aclose()
