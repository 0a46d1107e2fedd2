"""Configuration objects for redis-ctrl."""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta
import os

from .exceptions import InputException

DEFAULT_REDIS_HOST = "redis-redis-service"
DEFAULT_REDIS_PORT = 6379


@dataclass
class RedisConfig:
    """Connection settings for the Redis server."""

    host: str = DEFAULT_REDIS_HOST
    port: int = DEFAULT_REDIS_PORT
    password: str | None = None
    db: int = 0

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "RedisConfig":
        """Build the config from REDIS_HOST, REDIS_PORT, REDIS_PASSWORD and REDIS_DB."""
        env = os.environ if environ is None else environ
        try:
            port = int(env.get("REDIS_PORT") or DEFAULT_REDIS_PORT)
            db = int(env.get("REDIS_DB") or 0)
        except ValueError as err:
            raise InputException(f"Invalid Redis setting in environment: {err}") from err
        return cls(
            host=env.get("REDIS_HOST") or DEFAULT_REDIS_HOST,
            port=port,
            password=env.get("REDIS_PASSWORD") or None,
            db=db,
        )


@dataclass
class RedisEntryControllerConfig:
    """Configuration for the RedisEntryController."""

    requeue_after: timedelta = timedelta(seconds=5)
    """Delay before retrying after a store failure or unavailable client."""

    status_requeue_after: timedelta = timedelta(seconds=1)
    """Delay before retrying after the status could not be saved."""

    reconcile_timeout: timedelta | None = None
    """Deadline for a single reconcile, or None for no deadline."""
