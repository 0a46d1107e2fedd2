"""Key-value store clients.

The reconciler only depends on the `KeyValueClient` capability so the store
implementation can be swapped, e.g. for a fake in tests.
"""

from .client import KeyValueClient
from .redis_client import RedisKeyValueClient

__all__ = ["KeyValueClient", "RedisKeyValueClient"]
