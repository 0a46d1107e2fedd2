"""Key-value client capability used by the reconciler."""

from abc import ABC, abstractmethod
from datetime import timedelta

__all__ = ["KeyValueClient"]


class KeyValueClient(ABC):
    """Abstract capability for writing keys to an external key-value store.

    Implementations own their connection lifecycle and must be safe to share
    between concurrent reconciles.
    """

    @property
    @abstractmethod
    def available(self) -> bool:
        """Return True if the client is connected and ready for writes."""

    @abstractmethod
    async def set(self, key: str, value: str, ttl: timedelta | None = None) -> None:
        """Set the key to the value, expiring after ttl if given.

        Raises:
            ClientUninitializedError: If the client is not connected.
            KeyValueClientError: If the store rejected or failed the write.
        """

    @abstractmethod
    async def close(self) -> None:
        """Release any connections held by the client."""
