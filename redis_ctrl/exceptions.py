"""Exceptions related to redis-ctrl."""

__all__ = [
    "RedisCtrlException",
    "InputException",
    "ObjectNotFoundError",
    "ClientUninitializedError",
    "KeyValueClientError",
    "StatusUpdateError",
    "ReconcileTimeoutError",
]


class RedisCtrlException(Exception):
    """Generic base exception used for this library."""


class InputException(RedisCtrlException):
    """Raised when the input files or values are not formatted as expected."""


class ObjectNotFoundError(RedisCtrlException):
    """Raised when an object is not found in the store."""


class ClientUninitializedError(RedisCtrlException):
    """Raised when the key-value client has not been connected."""


class KeyValueClientError(RedisCtrlException):
    """Raised when a write to the key-value store fails.

    The message holds the failure detail reported by the store so callers
    never depend on the client library's own error types.
    """

    def __init__(self, key: str, detail: str) -> None:
        super().__init__(detail)
        self.key = key
        self.detail = detail


class StatusUpdateError(RedisCtrlException):
    """Raised when the observed status for a resource could not be saved."""

    def __init__(self, resource_name: str, message: str | None) -> None:
        super().__init__(
            f"Status update for {resource_name} failed: {message or 'Unknown error'}"
        )
        self.resource_name = resource_name
        self.message = message


class ReconcileTimeoutError(RedisCtrlException):
    """Raised when a reconcile does not finish before its deadline."""
