"""Store module for holding declared entries and their observed status."""

from abc import ABC, abstractmethod
from collections.abc import Callable
from enum import Enum
from typing import TypeVar

from redis_ctrl.manifest import BaseManifest, NamedResource

from .status import EntryStatus

T = TypeVar("T", bound=BaseManifest)
V = TypeVar("V", bound=BaseManifest | EntryStatus | None)


class StoreEvent(str, Enum):
    """Enum for store events."""

    OBJECT_ADDED = "object_added"
    OBJECT_DELETED = "object_deleted"
    STATUS_UPDATED = "status_updated"


class Store(ABC):
    """Abstract base class for the declared entry and status store with listener support.

    Reads and status writes used during a reconcile are coroutines so that an
    implementation backed by a remote API can be cancelled mid-call.
    """

    @abstractmethod
    def add_object(self, obj: BaseManifest) -> None:
        """Add or replace a manifest object in the store."""

    @abstractmethod
    def delete_object(self, resource_id: NamedResource) -> None:
        """Remove a manifest object and discard its status."""

    @abstractmethod
    async def get_object(self, resource_id: NamedResource, cls: type[T]) -> T:
        """Retrieve a manifest object by resource identity and type.

        Raises:
            ObjectNotFoundError: If the object does not exist.
        """

    @abstractmethod
    async def update_status(
        self, resource_id: NamedResource, status: EntryStatus
    ) -> None:
        """Persist the observed status for a resource.

        Raises:
            StatusUpdateError: If the status could not be saved.
        """

    @abstractmethod
    async def get_status(self, resource_id: NamedResource) -> EntryStatus | None:
        """Retrieve the observed status for a resource."""

    @abstractmethod
    def has_failed_resources(self) -> bool:
        """Check if any resources in the store are in an error state."""

    @abstractmethod
    def add_listener(
        self,
        event: StoreEvent,
        callback: Callable[[NamedResource, V], None],
        flush: bool = False,
    ) -> Callable[[], None]:
        """Register a callback for a specific event (object added or deleted, status updated).

        Returns a callable that can be called to remove the listener.
        """
