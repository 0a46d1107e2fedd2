"""Module for in memory object store."""

import copy
import dataclasses
from collections import defaultdict
from collections.abc import Callable
from typing import Any, TypeVar, DefaultDict

import logging

from redis_ctrl.manifest import BaseManifest, NamedResource
from redis_ctrl.exceptions import ObjectNotFoundError, StatusUpdateError

from .status import EntryState, EntryStatus
from .store import Store, StoreEvent


_LOGGER = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseManifest)
V = TypeVar("V", bound=BaseManifest | EntryStatus | None)


class InMemoryStore(Store):
    """In-memory implementation of the Store interface.

    Stores manifest objects and status keyed by NamedResource. Status values
    are copied on the way in and out so callers never share mutable state.
    """

    def __init__(self) -> None:
        """Initialize the InMemoryStore."""
        self._objects: dict[NamedResource, BaseManifest] = {}
        self._status: dict[NamedResource, EntryStatus] = {}
        self._listeners: DefaultDict[StoreEvent, list[Callable[..., None]]] = (
            defaultdict(list)
        )

    @staticmethod
    def _resource_id(obj: BaseManifest) -> NamedResource:
        if (
            not hasattr(obj, "kind")
            or not hasattr(obj, "namespace")
            or not hasattr(obj, "name")
        ):
            raise ValueError("Object must have kind, namespace, and name attributes")
        return NamedResource(obj.kind, obj.namespace, obj.name)

    def add_object(self, obj: BaseManifest) -> None:
        """Add or replace a manifest object in the store."""
        resource_id = self._resource_id(obj)
        if (existing := self._objects.get(resource_id)) is not None:
            if dataclasses.asdict(existing) == dataclasses.asdict(obj):
                _LOGGER.debug(
                    "Object %s already exists in store, skipping", resource_id
                )
                return
            _LOGGER.debug("Updating existing object %s in store", resource_id)
        else:
            _LOGGER.debug("Adding object %s to store", resource_id)

        self._objects[resource_id] = obj
        self._fire_event(StoreEvent.OBJECT_ADDED, resource_id, obj)

    def delete_object(self, resource_id: NamedResource) -> None:
        """Remove a manifest object and discard its status."""
        if self._objects.pop(resource_id, None) is None:
            _LOGGER.debug("Object %s not in store, nothing to delete", resource_id)
            return
        self._status.pop(resource_id, None)
        _LOGGER.debug("Deleted object %s from store", resource_id)
        self._fire_event(StoreEvent.OBJECT_DELETED, resource_id, None)

    async def get_object(self, resource_id: NamedResource, cls: type[T]) -> T:
        """Retrieve a manifest object by resource identity and type."""
        if (obj := self._objects.get(resource_id)) is None:
            raise ObjectNotFoundError(f"Object {resource_id} not found")
        if not isinstance(obj, cls):
            raise ValueError(
                f"Object {resource_id.namespaced_name} is not of type {cls.__name__} (was {obj.__class__.__name__})"
            )
        return obj

    async def update_status(
        self, resource_id: NamedResource, status: EntryStatus
    ) -> None:
        """Persist the observed status for a resource."""
        if resource_id not in self._objects:
            raise StatusUpdateError(
                resource_id.namespaced_name, "object no longer exists"
            )
        _LOGGER.debug(
            "Updating status for resource %s to %s",
            resource_id.namespaced_name,
            status.state,
        )
        self._status[resource_id] = copy.deepcopy(status)
        self._fire_event(
            StoreEvent.STATUS_UPDATED, resource_id, copy.deepcopy(status)
        )

    async def get_status(self, resource_id: NamedResource) -> EntryStatus | None:
        """Retrieve the observed status for a resource."""
        if (status := self._status.get(resource_id)) is None:
            return None
        return copy.deepcopy(status)

    def has_failed_resources(self) -> bool:
        """Check if any resources in the store are in an error state."""
        return any(
            status.state == EntryState.ERROR for status in self._status.values()
        )

    def add_listener(
        self,
        event: StoreEvent,
        callback: Callable[[NamedResource, V], None],
        flush: bool = False,
    ) -> Callable[[], None]:
        """Register a callback for a specific event (object added or deleted, status updated)."""

        def remove() -> None:
            if callback in self._listeners[event]:
                self._listeners[event].remove(callback)

        self._listeners[event].append(callback)

        if flush:
            _LOGGER.debug("Flushing objects for event type %s", event)
            for rid, obj in list(self._objects.items()):
                if event == StoreEvent.OBJECT_ADDED:
                    callback(rid, obj)  # type: ignore[arg-type]
                elif event == StoreEvent.STATUS_UPDATED:
                    if status := self._status.get(rid):
                        callback(rid, copy.deepcopy(status))  # type: ignore[arg-type]

        return remove

    def _fire_event(self, event: StoreEvent, *args: Any) -> None:
        for cb in list(self._listeners[event]):  # Iterate over a copy for safe removal
            try:
                cb(*args)
            except Exception:
                _LOGGER.exception("Store listener callback failed for event %s", event)
