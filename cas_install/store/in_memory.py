"""Module for in memory object store."""

import copy
import logging
from typing import Any

from cas_install.exceptions import (
    ConflictError,
    InvalidArgumentError,
    ObjectNotFoundError,
)
from cas_install.manifest import GroupVersionResource

from .store import Store


_LOGGER = logging.getLogger(__name__)

ObjectKey = tuple[GroupVersionResource, str, str]


def _object_name(obj: dict[str, Any]) -> str:
    metadata = obj.get("metadata") or {}
    if not (name := metadata.get("name")):
        raise InvalidArgumentError(f"Object must have metadata.name: {obj}")
    return name


class InMemoryStore(Store):
    """In-memory implementation of the Store interface.

    Objects are copied on the way in and out so callers never share state
    with the store.
    """

    def __init__(self) -> None:
        """Initialize the InMemoryStore."""
        self._objects: dict[ObjectKey, dict[str, Any]] = {}

    @staticmethod
    def _key(
        resource: GroupVersionResource, namespace: str | None, name: str
    ) -> ObjectKey:
        return (resource, namespace or "", name)

    async def get(
        self, resource: GroupVersionResource, namespace: str | None, name: str
    ) -> dict[str, Any]:
        """Retrieve an object from the store."""
        if (obj := self._objects.get(self._key(resource, namespace, name))) is None:
            raise ObjectNotFoundError(
                f"Object {resource} {namespace or ''}/{name} not found"
            )
        return copy.deepcopy(obj)

    async def create(
        self,
        resource: GroupVersionResource,
        namespace: str | None,
        obj: dict[str, Any],
    ) -> dict[str, Any]:
        """Create a new object in the store."""
        key = self._key(resource, namespace, _object_name(obj))
        if key in self._objects:
            raise ConflictError(
                f"Object {resource} {namespace or ''}/{key[2]} already exists"
            )
        _LOGGER.debug("Creating object %s %s/%s", resource, key[1], key[2])
        self._objects[key] = copy.deepcopy(obj)
        return copy.deepcopy(obj)

    async def update(
        self,
        resource: GroupVersionResource,
        namespace: str | None,
        obj: dict[str, Any],
    ) -> dict[str, Any]:
        """Replace an existing object in the store."""
        key = self._key(resource, namespace, _object_name(obj))
        if key not in self._objects:
            raise ObjectNotFoundError(
                f"Object {resource} {namespace or ''}/{key[2]} not found"
            )
        _LOGGER.debug("Updating object %s %s/%s", resource, key[1], key[2])
        self._objects[key] = copy.deepcopy(obj)
        return copy.deepcopy(obj)

    def add_object(
        self, resource: GroupVersionResource, namespace: str | None, obj: dict[str, Any]
    ) -> None:
        """Seed the store with an object, replacing any existing one."""
        key = self._key(resource, namespace, _object_name(obj))
        self._objects[key] = copy.deepcopy(obj)

    def list_objects(
        self, resource: GroupVersionResource | None = None
    ) -> list[dict[str, Any]]:
        """List all objects in the store, optionally filtered by resource type."""
        return [
            copy.deepcopy(obj)
            for (obj_resource, _, _), obj in self._objects.items()
            if resource is None or obj_resource == resource
        ]
