"""Store module for the remote declarative object store."""

from abc import ABC, abstractmethod
from typing import Any

from cas_install.manifest import GroupVersionResource


class Store(ABC):
    """Abstract base class for a store of objects addressed by resource type.

    Objects are addressed by resource type descriptor, namespace and name. An
    empty namespace addresses a cluster scoped object.
    """

    @abstractmethod
    async def get(
        self, resource: GroupVersionResource, namespace: str | None, name: str
    ) -> dict[str, Any]:
        """Retrieve an object from the store.

        Raises:
            ObjectNotFoundError: If the object does not exist.
            StoreError: If the store could not serve the request.
        """

    @abstractmethod
    async def create(
        self,
        resource: GroupVersionResource,
        namespace: str | None,
        obj: dict[str, Any],
    ) -> dict[str, Any]:
        """Create a new object in the store and return the stored object.

        Raises:
            ConflictError: If the object already exists.
            StoreError: If the store could not serve the request.
        """

    @abstractmethod
    async def update(
        self,
        resource: GroupVersionResource,
        namespace: str | None,
        obj: dict[str, Any],
    ) -> dict[str, Any]:
        """Replace an existing object in the store and return the stored object.

        The stored object is overwritten in full with the given object.

        Raises:
            ObjectNotFoundError: If the object does not exist.
            StoreError: If the store could not serve the request.
        """
