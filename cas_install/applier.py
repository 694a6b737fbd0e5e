"""Library for applying structured objects to the remote store.

Applying an object is an idempotent upsert: the object is fetched by name and
then either created when it is absent or overwritten in full when present.
Running the same apply again converges the store on the desired object.

The applier is composed of three primitives (get, create, update) that are
injected at construction so that each can be substituted independently, for
example with fakes in tests. The `new_resource_*` functions build the
primitives against a `Store` for a single resource type and namespace.

Any error from the get primitive other than the object not being found is
raised as is without attempting a write, since it can't be told apart from the
store being unavailable.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
import logging

from .exceptions import (
    InvalidArgumentError,
    MisconfiguredApplierError,
    ObjectNotFoundError,
)
from .manifest import GroupVersionResource, Unstructured
from .store import Store

__all__ = [
    "ResourceGetter",
    "ResourceCreator",
    "ResourceUpdater",
    "ResourceApplyOptions",
    "ResourceApplier",
    "new_resource_getter",
    "new_resource_creator",
    "new_resource_updater",
    "new_resource_applier",
]

_LOGGER = logging.getLogger(__name__)


ResourceGetter = Callable[[str], Awaitable[Unstructured]]
ResourceCreator = Callable[[Unstructured], Awaitable[Unstructured]]
ResourceUpdater = Callable[[Unstructured], Awaitable[Unstructured]]


@dataclass
class ResourceApplyOptions:
    """The primitives used by a resource applier."""

    getter: ResourceGetter | None = None
    creator: ResourceCreator | None = None
    updater: ResourceUpdater | None = None


def _check_object(obj: Unstructured | None, action: str) -> Unstructured:
    if obj is None:
        raise InvalidArgumentError(f"Nil resource instance: failed to {action} resource")
    if not (obj.name or "").strip():
        raise InvalidArgumentError(
            f"Missing resource name: failed to {action} resource {obj.resource_id}"
        )
    return obj


class ResourceApplier:
    """Applies objects that may or may not already exist in the store."""

    def __init__(self, options: ResourceApplyOptions) -> None:
        """Initialize the ResourceApplier.

        Raises:
            MisconfiguredApplierError: If any of the primitives is missing.
        """
        for attr in ("getter", "creator", "updater"):
            if getattr(options, attr) is None:
                raise MisconfiguredApplierError(
                    f"Nil resource {attr} instance: failed to build resource applier"
                )
        self._options = options

    async def apply(self, obj: Unstructured | None) -> Unstructured:
        """Create or update the object and return the stored object.

        Raises:
            InvalidArgumentError: If the object is missing, has no name or no
                resource type descriptor.
            StoreError: If the store fails to get, create or update the object.
        """
        obj = _check_object(obj, "apply")
        if obj.resource is None:
            raise InvalidArgumentError(
                f"Missing resource type: failed to apply resource {obj.resource_id}"
            )
        name = obj.name or ""
        try:
            await self._options.getter(name)  # type: ignore[misc]
        except ObjectNotFoundError:
            _LOGGER.debug("Creating resource %s", obj.resource_id)
            return await self._options.creator(obj)  # type: ignore[misc]
        _LOGGER.debug("Updating resource %s", obj.resource_id)
        return await self._options.updater(obj)  # type: ignore[misc]


def new_resource_getter(
    store: Store, resource: GroupVersionResource, namespace: str | None
) -> ResourceGetter:
    """Return a getter that fetches objects of a resource type from the store."""

    async def get(name: str) -> Unstructured:
        if not name.strip():
            raise InvalidArgumentError("Missing resource name: failed to get resource")
        return Unstructured(
            obj=await store.get(resource, namespace, name), resource=resource
        )

    return get


def new_resource_creator(
    store: Store, resource: GroupVersionResource, namespace: str | None
) -> ResourceCreator:
    """Return a creator that adds objects of a resource type to the store."""

    async def create(obj: Unstructured) -> Unstructured:
        obj = _check_object(obj, "create")
        return Unstructured(
            obj=await store.create(resource, namespace, obj.to_dict()),
            resource=resource,
        )

    return create


def new_resource_updater(
    store: Store, resource: GroupVersionResource, namespace: str | None
) -> ResourceUpdater:
    """Return an updater that overwrites objects of a resource type in the store."""

    async def update(obj: Unstructured) -> Unstructured:
        obj = _check_object(obj, "update")
        return Unstructured(
            obj=await store.update(resource, namespace, obj.to_dict()),
            resource=resource,
        )

    return update


def new_resource_applier(
    store: Store, resource: GroupVersionResource, namespace: str | None
) -> ResourceApplier:
    """Return an applier for objects of a resource type in a namespace."""
    return ResourceApplier(
        ResourceApplyOptions(
            getter=new_resource_getter(store, resource, namespace),
            creator=new_resource_creator(store, resource, namespace),
            updater=new_resource_updater(store, resource, namespace),
        )
    )
