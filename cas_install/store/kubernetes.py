"""Store backed by a Kubernetes API server.

The dynamic client from the `kubernetes` package is used so that any custom
resource can be addressed by its group, version and plural resource name. The
client is blocking so every call is run in a worker thread.
"""

import asyncio
import logging
from collections.abc import Callable
from functools import cache
from typing import Any

from kubernetes import config as kube_config
from kubernetes.client import ApiClient
from kubernetes.client.exceptions import ApiException
from kubernetes.config.config_exception import ConfigException
from kubernetes.dynamic import DynamicClient
from kubernetes.dynamic.exceptions import (
    ConflictError as KubeConflictError,
    DynamicApiError,
    NotFoundError,
    ResourceNotFoundError,
    ResourceNotUniqueError,
)
from kubernetes.dynamic.resource import Resource
from urllib3.exceptions import HTTPError

from cas_install.exceptions import ConflictError, ObjectNotFoundError, StoreError
from cas_install.manifest import GroupVersionResource

from .store import Store

__all__ = [
    "KubernetesStore",
    "new_dynamic_client",
]

_LOGGER = logging.getLogger(__name__)

# Failures raised by the client for anything other than a well formed response
CLIENT_ERRORS = (ApiException, DynamicApiError, HTTPError, OSError)


def new_dynamic_client(
    kubeconfig: str | None = None, context: str | None = None
) -> DynamicClient:
    """Create a dynamic client from a kubeconfig or the in-cluster config."""
    try:
        if kubeconfig or context:
            kube_config.load_kube_config(config_file=kubeconfig, context=context)
        else:
            try:
                kube_config.load_incluster_config()
            except ConfigException:
                kube_config.load_kube_config()
    except ConfigException as err:
        raise StoreError(f"Failed to load kubernetes configuration: {err}") from err
    try:
        return DynamicClient(ApiClient())
    except CLIENT_ERRORS as err:
        raise StoreError(f"Failed to discover kubernetes API: {err}") from err


class KubernetesStore(Store):
    """Store implementation talking to a Kubernetes API server."""

    def __init__(self, client_factory: Callable[[], DynamicClient]) -> None:
        """Initialize the KubernetesStore.

        Args:
            client_factory: Creates the dynamic client on first use. Creating
                the client performs API discovery so it is deferred.
        """
        self._client_factory = cache(client_factory)

    def _resource(self, resource: GroupVersionResource) -> Resource:
        try:
            client = self._client_factory()
            return client.resources.get(
                group=resource.group, api_version=resource.version, name=resource.resource
            )
        except (ResourceNotFoundError, ResourceNotUniqueError) as err:
            raise StoreError(
                f"Resource type {resource} can't be resolved: {err}"
            ) from err
        except CLIENT_ERRORS as err:
            raise StoreError(
                f"Failed to discover resource type {resource}: {err}"
            ) from err

    @staticmethod
    def _namespace(api: Resource, namespace: str | None) -> str | None:
        if not api.namespaced:
            return None
        return namespace or None

    def _get(
        self, resource: GroupVersionResource, namespace: str | None, name: str
    ) -> dict[str, Any]:
        api = self._resource(resource)
        try:
            result = api.get(name=name, namespace=self._namespace(api, namespace))
        except NotFoundError as err:
            raise ObjectNotFoundError(
                f"Object {resource} {namespace or ''}/{name} not found"
            ) from err
        except CLIENT_ERRORS as err:
            raise StoreError(
                f"Failed to get object {resource} {namespace or ''}/{name}: {err}"
            ) from err
        return result.to_dict()

    def _create(
        self,
        resource: GroupVersionResource,
        namespace: str | None,
        obj: dict[str, Any],
    ) -> dict[str, Any]:
        api = self._resource(resource)
        name = obj.get("metadata", {}).get("name")
        try:
            result = api.create(body=obj, namespace=self._namespace(api, namespace))
        except KubeConflictError as err:
            raise ConflictError(
                f"Object {resource} {namespace or ''}/{name} already exists"
            ) from err
        except CLIENT_ERRORS as err:
            raise StoreError(
                f"Failed to create object {resource} {namespace or ''}/{name}: {err}"
            ) from err
        return result.to_dict()

    def _update(
        self,
        resource: GroupVersionResource,
        namespace: str | None,
        obj: dict[str, Any],
    ) -> dict[str, Any]:
        api = self._resource(resource)
        metadata = obj.get("metadata", {})
        name = metadata.get("name")
        scope = self._namespace(api, namespace)
        try:
            if not metadata.get("resourceVersion"):
                # A replace is only accepted against the live version
                live = api.get(name=name, namespace=scope)
                obj = {
                    **obj,
                    "metadata": {
                        **metadata,
                        "resourceVersion": live.metadata.resourceVersion,
                    },
                }
            result = api.replace(body=obj, namespace=scope)
        except NotFoundError as err:
            raise ObjectNotFoundError(
                f"Object {resource} {namespace or ''}/{name} not found"
            ) from err
        except CLIENT_ERRORS as err:
            raise StoreError(
                f"Failed to update object {resource} {namespace or ''}/{name}: {err}"
            ) from err
        return result.to_dict()

    async def get(
        self, resource: GroupVersionResource, namespace: str | None, name: str
    ) -> dict[str, Any]:
        """Retrieve an object from the API server."""
        _LOGGER.debug("Getting %s %s/%s", resource, namespace or "", name)
        return await asyncio.to_thread(self._get, resource, namespace, name)

    async def create(
        self,
        resource: GroupVersionResource,
        namespace: str | None,
        obj: dict[str, Any],
    ) -> dict[str, Any]:
        """Create an object on the API server."""
        _LOGGER.debug("Creating %s in namespace %s", resource, namespace or "")
        return await asyncio.to_thread(self._create, resource, namespace, obj)

    async def update(
        self,
        resource: GroupVersionResource,
        namespace: str | None,
        obj: dict[str, Any],
    ) -> dict[str, Any]:
        """Replace an object on the API server."""
        _LOGGER.debug("Replacing %s in namespace %s", resource, namespace or "")
        return await asyncio.to_thread(self._update, resource, namespace, obj)
