"""Tests for the kubernetes store."""

from unittest.mock import MagicMock

from kubernetes.client.exceptions import ApiException
from kubernetes.dynamic.exceptions import (
    ConflictError as KubeConflictError,
    NotFoundError,
    ResourceNotFoundError,
    ResourceNotUniqueError,
    ServerTimeoutError,
)
import pytest
from urllib3.exceptions import MaxRetryError

from cas_install.exceptions import (
    ConfigUnavailableError,
    ConflictError,
    ObjectNotFoundError,
    StoreError,
)
from cas_install.applier import new_resource_applier
from cas_install.catalog import Artifact
from cas_install.exceptions import ApplyError
from cas_install.installer import Installer, simple_installer
from cas_install.manifest import (
    CAS_TEMPLATE_RESOURCE,
    RUN_TASK_RESOURCE,
    InstallConfig,
    InstallSpec,
)
from cas_install.store.kubernetes import KubernetesStore

RUN_TASK = {
    "apiVersion": "openebs.io/v1alpha1",
    "kind": "RunTask",
    "metadata": {
        "name": "cstor-volume-delete-listcstorvolumecr-default-0.7.0",
        "namespace": "openebs",
    },
    "spec": {"meta": "id: deletelistcsv\n"},
}


def api_error(cls: type, status: int, reason: str) -> Exception:
    return cls(ApiException(status=status, reason=reason))


@pytest.fixture
def api() -> MagicMock:
    api = MagicMock()
    api.namespaced = True
    return api


@pytest.fixture
def client(api: MagicMock) -> MagicMock:
    client = MagicMock()
    client.resources.get.return_value = api
    return client


@pytest.fixture
def store(client: MagicMock) -> KubernetesStore:
    return KubernetesStore(lambda: client)


async def test_get(store: KubernetesStore, client: MagicMock, api: MagicMock) -> None:
    """Test getting an object by resource type."""
    api.get.return_value.to_dict.return_value = RUN_TASK

    result = await store.get(
        RUN_TASK_RESOURCE, "openebs", "cstor-volume-delete-listcstorvolumecr-default-0.7.0"
    )

    assert result == RUN_TASK
    client.resources.get.assert_called_once_with(
        group="openebs.io", api_version="v1alpha1", name="runtasks"
    )
    api.get.assert_called_once_with(
        name="cstor-volume-delete-listcstorvolumecr-default-0.7.0", namespace="openebs"
    )


async def test_get_cluster_scoped(store: KubernetesStore, api: MagicMock) -> None:
    """Test the namespace is dropped for cluster scoped resource types."""
    api.namespaced = False
    await store.get(CAS_TEMPLATE_RESOURCE, "openebs", "cstor-volume-read-default-0.7.0")
    api.get.assert_called_once_with(
        name="cstor-volume-read-default-0.7.0", namespace=None
    )


async def test_get_not_found(store: KubernetesStore, api: MagicMock) -> None:
    """Test a missing object is reported as not found."""
    api.get.side_effect = api_error(NotFoundError, 404, "Not Found")
    with pytest.raises(ObjectNotFoundError):
        await store.get(RUN_TASK_RESOURCE, "openebs", "missing")


async def test_get_failure(store: KubernetesStore, api: MagicMock) -> None:
    """Test a failed request is reported as a store error."""
    api.get.side_effect = api_error(ServerTimeoutError, 504, "Gateway Timeout")
    with pytest.raises(StoreError) as exc_info:
        await store.get(RUN_TASK_RESOURCE, "openebs", "name")
    assert not isinstance(exc_info.value, ObjectNotFoundError)


async def test_resource_type_not_served(
    store: KubernetesStore, client: MagicMock
) -> None:
    """Test a resource type unknown to the API server."""
    client.resources.get.side_effect = ResourceNotFoundError("No matches found")
    with pytest.raises(StoreError, match="runtasks.v1alpha1.openebs.io"):
        await store.get(RUN_TASK_RESOURCE, "openebs", "name")


async def test_create(store: KubernetesStore, api: MagicMock) -> None:
    """Test creating an object."""
    api.create.return_value.to_dict.return_value = RUN_TASK
    assert await store.create(RUN_TASK_RESOURCE, "openebs", RUN_TASK) == RUN_TASK
    api.create.assert_called_once_with(body=RUN_TASK, namespace="openebs")


async def test_create_conflict(store: KubernetesStore, api: MagicMock) -> None:
    """Test creating an object that already exists."""
    api.create.side_effect = api_error(KubeConflictError, 409, "Conflict")
    with pytest.raises(ConflictError, match="already exists"):
        await store.create(RUN_TASK_RESOURCE, "openebs", RUN_TASK)


async def test_update_uses_live_resource_version(
    store: KubernetesStore, api: MagicMock
) -> None:
    """Test an update replaces the object at its live version."""
    api.get.return_value.metadata.resourceVersion = "1234"
    api.replace.return_value.to_dict.return_value = RUN_TASK

    assert await store.update(RUN_TASK_RESOURCE, "openebs", RUN_TASK) == RUN_TASK

    body = api.replace.call_args.kwargs["body"]
    assert body["metadata"]["resourceVersion"] == "1234"
    assert body["spec"] == RUN_TASK["spec"]
    assert "resourceVersion" not in RUN_TASK["metadata"]


async def test_update_not_found(store: KubernetesStore, api: MagicMock) -> None:
    """Test updating an object that does not exist."""
    api.get.side_effect = api_error(NotFoundError, 404, "Not Found")
    with pytest.raises(ObjectNotFoundError):
        await store.update(RUN_TASK_RESOURCE, "openebs", RUN_TASK)
    api.replace.assert_not_called()


@pytest.mark.parametrize(
    "error",
    [
        ApiException(status=503, reason="Service Unavailable"),
        MaxRetryError(None, "/apis", "timed out"),
        ConnectionRefusedError("connection refused"),
        ResourceNotUniqueError("Multiple matches found"),
    ],
)
async def test_discovery_failure(
    store: KubernetesStore, client: MagicMock, error: Exception
) -> None:
    """Test a failure to discover the resource type is a store error."""
    client.resources.get.side_effect = error
    with pytest.raises(StoreError) as exc_info:
        await store.get(RUN_TASK_RESOURCE, "openebs", "name")
    assert exc_info.value.__cause__ is error

    with pytest.raises(StoreError):
        await store.create(RUN_TASK_RESOURCE, "openebs", RUN_TASK)
    with pytest.raises(StoreError):
        await store.update(RUN_TASK_RESOURCE, "openebs", RUN_TASK)


async def test_client_factory_failure() -> None:
    """Test a failure to create the client is a store error."""

    def client_factory() -> MagicMock:
        raise ApiException(status=503, reason="Service Unavailable")

    store = KubernetesStore(client_factory)
    with pytest.raises(StoreError, match="Service Unavailable"):
        await store.get(RUN_TASK_RESOURCE, "openebs", "name")


@pytest.mark.parametrize(
    "error",
    [
        ApiException(status=503, reason="Service Unavailable"),
        MaxRetryError(None, "/apis", "timed out"),
    ],
)
async def test_install_api_server_unavailable(
    store: KubernetesStore, client: MagicMock, error: Exception
) -> None:
    """Test an unavailable API server is reported as a missing install config."""
    client.resources.get.side_effect = error

    errors = await simple_installer(store).install()

    assert len(errors) == 1
    assert isinstance(errors[0], ConfigUnavailableError)
    assert isinstance(errors[0].__cause__, ConfigUnavailableError)
    assert isinstance(errors[0].__cause__.__cause__, StoreError)


async def test_install_apply_discovery_failure(
    store: KubernetesStore, client: MagicMock
) -> None:
    """Test discovery failures while applying are collected per object."""
    client.resources.get.side_effect = MaxRetryError(None, "/apis", "timed out")

    async def get_config(name: str) -> InstallConfig:
        return InstallConfig(name=name, install=[InstallSpec(version="0.7.0")])

    installer = Installer(
        config_getter=get_config,
        applier_factory=lambda resource, namespace: new_resource_applier(
            store, resource, namespace
        ),
        artifact_lister=lambda version: [
            Artifact(doc=f"kind: RunTask\nmetadata:\n  name: {name}\n")
            for name in ("first", "second")
        ],
    )

    errors = await installer.install()

    assert [type(err) for err in errors] == [ApplyError, ApplyError]
    assert [err.resource_id for err in errors] == ["RunTask/first", "RunTask/second"]
    assert all(isinstance(err.__cause__, StoreError) for err in errors)
