"""Tests for the artifact registry."""

import pytest

from cas_install.catalog import (
    list_artifacts_by_version,
    registered_versions,
    with_resource,
)
from cas_install.catalog.artifact import Artifact, update_artifacts
from cas_install.catalog.registry import split_documents
from cas_install.exceptions import ArtifactResolutionError, VersionNotFoundError
from cas_install.manifest import CAS_TEMPLATE_RESOURCE, RUN_TASK_RESOURCE


def test_registered_versions() -> None:
    """Test the versions shipped with the package."""
    assert registered_versions() == ("0.7.0",)


def test_list_artifacts() -> None:
    """Test the artifacts of a version are ordered templates first."""
    artifacts = list_artifacts_by_version("0.7.0")
    assert len(artifacts) == 27
    assert [a.resource for a in artifacts[:4]] == [CAS_TEMPLATE_RESOURCE] * 4
    assert [a.resource for a in artifacts[4:]] == [RUN_TASK_RESOURCE] * 23
    assert {a.version for a in artifacts} == {"0.7.0"}
    assert {a.feature for a in artifacts} == {"cstor-volume"}
    assert "name: cstor-volume-create-default-0.7.0\n" in artifacts[0].doc
    assert "name: cstor-volume-create-listcstorpoolcr-default-0.7.0\n" in artifacts[4].doc


def test_list_artifacts_returns_a_new_list() -> None:
    """Test callers can't change the registered artifacts."""
    artifacts = list_artifacts_by_version("0.7.0")
    artifacts.clear()
    assert len(list_artifacts_by_version("0.7.0")) == 27


@pytest.mark.parametrize("version", ["0.6.0", "", "latest"])
def test_unknown_version(version: str) -> None:
    """Test listing a version with no registered artifacts."""
    with pytest.raises(VersionNotFoundError) as exc_info:
        list_artifacts_by_version(version)
    assert exc_info.value.version == version
    assert isinstance(exc_info.value, ArtifactResolutionError)


def test_split_documents() -> None:
    """Test splitting a document stream."""
    content = "---\nkind: A\n---\n\n---\nkind: B\nspec:\n  value: |\n    ---x\n"
    assert split_documents(content) == [
        "kind: A\n",
        "kind: B\nspec:\n  value: |\n    ---x\n",
    ]
    assert split_documents("") == []


def test_with_resource() -> None:
    """Test assigning the resource type of artifacts."""
    artifacts = [Artifact(doc="kind: A\n"), Artifact(doc="kind: B\n", version="0.7.0")]
    updated = update_artifacts(artifacts, with_resource(RUN_TASK_RESOURCE))
    assert [a.resource for a in updated] == [RUN_TASK_RESOURCE] * 2
    assert updated[1].version == "0.7.0"
    assert artifacts[0].resource is None
