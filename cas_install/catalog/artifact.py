"""Artifact representation."""

from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace

from cas_install.manifest import GroupVersionResource

__all__ = [
    "Artifact",
    "ArtifactMiddleware",
    "with_resource",
    "update_artifacts",
]


@dataclass(frozen=True, kw_only=True)
class Artifact:
    """A document template along with where it is stored.

    Attributes:
        doc: The raw document text
        resource: The resource type descriptor used to store the document
        version: The version the artifact was registered for
        feature: The group of artifacts this one belongs to e.g. cstor-volume
    """

    doc: str
    resource: GroupVersionResource | None = None
    version: str | None = None
    feature: str | None = None


ArtifactMiddleware = Callable[[Artifact], Artifact]


def with_resource(resource: GroupVersionResource) -> ArtifactMiddleware:
    """Return a middleware that assigns the resource type of an artifact."""

    def update(given: Artifact) -> Artifact:
        return replace(given, resource=resource)

    return update


def update_artifacts(
    artifacts: Iterable[Artifact], middleware: ArtifactMiddleware
) -> list[Artifact]:
    """Return the artifacts updated by the middleware."""
    return [middleware(artifact) for artifact in artifacts]
