"""Catalog of versioned artifacts.

This module provides the static set of artifacts that can be installed for
each version and the transformation of those artifacts into structured objects.
"""

from .artifact import Artifact, ArtifactMiddleware, with_resource
from .registry import list_artifacts_by_version, registered_versions
from .transform import transform_artifacts

__all__ = [
    "Artifact",
    "ArtifactMiddleware",
    "with_resource",
    "list_artifacts_by_version",
    "registered_versions",
    "transform_artifacts",
]
