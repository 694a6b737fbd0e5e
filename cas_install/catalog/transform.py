"""Transforms artifacts into structured objects."""

from collections.abc import Iterable
import logging

from cas_install.decoder import decode
from cas_install.exceptions import DecodeError, InstallException
from cas_install.manifest import Unstructured

from .artifact import Artifact

__all__ = [
    "transform_artifacts",
]

_LOGGER = logging.getLogger(__name__)


def transform_artifacts(
    artifacts: Iterable[Artifact],
) -> tuple[list[Unstructured], list[InstallException]]:
    """Decode each artifact document into a structured object.

    The resource type of the artifact is carried onto its object. Artifacts
    that fail to decode are reported in the returned error list and skipped.
    """
    results: list[Unstructured] = []
    errors: list[InstallException] = []
    for i, artifact in enumerate(artifacts):
        try:
            obj = decode(artifact.doc)
        except DecodeError as err:
            _LOGGER.warning(
                "Failed to decode artifact %d of version %s: %s",
                i,
                artifact.version,
                err,
            )
            wrapped = DecodeError(
                f"Failed to transform artifact {i} of version '{artifact.version}': {err}"
            )
            wrapped.__cause__ = err
            errors.append(wrapped)
            continue
        obj.resource = artifact.resource
        results.append(obj)
    return results, errors
