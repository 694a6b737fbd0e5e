"""Registry of the artifacts available for each version.

Artifacts are shipped as package data laid out as
`data/<version>/<feature>/<group>.yaml`. Each file holds a stream of documents
and each document becomes one artifact. The file name decides the resource
type the documents are stored as.
"""

from functools import cache
from importlib import resources
from importlib.resources.abc import Traversable
import logging

from cas_install.exceptions import VersionNotFoundError
from cas_install.manifest import CAS_TEMPLATE_RESOURCE, RUN_TASK_RESOURCE

from .artifact import Artifact, update_artifacts, with_resource

__all__ = [
    "registered_versions",
    "list_artifacts_by_version",
    "split_documents",
]

_LOGGER = logging.getLogger(__name__)

DATA_DIR = "data"
DOCUMENT_SEPARATOR = "---"

ARTIFACT_GROUPS = {
    "castemplates.yaml": with_resource(CAS_TEMPLATE_RESOURCE),
    "runtasks.yaml": with_resource(RUN_TASK_RESOURCE),
}


def _data_root() -> Traversable:
    return resources.files(__package__) / DATA_DIR


def split_documents(content: str) -> list[str]:
    """Split a multi-document stream into the raw text of each document."""
    docs: list[str] = []
    current: list[str] = []
    for line in content.splitlines(keepends=True):
        if line.rstrip() == DOCUMENT_SEPARATOR:
            docs.append("".join(current))
            current = []
        else:
            current.append(line)
    docs.append("".join(current))
    return [doc for doc in docs if doc.strip()]


@cache
def registered_versions() -> tuple[str, ...]:
    """Return the versions that have registered artifacts."""
    return tuple(
        sorted(entry.name for entry in _data_root().iterdir() if entry.is_dir())
    )


@cache
def _load_version(version: str) -> tuple[Artifact, ...]:
    artifacts: list[Artifact] = []
    features = sorted(
        (entry for entry in (_data_root() / version).iterdir() if entry.is_dir()),
        key=lambda entry: entry.name,
    )
    for feature in features:
        for filename, middleware in ARTIFACT_GROUPS.items():
            path = feature / filename
            if not path.is_file():
                continue
            docs = split_documents(path.read_text(encoding="utf-8"))
            _LOGGER.debug(
                "Loaded %d artifacts from %s/%s/%s",
                len(docs),
                version,
                feature.name,
                filename,
            )
            artifacts.extend(
                update_artifacts(
                    (
                        Artifact(doc=doc, version=version, feature=feature.name)
                        for doc in docs
                    ),
                    middleware,
                )
            )
    return tuple(artifacts)


def list_artifacts_by_version(version: str) -> list[Artifact]:
    """Return the artifacts registered for the version.

    Raises:
        VersionNotFoundError: If no artifacts are registered for the version.
    """
    if version not in registered_versions():
        raise VersionNotFoundError(version)
    return list(_load_version(version))
