"""Representation of the objects handled during an install.

A structured object is the schemaless form of a manifest once decoded. It is
addressed in the remote store by a resource-type descriptor which is kept
separately from the object's own apiVersion and kind.

The install configuration is a typed document that names the versions to
install along with the values used to customize each decoded object.
"""

import copy
from dataclasses import dataclass, field
import logging
from typing import Any

import yaml
from mashumaro import DataClassDictMixin
from mashumaro.config import BaseConfig
from mashumaro.exceptions import InvalidFieldValue, MissingField

from .exceptions import InputException

__all__ = [
    "BaseManifest",
    "NamedResource",
    "GroupVersionResource",
    "Unstructured",
    "InstallSpec",
    "InstallConfig",
]

_LOGGER = logging.getLogger(__name__)


OPENEBS_GROUP = "openebs.io"
OPENEBS_VERSION = "v1alpha1"
CAS_TEMPLATE_KIND = "CASTemplate"
RUN_TASK_KIND = "RunTask"
CONFIG_MAP_KIND = "ConfigMap"
INSTALL_CONFIG_KIND = "InstallConfig"
DEFAULT_NAMESPACE = "openebs"

# Key of a ConfigMap holding a serialized install config document
CONFIG_MAP_CONFIG_KEY = "config"


@dataclass
class BaseManifest(DataClassDictMixin):
    """Base class for all typed manifest objects."""

    class Config(BaseConfig):
        omit_none = True


@dataclass(frozen=True, order=True)
class NamedResource:
    """Identifier for a kubernetes resource."""

    kind: str
    namespace: str | None
    name: str

    @property
    def namespaced_name(self) -> str:
        if self.namespace:
            return f"{self.namespace}/{self.name}"
        return self.name

    def __str__(self) -> str:
        """Return the kind and namespaced name concatenated as an id."""
        return f"{self.kind}/{self.namespaced_name}"


@dataclass(frozen=True)
class GroupVersionResource(DataClassDictMixin):
    """Identifies where objects of a type live in the remote store."""

    group: str
    """The API group, empty for the core group."""

    version: str
    """The API version within the group."""

    resource: str
    """The plural resource name e.g. `castemplates`."""

    @property
    def group_version(self) -> str:
        """Return the value used as the apiVersion of objects of this type."""
        if self.group:
            return f"{self.group}/{self.version}"
        return self.version

    def __str__(self) -> str:
        if self.group:
            return f"{self.resource}.{self.version}.{self.group}"
        return f"{self.resource}.{self.version}"


CAS_TEMPLATE_RESOURCE = GroupVersionResource(
    group=OPENEBS_GROUP, version=OPENEBS_VERSION, resource="castemplates"
)
RUN_TASK_RESOURCE = GroupVersionResource(
    group=OPENEBS_GROUP, version=OPENEBS_VERSION, resource="runtasks"
)
CONFIG_MAP_RESOURCE = GroupVersionResource(group="", version="v1", resource="configmaps")


@dataclass
class Unstructured:
    """A decoded object of any kind held as a generic key/value tree.

    Field access goes through the typed helpers which raise an
    `InputException` when the tree does not have the expected shape.
    """

    obj: dict[str, Any]
    """The object contents."""

    resource: GroupVersionResource | None = None
    """The descriptor used to address the object in the store."""

    @property
    def kind(self) -> str | None:
        return self.get_str("kind")

    @property
    def api_version(self) -> str | None:
        return self.get_str("apiVersion")

    @property
    def name(self) -> str | None:
        return self.get_str("metadata", "name")

    @property
    def namespace(self) -> str | None:
        return self.get_str("metadata", "namespace")

    @property
    def labels(self) -> dict[str, Any]:
        return self.get_map("metadata", "labels") or {}

    @property
    def annotations(self) -> dict[str, Any]:
        return self.get_map("metadata", "annotations") or {}

    @property
    def resource_id(self) -> NamedResource:
        """Return an identifier usable in log and error messages.

        Unlike the typed accessors this never fails on a malformed object.
        """
        metadata = self.obj.get("metadata")
        if not isinstance(metadata, dict):
            metadata = {}
        namespace = metadata.get("namespace")
        return NamedResource(
            kind=str(self.obj.get("kind") or "Unknown"),
            namespace=str(namespace) if namespace else None,
            name=str(metadata.get("name") or "<unnamed>"),
        )

    def get_nested(self, *path: str) -> Any:
        """Return the value at the path or None if any key is missing."""
        value: Any = self.obj
        for i, key in enumerate(path):
            if not isinstance(value, dict):
                raise InputException(
                    f"Invalid object field '{'.'.join(path[:i])}' is not a map: {value!r}"
                )
            if (value := value.get(key)) is None:
                return None
        return value

    def get_str(self, *path: str) -> str | None:
        """Return the string value at the path."""
        if (value := self.get_nested(*path)) is None:
            return None
        if not isinstance(value, str):
            raise InputException(
                f"Invalid object field '{'.'.join(path)}' is not a string: {value!r}"
            )
        return value

    def get_list(self, *path: str) -> list[Any] | None:
        """Return the list value at the path."""
        if (value := self.get_nested(*path)) is None:
            return None
        if not isinstance(value, list):
            raise InputException(
                f"Invalid object field '{'.'.join(path)}' is not a list: {value!r}"
            )
        return value

    def get_map(self, *path: str) -> dict[str, Any] | None:
        """Return the map value at the path."""
        if (value := self.get_nested(*path)) is None:
            return None
        if not isinstance(value, dict):
            raise InputException(
                f"Invalid object field '{'.'.join(path)}' is not a map: {value!r}"
            )
        return value

    def set_nested(self, value: Any, *path: str) -> None:
        """Set the value at the path, creating intermediate maps."""
        if not path:
            raise ValueError("A path is required to set a value")
        parent = self.obj
        for i, key in enumerate(path[:-1]):
            child = parent.setdefault(key, {})
            if not isinstance(child, dict):
                raise InputException(
                    f"Invalid object field '{'.'.join(path[:i + 1])}' is not a map: {child!r}"
                )
            parent = child
        parent[path[-1]] = value

    def deepcopy(self) -> "Unstructured":
        """Return a copy that shares no state with this object."""
        return Unstructured(obj=copy.deepcopy(self.obj), resource=self.resource)

    def to_dict(self) -> dict[str, Any]:
        """Return a copy of the object contents for serialization."""
        return copy.deepcopy(self.obj)


@dataclass
class InstallSpec(BaseManifest):
    """A request to install the artifacts of a single version."""

    version: str
    """The version of the artifacts to install."""

    namespace: str | None = None
    """The namespace to set on every installed object."""

    labels: dict[str, str] = field(default_factory=dict)
    """Labels merged into every installed object."""

    annotations: dict[str, str] = field(default_factory=dict)
    """Annotations merged into every installed object."""

    features: dict[str, bool] = field(default_factory=dict)
    """Feature toggles keyed by artifact feature, features not listed are enabled."""

    def feature_enabled(self, feature: str | None) -> bool:
        """Return True if artifacts of the feature should be installed."""
        if feature is None:
            return True
        return self.features.get(feature, True)


@dataclass
class InstallConfig(BaseManifest):
    """The configuration of an install run."""

    name: str
    """The name of the install config."""

    install: list[InstallSpec] = field(default_factory=list)
    """The ordered list of versions to install."""

    @classmethod
    def parse_doc(cls, doc: dict[str, Any]) -> "InstallConfig":
        """Parse an InstallConfig from a kubernetes style document."""
        if not isinstance(doc, dict):
            raise InputException(f"Invalid {cls.__name__} is not a map: {doc!r}")
        if not isinstance(metadata := doc.get("metadata"), dict) or not metadata:
            raise InputException(f"Invalid {cls.__name__} missing metadata: {doc}")
        if not (name := metadata.get("name")):
            raise InputException(
                f"Invalid {cls.__name__} missing metadata.name: {doc}"
            )
        if not isinstance(spec := doc.get("spec"), dict) or not spec:
            raise InputException(f"Invalid {cls.__name__} missing spec: {doc}")
        install = spec.get("install")
        if not isinstance(install, list):
            raise InputException(
                f"Invalid {cls.__name__} missing spec.install list: {doc}"
            )
        if not all(isinstance(entry, dict) for entry in install):
            raise InputException(
                f"Invalid {cls.__name__} spec.install entry is not a map: {install}"
            )
        try:
            entries = [InstallSpec.from_dict(entry) for entry in install]
        except (InvalidFieldValue, MissingField, TypeError) as err:
            raise InputException(
                f"Invalid {cls.__name__} spec.install entry: {err}"
            ) from err
        _LOGGER.debug("Parsed install config %s with %d entries", name, len(entries))
        return cls(name=name, install=entries)

    @classmethod
    def parse_yaml(cls, content: str) -> "InstallConfig":
        """Parse a serialized install config document."""
        try:
            doc = yaml.safe_load(content)
        except yaml.YAMLError as err:
            raise InputException(f"Invalid {cls.__name__} yaml: {err}") from err
        return cls.parse_doc(doc)

    @property
    def versions(self) -> list[str]:
        """Return the requested versions in order."""
        return [entry.version for entry in self.install]
