"""Mutations applied to structured objects before they reach the store.

A mutation is a function that is given a structured object and returns an
updated copy. Mutations never modify the object they are given and are
composed with `pipeline` in the order the caller chooses. A composed pipeline
is itself a mutation.

Install mutations bind the override values of a single install entry to a
mutation, so that the same list of install mutations can produce a different
pipeline for each requested version.
"""

from collections.abc import Callable, Iterable, Mapping
import logging

from .manifest import (
    CAS_TEMPLATE_KIND,
    CAS_TEMPLATE_RESOURCE,
    GroupVersionResource,
    InstallSpec,
    RUN_TASK_KIND,
    RUN_TASK_RESOURCE,
    Unstructured,
)

__all__ = [
    "Mutation",
    "InstallMutation",
    "pipeline",
    "with_namespace",
    "with_labels",
    "with_annotations",
    "with_resource_type",
    "install_pipeline",
    "DEFAULT_RESOURCE_TYPES",
    "DEFAULT_INSTALL_MUTATIONS",
]

_LOGGER = logging.getLogger(__name__)


Mutation = Callable[[Unstructured], Unstructured]
InstallMutation = Callable[[InstallSpec], Mutation]

DEFAULT_RESOURCE_TYPES: Mapping[str, GroupVersionResource] = {
    CAS_TEMPLATE_KIND: CAS_TEMPLATE_RESOURCE,
    RUN_TASK_KIND: RUN_TASK_RESOURCE,
}


def pipeline(mutations: Iterable[Mutation]) -> Mutation:
    """Return a mutation that runs each of the mutations in order."""
    mutations = list(mutations)

    def mutate(given: Unstructured) -> Unstructured:
        for mutation in mutations:
            given = mutation(given)
        return given

    return mutate


def with_namespace(namespace: str | None) -> Mutation:
    """Return a mutation that sets the namespace of an object.

    An empty namespace leaves the object untouched.
    """

    def mutate(given: Unstructured) -> Unstructured:
        if not namespace:
            return given
        updated = given.deepcopy()
        updated.set_nested(namespace, "metadata", "namespace")
        return updated

    return mutate


def _merge_metadata_map(key: str, values: Mapping[str, str]) -> Mutation:
    def mutate(given: Unstructured) -> Unstructured:
        if not values:
            return given
        updated = given.deepcopy()
        merged = dict(updated.get_map("metadata", key) or {})
        merged.update(values)
        updated.set_nested(merged, "metadata", key)
        return updated

    return mutate


def with_labels(labels: Mapping[str, str]) -> Mutation:
    """Return a mutation that adds or overwrites the labels of an object."""
    return _merge_metadata_map("labels", labels)


def with_annotations(annotations: Mapping[str, str]) -> Mutation:
    """Return a mutation that adds or overwrites the annotations of an object."""
    return _merge_metadata_map("annotations", annotations)


def with_resource_type(
    resources: Mapping[str, GroupVersionResource] = DEFAULT_RESOURCE_TYPES,
) -> Mutation:
    """Return a mutation that assigns the store descriptor based on kind.

    The apiVersion of the object is aligned with the assigned descriptor. Kinds
    without an entry keep the descriptor they already have.
    """

    def mutate(given: Unstructured) -> Unstructured:
        if (resource := resources.get(given.kind or "")) is None:
            return given
        updated = given.deepcopy()
        updated.resource = resource
        if updated.api_version != resource.group_version:
            _LOGGER.debug(
                "Updating apiVersion of %s from %s to %s",
                given.resource_id,
                updated.api_version,
                resource.group_version,
            )
            updated.set_nested(resource.group_version, "apiVersion")
        return updated

    return mutate


def _resource_type_from_install(install: InstallSpec) -> Mutation:
    return with_resource_type()


def _namespace_from_install(install: InstallSpec) -> Mutation:
    return with_namespace(install.namespace)


def _labels_from_install(install: InstallSpec) -> Mutation:
    return with_labels(install.labels)


def _annotations_from_install(install: InstallSpec) -> Mutation:
    return with_annotations(install.annotations)


# Resource type is resolved first so later stages see the final descriptor
DEFAULT_INSTALL_MUTATIONS: list[InstallMutation] = [
    _resource_type_from_install,
    _namespace_from_install,
    _labels_from_install,
    _annotations_from_install,
]


def install_pipeline(
    install: InstallSpec, install_mutations: Iterable[InstallMutation]
) -> Mutation:
    """Return the mutation that customizes objects for an install entry."""
    return pipeline(factory(install) for factory in install_mutations)
