"""Installer for cas-install.

This module provides the installer that drives an install run: it fetches the
install config, resolves the artifacts of each requested version, decodes and
customizes them, then applies every resulting object to the store.

The installer is best effort. Only a missing install config stops a run, every
other failure is collected and the run moves on to the next version, artifact
or object. The caller receives the full list of errors once the run completes,
and since applying is idempotent the whole install can safely be run again.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from functools import partial
import logging
from typing import TypeVar

from .applier import ResourceApplier, new_resource_applier
from .catalog import Artifact, list_artifacts_by_version, transform_artifacts
from .config import ConfigGetter, InstallerConfig, configmap_config_getter
from .context import current_trace, trace_context
from .exceptions import (
    ApplyError,
    ArtifactResolutionError,
    ConfigUnavailableError,
    InstallException,
    MutationError,
)
from .manifest import GroupVersionResource, InstallSpec, Unstructured
from .mutation import DEFAULT_INSTALL_MUTATIONS, InstallMutation, install_pipeline
from .store import Store

__all__ = [
    "Installer",
    "InstallResult",
    "ArtifactLister",
    "ArtifactTransformer",
    "ApplierFactory",
    "simple_installer",
]

_LOGGER = logging.getLogger(__name__)


ArtifactLister = Callable[[str], list[Artifact]]
ArtifactTransformer = Callable[
    [Iterable[Artifact]], tuple[list[Unstructured], list[InstallException]]
]
ApplierFactory = Callable[[GroupVersionResource, str | None], ResourceApplier]

E = TypeVar("E", bound=InstallException)


def _chain(err: E, cause: BaseException) -> E:
    """Attach the underlying cause to an error that is collected, not raised."""
    err.__cause__ = cause
    return err


@dataclass
class InstallResult:
    """The outcome of an install run."""

    applied: list[Unstructured] = field(default_factory=list)
    """The objects as stored, in the order they were applied."""

    errors: list[InstallException] = field(default_factory=list)
    """Every failure of the run, in the order they happened."""

    def add_error(self, err: InstallException) -> None:
        """Record a failure of the run."""
        if trace := current_trace():
            _LOGGER.warning("%s: %s", trace, err)
        else:
            _LOGGER.warning("%s", err)
        self.errors.append(err)

    def add_errors(self, errs: Iterable[InstallException]) -> None:
        """Record a list of failures of the run."""
        for err in errs:
            self.add_error(err)


class Installer:
    """Installs the artifacts requested by an install config."""

    def __init__(
        self,
        config_getter: ConfigGetter,
        applier_factory: ApplierFactory,
        config: InstallerConfig | None = None,
        artifact_lister: ArtifactLister = list_artifacts_by_version,
        transformer: ArtifactTransformer = transform_artifacts,
        install_mutations: Iterable[InstallMutation] = DEFAULT_INSTALL_MUTATIONS,
    ) -> None:
        """Initialize the Installer.

        Args:
            config_getter: Fetches the install config by name.
            applier_factory: Builds the applier for a resource type and namespace.
            config: Settings naming the install config to fetch.
            artifact_lister: Lists the artifacts of a version.
            transformer: Decodes artifacts into structured objects.
            install_mutations: Build the mutations applied to each object from
                the install entry that requested it, in order.
        """
        self._config_getter = config_getter
        self._applier_factory = applier_factory
        self._config = config or InstallerConfig()
        self._artifact_lister = artifact_lister
        self._transformer = transformer
        self._install_mutations = list(install_mutations)

    def _resolve(self, install: InstallSpec, result: InstallResult) -> list[Unstructured]:
        """Return the customized objects for a single install entry."""
        try:
            artifacts = self._artifact_lister(install.version)
        except ArtifactResolutionError as err:
            result.add_error(err)
            return []
        except InstallException as err:
            result.add_error(
                _chain(
                    ArtifactResolutionError(
                        f"Failed to list artifacts for version '{install.version}': {err}"
                    ),
                    err,
                )
            )
            return []

        enabled = [a for a in artifacts if install.feature_enabled(a.feature)]
        if len(enabled) != len(artifacts):
            _LOGGER.info(
                "Skipping %d artifacts of disabled features for version %s",
                len(artifacts) - len(enabled),
                install.version,
            )

        objects, errors = self._transformer(enabled)
        result.add_errors(errors)

        mutate = install_pipeline(install, self._install_mutations)
        mutated: list[Unstructured] = []
        for obj in objects:
            try:
                mutated.append(mutate(obj))
            except MutationError as err:
                result.add_error(err)
            except InstallException as err:
                result.add_error(
                    _chain(MutationError(f"Failed to mutate {obj.resource_id}: {err}"), err)
                )
        _LOGGER.debug(
            "Resolved %d objects for version %s", len(mutated), install.version
        )
        return mutated

    async def _apply(self, obj: Unstructured, result: InstallResult) -> None:
        """Apply a single object, recording the outcome."""
        resource_id = str(obj.resource_id)
        try:
            if obj.resource is None:
                raise ApplyError(resource_id, "missing resource type")
            applier = self._applier_factory(obj.resource, obj.namespace)
            stored = await applier.apply(obj)
        except ApplyError as err:
            result.add_error(err)
            return
        except InstallException as err:
            result.add_error(_chain(ApplyError(resource_id, str(err)), err))
            return
        _LOGGER.debug("Applied %s", resource_id)
        result.applied.append(stored)

    async def run(self) -> InstallResult:
        """Run an install and return the applied objects and errors."""
        result = InstallResult()
        name = self._config.config_name
        with trace_context(f"Install '{name}'"):
            try:
                install_config = await self._config_getter(name)
            except InstallException as err:
                result.add_error(
                    _chain(
                        ConfigUnavailableError(
                            f"Failed to get install config '{name}': {err}"
                        ),
                        err,
                    )
                )
                return result

            _LOGGER.info(
                "Installing versions %s from install config %s",
                install_config.versions,
                install_config.name,
            )
            objects: list[Unstructured] = []
            for install in install_config.install:
                with trace_context(f"Version '{install.version}'"):
                    objects.extend(self._resolve(install, result))

            with trace_context("Apply"):
                for obj in objects:
                    await self._apply(obj, result)

        _LOGGER.info(
            "Install applied %d objects with %d errors",
            len(result.applied),
            len(result.errors),
        )
        return result

    async def install(self) -> list[InstallException]:
        """Run an install and return every error encountered.

        An empty list means every requested object was applied.
        """
        return (await self.run()).errors


def simple_installer(store: Store, config: InstallerConfig | None = None) -> Installer:
    """Return an installer reading its config from a ConfigMap in the store."""
    config = config or InstallerConfig()
    return Installer(
        config_getter=configmap_config_getter(store, config.config_namespace),
        applier_factory=partial(new_resource_applier, store),
        config=config,
    )
