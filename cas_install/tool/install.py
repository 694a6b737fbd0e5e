"""cas-install install action."""

import logging
import os
import pathlib
import sys
from argparse import (
    ArgumentParser,
    BooleanOptionalAction,
    _SubParsersAction as SubParsersAction,
)
from functools import partial
from typing import cast

from cas_install.applier import new_resource_applier
from cas_install.config import (
    DEFAULT_CONFIG_NAME,
    DEFAULT_CONFIG_NAMESPACE,
    ConfigGetter,
    InstallerConfig,
    configmap_config_getter,
    file_config_getter,
)
from cas_install.exceptions import InstallException
from cas_install.installer import Installer
from cas_install.store import InMemoryStore, Store
from cas_install.store.kubernetes import KubernetesStore, new_dynamic_client

from .format import YamlFormatter


_LOGGER = logging.getLogger(__name__)

ENV_CONFIG_NAME = "CAS_INSTALL_CONFIG_NAME"
ENV_CONFIG_NAMESPACE = "CAS_INSTALL_CONFIG_NAMESPACE"


class InstallAction:
    """cas-install install action."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "install",
                help="Install the artifacts requested by an install config",
                description=(
                    "Install the artifacts of every version named in an install "
                    "config, creating or replacing each object in the cluster."
                ),
            ),
        )
        args.add_argument(
            "--config-name",
            default=os.environ.get(ENV_CONFIG_NAME, DEFAULT_CONFIG_NAME),
            help=f"Name of the install config (env {ENV_CONFIG_NAME})",
        )
        args.add_argument(
            "--config-namespace",
            default=os.environ.get(ENV_CONFIG_NAMESPACE, DEFAULT_CONFIG_NAMESPACE),
            help=f"Namespace of the install config ConfigMap (env {ENV_CONFIG_NAMESPACE})",
        )
        args.add_argument(
            "--config-file",
            type=pathlib.Path,
            default=None,
            help="Read the install config from a local file instead of the cluster",
        )
        args.add_argument(
            "--kubeconfig",
            default=None,
            help="Path to the kubeconfig file, defaults to in-cluster config",
        )
        args.add_argument(
            "--context",
            default=None,
            help="The kubeconfig context to use",
        )
        args.add_argument(
            "--dry-run",
            type=bool,
            action=BooleanOptionalAction,
            default=False,
            help="Apply to an in-memory store and print the resulting objects",
        )
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        config_name: str,
        config_namespace: str,
        config_file: pathlib.Path | None,
        kubeconfig: str | None,
        context: str | None,
        dry_run: bool,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        store: Store
        if dry_run:
            if config_file is None:
                raise InstallException("--dry-run requires --config-file")
            store = InMemoryStore()
        else:
            store = KubernetesStore(partial(new_dynamic_client, kubeconfig, context))

        config_getter: ConfigGetter
        if config_file is not None:
            config_getter = file_config_getter(config_file)
        else:
            config_getter = configmap_config_getter(store, config_namespace)

        installer = Installer(
            config_getter=config_getter,
            applier_factory=partial(new_resource_applier, store),
            config=InstallerConfig(
                config_name=config_name, config_namespace=config_namespace
            ),
        )
        result = await installer.run()

        if isinstance(store, InMemoryStore):
            YamlFormatter().print(store.list_objects())

        for err in result.errors:
            print(f"error: {err}", file=sys.stderr)
        if result.errors:
            raise InstallException(
                f"Install applied {len(result.applied)} objects with "
                f"{len(result.errors)} errors"
            )
        print(f"Installed {len(result.applied)} objects", file=sys.stderr)
