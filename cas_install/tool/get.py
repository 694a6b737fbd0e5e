"""cas-install get action."""

import logging
from argparse import (
    ArgumentParser,
    _SubParsersAction as SubParsersAction,
)
from typing import cast, Any

from cas_install.catalog import (
    list_artifacts_by_version,
    registered_versions,
    transform_artifacts,
)
from cas_install.exceptions import InstallException

from .format import PrintFormatter, YamlFormatter


_LOGGER = logging.getLogger(__name__)


class GetArtifactsAction:
    """Get the artifacts registered for a version."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "artifacts",
                aliases=["artifact"],
                help="Get the artifacts of a version",
                description="Print the artifacts that are installed for a version",
            ),
        )
        args.add_argument(
            "--version",
            required=True,
            help="Version of the artifacts to print",
        )
        args.add_argument(
            "--output",
            "-o",
            choices=["wide", "yaml"],
            default=None,
            help="Output format of the command",
        )
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        version: str,
        output: str | None,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        objects, errors = transform_artifacts(list_artifacts_by_version(version))
        if errors:
            raise InstallException(
                f"Failed to decode {len(errors)} artifacts of version {version}: "
                f"{errors[0]}"
            )

        if output == "yaml":
            YamlFormatter().print([obj.to_dict() for obj in objects])
            return

        cols = ["kind", "name"]
        if output == "wide":
            cols.extend(["namespace", "resource", "feature"])
        results: list[dict[str, Any]] = []
        for obj in objects:
            results.append(
                {
                    "kind": obj.kind,
                    "name": obj.name,
                    "namespace": obj.namespace,
                    "resource": str(obj.resource) if obj.resource else None,
                }
            )
        if output == "wide":
            # Objects keep the order of the artifacts they were decoded from
            for row, artifact in zip(results, list_artifacts_by_version(version)):
                row["feature"] = artifact.feature
        PrintFormatter(cols).print(results)


class GetVersionsAction:
    """Get the versions that can be installed."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "versions",
                aliases=["version"],
                help="Get the versions with registered artifacts",
                description="Print the versions that have registered artifacts",
            ),
        )
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        results = []
        for version in registered_versions():
            results.append(
                {
                    "version": version,
                    "artifacts": len(list_artifacts_by_version(version)),
                }
            )
        PrintFormatter(["version", "artifacts"]).print(results)


class GetAction:
    """cas-install get action."""

    @classmethod
    def register(
        cls, subparsers: SubParsersAction  # type: ignore[type-arg]
    ) -> ArgumentParser:
        """Register the subparser commands."""
        args = cast(
            ArgumentParser,
            subparsers.add_parser(
                "get",
                help="Print information about the artifact catalog",
                description="Print information about the versions and artifacts that can be installed",
            ),
        )
        subcmds = args.add_subparsers(
            title="Available commands",
            required=True,
        )
        GetArtifactsAction.register(subcmds)
        GetVersionsAction.register(subcmds)
        args.set_defaults(cls=cls)
        return args

    async def run(  # type: ignore[no-untyped-def]
        self,
        **kwargs,  # pylint: disable=unused-argument
    ) -> None:
        """Async Action implementation."""
        # No-op given subcommands are always the dispatch target
