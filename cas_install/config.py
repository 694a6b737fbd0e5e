"""Configuration objects and install config sources for cas-install."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
import logging
from pathlib import Path

import aiofiles

from .decoder import decode_all
from .exceptions import (
    ConfigUnavailableError,
    DecodeError,
    InputException,
    StoreError,
)
from .manifest import (
    CONFIG_MAP_CONFIG_KEY,
    CONFIG_MAP_KIND,
    CONFIG_MAP_RESOURCE,
    DEFAULT_NAMESPACE,
    INSTALL_CONFIG_KIND,
    InstallConfig,
)
from .store import Store

__all__ = [
    "InstallerConfig",
    "ConfigGetter",
    "configmap_config_getter",
    "file_config_getter",
]

_LOGGER = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "openebs-install-config"
DEFAULT_CONFIG_NAMESPACE = DEFAULT_NAMESPACE


@dataclass
class InstallerConfig:
    """Configuration for the Installer."""

    config_name: str = DEFAULT_CONFIG_NAME
    """The name of the install config to fetch."""

    config_namespace: str = DEFAULT_CONFIG_NAMESPACE
    """The namespace of the ConfigMap holding the install config."""


ConfigGetter = Callable[[str], Awaitable[InstallConfig]]


def _parse_config_map(doc: dict, name: str) -> InstallConfig:
    if not isinstance(data := doc.get("data") or {}, dict):
        raise ConfigUnavailableError(f"ConfigMap {name} data is not a map: {data!r}")
    if not (content := data.get(CONFIG_MAP_CONFIG_KEY)):
        raise ConfigUnavailableError(
            f"ConfigMap {name} is missing data key '{CONFIG_MAP_CONFIG_KEY}'"
        )
    if not isinstance(content, str):
        raise ConfigUnavailableError(
            f"ConfigMap {name} data key '{CONFIG_MAP_CONFIG_KEY}' is not a string"
        )
    try:
        return InstallConfig.parse_yaml(content)
    except InputException as err:
        raise ConfigUnavailableError(
            f"ConfigMap {name} has an invalid install config: {err}"
        ) from err


def configmap_config_getter(store: Store, namespace: str) -> ConfigGetter:
    """Return a config getter that reads the install config from a ConfigMap.

    The ConfigMap holds the serialized install config document in its
    `config` data key.
    """

    async def get_config(name: str) -> InstallConfig:
        _LOGGER.debug("Fetching install config from ConfigMap %s/%s", namespace, name)
        try:
            doc = await store.get(CONFIG_MAP_RESOURCE, namespace, name)
        except StoreError as err:
            raise ConfigUnavailableError(
                f"Failed to get install config ConfigMap {namespace}/{name}: {err}"
            ) from err
        return _parse_config_map(doc, f"{namespace}/{name}")

    return get_config


def file_config_getter(path: Path) -> ConfigGetter:
    """Return a config getter that reads the install config from a file.

    The file may hold several documents. The document named by the requested
    config name is used, either an InstallConfig or a ConfigMap wrapping one.
    """

    async def get_config(name: str) -> InstallConfig:
        _LOGGER.debug("Reading install config %s from %s", name, path)
        try:
            async with aiofiles.open(path, mode="r") as config_file:
                content = await config_file.read()
        except OSError as err:
            raise ConfigUnavailableError(
                f"Failed to read install config file {path}: {err}"
            ) from err
        try:
            docs = decode_all(content)
        except DecodeError as err:
            raise ConfigUnavailableError(
                f"Invalid yaml in install config file {path}: {err}"
            ) from err
        for doc in docs:
            if doc.resource_id.name != name:
                continue
            if doc.kind == CONFIG_MAP_KIND:
                return _parse_config_map(doc.obj, name)
            if doc.kind == INSTALL_CONFIG_KIND:
                try:
                    return InstallConfig.parse_doc(doc.obj)
                except InputException as err:
                    raise ConfigUnavailableError(
                        f"Invalid install config {name} in {path}: {err}"
                    ) from err
        raise ConfigUnavailableError(f"Install config {name} not found in {path}")

    return get_config
