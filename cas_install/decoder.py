"""Library for decoding raw documents into structured objects.

Documents are decoded with the YAML safe loader, which also accepts JSON. Only
the syntax and the shape of the generic tree are checked here, required fields
are validated by whatever consumes the object.
"""

import logging
from typing import Any

import yaml

from .exceptions import DecodeError
from .manifest import Unstructured

__all__ = [
    "decode",
    "decode_all",
]

_LOGGER = logging.getLogger(__name__)


def _check_shape(doc: Any) -> dict[str, Any]:
    if not doc:
        raise DecodeError("Failed to decode document: document is empty")
    if not isinstance(doc, dict):
        raise DecodeError(
            f"Failed to decode document: expected a map but was {type(doc).__name__}"
        )
    for key in ("apiVersion", "kind"):
        if (value := doc.get(key)) is not None and not isinstance(value, str):
            raise DecodeError(
                f"Failed to decode document: '{key}' is not a string: {value!r}"
            )
    if (metadata := doc.get("metadata")) is not None and not isinstance(
        metadata, dict
    ):
        raise DecodeError(
            f"Failed to decode document: 'metadata' is not a map: {metadata!r}"
        )
    return doc


def decode(raw: bytes | str) -> Unstructured:
    """Decode a single raw document into a structured object."""
    try:
        doc = yaml.safe_load(raw)
    except yaml.YAMLError as err:
        raise DecodeError(f"Failed to decode document: {err}") from err
    return Unstructured(obj=_check_shape(doc))


def decode_all(raw: bytes | str) -> list[Unstructured]:
    """Decode a multi-document stream, skipping empty documents."""
    results: list[Unstructured] = []
    try:
        for doc in yaml.safe_load_all(raw):
            if not doc:
                continue
            results.append(Unstructured(obj=_check_shape(doc)))
    except yaml.YAMLError as err:
        raise DecodeError(f"Failed to decode document stream: {err}") from err
    _LOGGER.debug("Decoded %d documents", len(results))
    return results
