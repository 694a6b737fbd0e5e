"""Exceptions related to cas-install."""

__all__ = [
    "InstallException",
    "InputException",
    "DecodeError",
    "InvalidArgumentError",
    "ConfigUnavailableError",
    "ArtifactResolutionError",
    "VersionNotFoundError",
    "MutationError",
    "StoreError",
    "ObjectNotFoundError",
    "ConflictError",
    "ApplyError",
    "MisconfiguredApplierError",
]


class InstallException(Exception):
    """Generic base exception used for this library."""


class InputException(InstallException):
    """Raised when the input documents or values are not formatted as expected."""


class DecodeError(InputException):
    """Raised when a raw document can't be decoded into a structured object."""


class InvalidArgumentError(InputException):
    """Raised when an object handed to the applier is missing or incomplete."""


class ConfigUnavailableError(InstallException):
    """Raised when the install configuration can't be fetched or parsed."""


class ArtifactResolutionError(InstallException):
    """Raised when the artifacts for a requested version can't be listed."""


class VersionNotFoundError(ArtifactResolutionError):
    """Raised when the catalog has no artifacts registered for a version."""

    def __init__(self, version: str) -> None:
        super().__init__(f"No artifacts registered for version '{version}'")
        self.version = version


class MutationError(InstallException):
    """Raised by a mutation that rejects the object it was given."""


class StoreError(InstallException):
    """Raised when the remote object store fails a request."""


class ObjectNotFoundError(StoreError):
    """Raised when an object is not found in the store."""


class ConflictError(StoreError):
    """Raised when creating an object that already exists in the store."""


class ApplyError(InstallException):
    """Raised when an object could not be applied to the store."""

    def __init__(self, resource_id: str, message: str | None) -> None:
        super().__init__(
            f"Failed to apply resource {resource_id}: {message or 'Unknown error'}"
        )
        self.resource_id = resource_id
        self.message = message


class MisconfiguredApplierError(InstallException):
    """Raised when an applier is constructed without one of its primitives."""
