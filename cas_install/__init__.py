"""
cas-install installs versioned CAS templates and run tasks into a cluster.

Each requested version is resolved to its artifacts, every artifact document
is decoded and customized for the install, then applied to the cluster with an
idempotent create-or-update.
"""

__all__ = [
    "applier",
    "catalog",
    "config",
    "decoder",
    "exceptions",
    "installer",
    "manifest",
    "mutation",
    "store",
    # Note this is exposed for CLI documentation, not to be used as a library
    "tool",
]
