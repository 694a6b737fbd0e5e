"""
The store module provides access to the remote declarative object store that
objects are installed into.

- Objects are addressed by resource type descriptor, namespace and name.
- Objects are passed in and out as plain dictionaries.
- Provides get, create and update primitives used by the resource applier.

This abstract interface allows for various implementations (in-memory, a
Kubernetes API server, etc.).
"""

from .store import Store
from .in_memory import InMemoryStore

__all__ = [
    "Store",
    "InMemoryStore",
]
