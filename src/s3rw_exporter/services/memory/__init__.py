"""In-memory object store."""

from .client import InMemoryObjectStore

__all__ = ["InMemoryObjectStore"]
