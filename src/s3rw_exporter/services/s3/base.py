"""Base object store interface."""

from __future__ import annotations

from typing import Protocol

from .models import BucketStatus, ObjectVersion


class ObjectStoreClient(Protocol):
    """Protocol defining the object store operations a probe needs.

    Every method raises ``TransportError`` (or a subclass) on failure.
    """

    def put_object(self, key: str, data: bytes) -> None:
        """Upload ``data`` under ``key`` in a single request."""
        ...

    def multipart_put(self, key: str, data: bytes, part_size: int, concurrency: int) -> None:
        """Upload ``data`` as parts of ``part_size`` bytes, ``concurrency`` at a time."""
        ...

    def get_object(self, key: str) -> bytes:
        """Download the full content of ``key``.

        Raises:
            ObjectNotFoundError: If the key does not exist
        """
        ...

    def delete_object(self, key: str) -> ObjectVersion:
        """Delete ``key`` and return the version id it had before deletion."""
        ...

    def restore_object(self, version: ObjectVersion) -> None:
        """Copy a previous version back onto the live key.

        Raises:
            RestoreWithoutVersionError: If ``version`` carries no version id
        """
        ...

    def ensure_bucket(self, name: str, region: str) -> BucketStatus:
        """Create the bucket unless it already exists."""
        ...
