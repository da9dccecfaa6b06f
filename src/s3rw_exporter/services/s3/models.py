"""Models for object store operations."""

from __future__ import annotations

import enum
from dataclasses import dataclass


@dataclass(frozen=True)
class ObjectVersion:
    """Version of a key captured before delete, consumed by restore.

    ``version_id`` is None when the store returned no usable version,
    never an empty string.
    """

    key: str
    version_id: str | None = None

    @property
    def has_version(self) -> bool:
        return self.version_id is not None


class BucketStatus(str, enum.Enum):
    """Outcome of ensuring a bucket exists."""

    CREATED = "created"
    ALREADY_EXISTS = "already_exists"
