"""In-memory object store used for tests and dry runs."""

from __future__ import annotations

import itertools
import threading
from typing import Any

from ...utils.errors import (
    ObjectNotFoundError,
    RestoreWithoutVersionError,
    TransportError,
)
from ..s3.models import BucketStatus, ObjectVersion


class InMemoryObjectStore:
    """Object store keeping every object version in process memory.

    With ``versioning`` disabled a key holds a single version and delete
    removes it, matching an unversioned bucket. Failures can be injected per
    operation with :meth:`fail` and every call is recorded in ``calls``.
    """

    def __init__(self, bucket: str = "probe", versioning: bool = False) -> None:
        self.bucket = bucket
        self.versioning = versioning
        self.buckets: set[str] = set()
        self.calls: list[tuple[str, Any]] = []
        # key -> list of (version_id, data); data is None for delete markers
        self._versions: dict[str, list[tuple[str, bytes | None]]] = {}
        self._failures: dict[str, Exception] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def fail(self, operation: str, error: Exception | None = None) -> None:
        """Make every later call to ``operation`` raise ``error``."""
        self._failures[operation] = error or TransportError(operation, "InternalError", "injected failure")

    def recover(self, operation: str | None = None) -> None:
        """Remove injected failures for one or all operations."""
        if operation is None:
            self._failures.clear()
        else:
            self._failures.pop(operation, None)

    def _enter(self, operation: str, detail: Any) -> None:
        self.calls.append((operation, detail))
        error = self._failures.get(operation)
        if error is not None:
            raise error

    def _write(self, key: str, data: bytes | None) -> str:
        version_id = f"v{next(self._ids)}"
        with self._lock:
            if self.versioning:
                self._versions.setdefault(key, []).append((version_id, data))
            elif data is None:
                self._versions.pop(key, None)
            else:
                self._versions[key] = [(version_id, data)]
        return version_id

    def _latest(self, key: str) -> tuple[str, bytes | None] | None:
        versions = self._versions.get(key)
        return versions[-1] if versions else None

    def put_object(self, key: str, data: bytes) -> None:
        self._enter("put_object", key)
        self._write(key, bytes(data))

    def multipart_put(self, key: str, data: bytes, part_size: int, concurrency: int) -> None:
        self._enter("multipart_put", key)
        if part_size <= 0 or concurrency <= 0:
            raise ValueError("part_size and concurrency must be positive")
        parts = [data[i:i + part_size] for i in range(0, len(data), part_size)] or [b""]
        self._write(key, b"".join(parts))

    def get_object(self, key: str) -> bytes:
        self._enter("get_object", key)
        latest = self._latest(key)
        if latest is None or latest[1] is None:
            raise ObjectNotFoundError("download file", "NoSuchKey", f"The specified key does not exist: {key}")
        return latest[1]

    def delete_object(self, key: str) -> ObjectVersion:
        self._enter("delete_object", key)
        version_id = None
        if self.versioning:
            # Newest real version, even when an earlier delete marker hides it
            for candidate_id, data in reversed(self._versions.get(key, [])):
                if data is not None:
                    version_id = candidate_id
                    break
        self._write(key, None)
        return ObjectVersion(key=key, version_id=version_id)

    def restore_object(self, version: ObjectVersion) -> None:
        self._enter("restore_object", version)
        if not version.has_version:
            raise RestoreWithoutVersionError(version.key)
        for version_id, data in self._versions.get(version.key, []):
            if version_id == version.version_id and data is not None:
                self._write(version.key, data)
                return
        raise ObjectNotFoundError("restore file", "NoSuchVersion", f"version {version.version_id} not found")

    def ensure_bucket(self, name: str, region: str) -> BucketStatus:
        self._enter("ensure_bucket", (name, region))
        if name in self.buckets:
            return BucketStatus.ALREADY_EXISTS
        self.buckets.add(name)
        return BucketStatus.CREATED
