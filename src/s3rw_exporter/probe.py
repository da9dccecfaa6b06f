"""Probe cycle: the ordered sequence of storage checks."""

from __future__ import annotations

import enum
import logging
import time
from dataclasses import dataclass
from typing import Callable

from . import consistency
from .config import S3Settings
from .constants import (
    OP_DELETE,
    OP_DOWNLOAD,
    OP_MULTIPART_UPLOAD,
    OP_RESTORE,
    OP_UPLOAD,
)
from .fixture import Fixture
from .logging import log_probe_event
from .metrics import MetricsSink, publish_result
from .services.s3.base import ObjectStoreClient
from .services.s3.models import ObjectVersion
from .tracing import set_span_status, trace_span
from .utils.context import with_cycle_id
from .utils.errors import ProbeError, classify_error, sanitize_exception

logger = logging.getLogger(__name__)


class Operation(str, enum.Enum):
    """Probe steps, declared in cycle order."""

    UPLOAD = OP_UPLOAD
    MULTIPART_UPLOAD = OP_MULTIPART_UPLOAD
    DELETE = OP_DELETE
    RESTORE = OP_RESTORE
    DOWNLOAD = OP_DOWNLOAD


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of one step of one cycle."""

    operation: Operation
    succeeded: bool
    duration_seconds: float
    error_kind: str | None = None
    error_label: str | None = None
    error_message: str | None = None


def enabled_operations(settings: S3Settings) -> list[Operation]:
    """Return the steps a cycle runs for the given settings, in order."""
    operations = [Operation.UPLOAD]
    if settings.multipart_upload_enabled:
        operations.append(Operation.MULTIPART_UPLOAD)
    if settings.versioning_check_enabled:
        operations.extend([Operation.DELETE, Operation.RESTORE])
    operations.append(Operation.DOWNLOAD)
    return operations


class ProbeCycle:
    """Runs one pass over every enabled storage check.

    Steps run in a fixed order and do not depend on each other's outcome:
    a failing step is recorded as a failed ProbeResult and the remaining
    steps still run. Each result is published to the metrics sink as soon
    as its step ends.
    """

    def __init__(
        self,
        store: ObjectStoreClient,
        fixture: Fixture,
        settings: S3Settings,
        sink: MetricsSink,
    ) -> None:
        self.store = store
        self.fixture = fixture
        self.settings = settings
        self.sink = sink

    @property
    def operations(self) -> list[Operation]:
        return enabled_operations(self.settings)

    def run(self) -> list[ProbeResult]:
        """Run every enabled step once.

        Returns:
            One result per enabled step, in execution order
        """
        results: list[ProbeResult] = []
        start = time.monotonic()

        with with_cycle_id() as cycle_id, trace_span("probe_cycle", attributes={"probe.cycle_id": cycle_id}):
            logger.debug(f"Starting probe cycle {cycle_id}")

            results.append(self._step(Operation.UPLOAD, self._upload))

            if self.settings.multipart_upload_enabled:
                results.append(self._step(Operation.MULTIPART_UPLOAD, self._multipart_upload))

            if self.settings.versioning_check_enabled:
                captured: list[ObjectVersion] = []
                results.append(self._step(Operation.DELETE, lambda: captured.append(self._delete())))
                # Restore runs even when delete failed; it then reports a missing version
                version = captured[0] if captured else ObjectVersion(key=self.settings.download_key)
                results.append(self._step(Operation.RESTORE, lambda: self._restore(version)))

            results.append(self._step(Operation.DOWNLOAD, self._download))

            duration = time.monotonic() - start
            self.sink.record_cycle(duration)

            failed = [r.operation.value for r in results if not r.succeeded]
            if failed:
                logger.warning(f"Probe cycle {cycle_id} finished in {duration:.3f}s with failures: {', '.join(failed)}")
            else:
                logger.info(f"Probe cycle {cycle_id} finished in {duration:.3f}s")

        return results

    def _step(self, operation: Operation, action: Callable[[], object]) -> ProbeResult:
        with trace_span(f"probe.{operation.value}", operation=operation.value):
            start = time.monotonic()
            try:
                action()
            except Exception as e:
                duration = time.monotonic() - start
                kind, label = classify_error(e)
                message = sanitize_exception(e)
                result = ProbeResult(
                    operation=operation,
                    succeeded=False,
                    duration_seconds=duration,
                    error_kind=kind,
                    error_label=label,
                    error_message=message,
                )
                if not isinstance(e, ProbeError):
                    logger.exception(f"Unexpected error during {operation.value}")
                log_probe_event(
                    logger,
                    operation.value,
                    "failed",
                    message,
                    level=logging.ERROR,
                    kind=kind,
                    error=label,
                    duration_seconds=round(duration, 6),
                )
                set_span_status(False, message)
            else:
                duration = time.monotonic() - start
                result = ProbeResult(operation=operation, succeeded=True, duration_seconds=duration)
                log_probe_event(
                    logger,
                    operation.value,
                    "succeeded",
                    f"{operation.value} succeeded",
                    level=logging.DEBUG,
                    duration_seconds=round(duration, 6),
                )
                set_span_status(True)

        publish_result(self.sink, result)
        return result

    def _upload(self) -> None:
        self.store.put_object(self.settings.upload_key, self.fixture.upload_payload)

    def _multipart_upload(self) -> None:
        self.store.multipart_put(
            self.settings.upload_key,
            self.fixture.upload_payload,
            part_size=self.settings.multipart_part_size,
            concurrency=self.settings.multipart_concurrency,
        )

    def _delete(self) -> ObjectVersion:
        return self.store.delete_object(self.settings.download_key)

    def _restore(self, version: ObjectVersion) -> None:
        self.store.restore_object(version)

    def _download(self) -> None:
        data = self.store.get_object(self.settings.download_key)
        consistency.verify(self.fixture.download_expected, data)
