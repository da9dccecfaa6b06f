"""Prometheus metrics for the S3 read/write exporter."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Iterable, Protocol

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram

from .constants import ALL_OPERATIONS, DEFAULT_NAMESPACE

if TYPE_CHECKING:
    from .probe import ProbeResult


class MetricsSink(Protocol):
    """Receives the measurements produced by probe cycles."""

    def clear(self, operation: str) -> None:
        """Drop the active errors of an operation."""
        ...

    def set_duration(self, operation: str, seconds: float) -> None:
        ...

    def set_status(self, operation: str, ok: bool) -> None:
        ...

    def set_error(self, operation: str, kind: str, label: str) -> None:
        """Mark an error as active for an operation."""
        ...

    def record_cycle(self, duration_seconds: float) -> None:
        """Record that a full cycle completed."""
        ...


def publish_result(sink: MetricsSink, result: ProbeResult) -> None:
    """Publish one step outcome: clear the operation, then set it once.

    Duration is only updated for successful steps; an active error is
    always reported with value 1.
    """
    operation = result.operation.value
    sink.clear(operation)
    sink.set_status(operation, result.succeeded)
    if result.succeeded:
        sink.set_duration(operation, result.duration_seconds)
    else:
        sink.set_error(operation, result.error_kind or "unexpected", result.error_label or "unknown")


class PrometheusMetricsSink:
    """Metrics sink backed by prometheus_client collectors.

    Every sink owns its registry so several sinks (one per test, for
    instance) never collide on metric names.
    """

    def __init__(
        self,
        namespace: str = DEFAULT_NAMESPACE,
        operations: Iterable[str] = ALL_OPERATIONS,
        registry: CollectorRegistry | None = None,
    ) -> None:
        self.namespace = namespace
        self.registry = registry or CollectorRegistry()
        self.operations = tuple(operations)

        self.duration: dict[str, Gauge] = {}
        self.status: dict[str, Gauge] = {}
        self.errors: dict[str, Gauge] = {}
        for operation in self.operations:
            self.duration[operation] = Gauge(
                f"{operation}_duration_seconds",
                f"Last {operation} duration in seconds",
                namespace=namespace,
                registry=self.registry,
            )
            self.status[operation] = Gauge(
                f"{operation}_status",
                f"Last {operation} status, 1 is ok",
                namespace=namespace,
                registry=self.registry,
            )
            self.errors[operation] = Gauge(
                f"{operation}_errors",
                f"Active {operation} errors",
                ["kind", "error"],
                namespace=namespace,
                registry=self.registry,
            )

        self.operations_total = Counter(
            "operations_total",
            "Total number of probe operations",
            ["operation", "result"],
            namespace=namespace,
            registry=self.registry,
        )
        self.cycles_total = Counter(
            "cycles_total",
            "Total number of completed probe cycles",
            namespace=namespace,
            registry=self.registry,
        )
        self.cycle_duration_seconds = Histogram(
            "cycle_duration_seconds",
            "Duration of probe cycles in seconds",
            namespace=namespace,
            registry=self.registry,
            buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0],
        )
        self.last_cycle_timestamp_seconds = Gauge(
            "last_cycle_timestamp_seconds",
            "Unix time the last probe cycle completed",
            namespace=namespace,
            registry=self.registry,
        )

    def clear(self, operation: str) -> None:
        self.errors[operation].clear()

    def set_duration(self, operation: str, seconds: float) -> None:
        self.duration[operation].set(seconds)

    def set_status(self, operation: str, ok: bool) -> None:
        self.status[operation].set(1 if ok else 0)
        self.operations_total.labels(operation=operation, result="success" if ok else "failure").inc()

    def set_error(self, operation: str, kind: str, label: str) -> None:
        self.errors[operation].labels(kind=kind, error=label).set(1)

    def record_cycle(self, duration_seconds: float) -> None:
        self.cycles_total.inc()
        self.cycle_duration_seconds.observe(duration_seconds)
        self.last_cycle_timestamp_seconds.set(time.time())
