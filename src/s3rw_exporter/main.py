"""Main entry point for the S3 read/write exporter."""

from __future__ import annotations

import argparse
import logging
import signal
import threading
from typing import Any, Sequence

from . import __version__
from . import health
from . import logging as structured_logging
from .bootstrap import first_run
from .builders.store import create_store_from_config
from .config import ProbeConfig, load_config
from .fixture import load_fixture
from .metrics import PrometheusMetricsSink
from .probe import ProbeCycle, enabled_operations
from .scheduler import Scheduler
from .tracing import initialize_tracing
from .utils.errors import BootstrapError, ConfigError

logger = logging.getLogger(__name__)

# Seconds to wait for the in-flight cycle on shutdown
SHUTDOWN_TIMEOUT = 60.0


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="s3rw-exporter",
        description="Probe an S3-compatible object store and export the results as Prometheus metrics",
    )
    parser.add_argument("--config", required=True, help="Configuration file path")
    parser.add_argument(
        "--first-run",
        action="store_true",
        help="initialize bucket and upload file expected by download check",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def install_signal_handlers(stop_event: threading.Event) -> None:
    """Set ``stop_event`` on SIGTERM and SIGINT."""

    def handle(signum: int, _frame: Any) -> None:
        logger.info(f"Received signal {signal.Signals(signum).name}, stopping after the current cycle")
        stop_event.set()

    signal.signal(signal.SIGTERM, handle)
    signal.signal(signal.SIGINT, handle)


def run_first_run(config: ProbeConfig) -> int:
    """Prepare the bucket and seed object, then exit."""
    fixture = load_fixture(config)
    store = create_store_from_config(config)
    status = first_run(store, config.s3, fixture)
    logger.info(f"First run completed, bucket {status.value}")
    return 0


def run_exporter(config: ProbeConfig, stop_event: threading.Event | None = None) -> int:
    """Serve metrics and probe until ``stop_event`` is set."""
    fixture = load_fixture(config)
    store = create_store_from_config(config)

    cycle_operations = [op.value for op in enabled_operations(config.s3)]
    sink = PrometheusMetricsSink(namespace=config.exporter.namespace, operations=cycle_operations)
    cycle = ProbeCycle(store, fixture, config.s3, sink)

    stop_event = stop_event or threading.Event()
    scheduler = Scheduler(cycle, config.exporter.interval_seconds, stop_event=stop_event)

    app = health.create_combined_wsgi_app(
        sink.registry,
        metrics_path=config.exporter.path,
        is_ready=lambda: scheduler.is_ready,
    )
    server = health.start_http_server(config.exporter.port, app)

    scheduler.start()
    try:
        stop_event.wait()
    finally:
        if not scheduler.stop(timeout=SHUTDOWN_TIMEOUT):
            logger.warning("Probe cycle still running at shutdown")
        server.shutdown()
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Parse arguments, load configuration and run the requested mode.

    Returns:
        Process exit code
    """
    args = parse_args(argv)

    # Errors only until the configured level is known
    structured_logging.setup_structured_logging(level="error")

    try:
        config = load_config(args.config)
    except ConfigError as e:
        logger.error(f"invalid configuration, {e}")
        return 1

    structured_logging.setup_structured_logging(level=config.log.level, json_format=config.log.json)
    if config.s3.locking_object_check_enabled:
        logger.warning("enable_locking_object_check is set but object locking is not probed")

    try:
        if args.first_run:
            return run_first_run(config)

        initialize_tracing()
        stop_event = threading.Event()
        install_signal_handlers(stop_event)
        return run_exporter(config, stop_event)
    except ConfigError as e:
        logger.error(f"invalid configuration, {e}")
        return 1
    except BootstrapError as e:
        logger.error(str(e))
        return 1
