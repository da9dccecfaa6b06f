"""Metrics and health check HTTP endpoints."""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable

from prometheus_client import CollectorRegistry, make_wsgi_app
from werkzeug.serving import BaseWSGIServer, make_server
from werkzeug.wrappers import Response

from .constants import HEALTH_PATH, READY_PATH

logger = logging.getLogger(__name__)


def create_combined_wsgi_app(
    registry: CollectorRegistry,
    metrics_path: str = "/metrics",
    is_ready: Callable[[], bool] | None = None,
) -> Any:
    """Create a WSGI app serving metrics and health check endpoints.

    Args:
        registry: Registry exposed on ``metrics_path``
        metrics_path: Path the metrics are served on
        is_ready: Readiness callback, ready when omitted

    Returns:
        Combined WSGI application
    """
    metrics_app = make_wsgi_app(registry)

    def combined_app(environ: dict[str, Any], start_response: Any) -> Any:
        path = environ.get("PATH_INFO", "")

        if path == HEALTH_PATH:
            response = Response('{"status":"ok"}', mimetype="application/json", status=200)
        elif path == READY_PATH:
            if is_ready is None or is_ready():
                response = Response('{"status":"ready"}', mimetype="application/json", status=200)
            else:
                response = Response('{"status":"not ready"}', mimetype="application/json", status=503)
        elif path == metrics_path or path == metrics_path.rstrip("/"):
            return metrics_app(environ, start_response)
        else:
            response = Response('{"error":"not found"}', mimetype="application/json", status=404)

        return response(environ, start_response)

    return combined_app


def start_http_server(port: int, app: Any, host: str = "") -> BaseWSGIServer:
    """Serve ``app`` from a background thread.

    Returns:
        The running server, call ``shutdown()`` to stop it
    """
    server = make_server(host, port, app, threaded=True)
    thread = threading.Thread(target=server.serve_forever, name="metrics-server", daemon=True)
    thread.start()
    logger.info(f"Listening on {host or '0.0.0.0'}:{port}")
    return server
