# -----------------------------------------------------------------------------
# Copyright (c) 2025 MSA Exporter
# Licensed under the MIT License. See LICENSE in project root for details.
# -----------------------------------------------------------------------------

"""
HTTP endpoint serving /metrics (Prometheus text format) and /health.
"""

import json
import logging
import threading
from typing import Optional
from wsgiref.simple_server import WSGIRequestHandler, make_server

from prometheus_client import make_wsgi_app
from prometheus_client.exposition import ThreadingWSGIServer

from msa_exporter.registry import MetricRegistry

LOG = logging.getLogger(__name__)

SERVICE_NAME = "msa_exporter"
HEALTH_BODY = json.dumps({"status": "healthy", "service": SERVICE_NAME}, separators=(",", ":")).encode("utf-8")


class _QuietHandler(WSGIRequestHandler):
    """Keep per-request access lines out of the exporter log."""

    def log_message(self, format, *args):
        return


def create_app(registry: MetricRegistry):
    """WSGI application dispatching /metrics and /health."""
    metrics_app = make_wsgi_app(registry.prometheus_registry)

    def app(environ, start_response):
        path = environ.get("PATH_INFO", "/")
        if path == "/metrics":
            return metrics_app(environ, start_response)
        if path == "/health":
            start_response("200 OK", [("Content-Type", "application/json"),
                                      ("Content-Length", str(len(HEALTH_BODY)))])
            return [HEALTH_BODY]
        start_response("404 Not Found", [("Content-Type", "text/plain; charset=utf-8")])
        return [b"not found\n"]

    return app


class MetricsServer:
    """Serves the registry on a daemon thread while the collector keeps writing to it."""

    def __init__(self, registry: MetricRegistry, port: int = 8000, addr: str = "0.0.0.0"):
        self.registry = registry
        self.port = port
        self.addr = addr
        self.server_started = False
        self.server_lock = threading.Lock()
        self._httpd = None
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        """Start the HTTP server if not already started."""
        with self.server_lock:
            if self.server_started:
                return
            try:
                self._httpd = make_server(self.addr, self.port, create_app(self.registry),
                                          ThreadingWSGIServer, handler_class=_QuietHandler)
            except OSError as e:
                LOG.error(f"Failed to start metrics server on port {self.port}: {e}")
                raise
            self._thread = threading.Thread(target=self._httpd.serve_forever, name="metrics-server", daemon=True)
            self._thread.start()
            self.server_started = True
            LOG.info(f"Metrics server started on port {self.port}")

    @property
    def server_port(self) -> int:
        """Port actually bound, useful when started with port 0."""
        return self._httpd.server_port if self._httpd is not None else self.port

    def stop(self) -> None:
        with self.server_lock:
            if not self.server_started:
                return
            self._httpd.shutdown()
            self._httpd.server_close()
            self.server_started = False
            LOG.info("Metrics server stopped")
