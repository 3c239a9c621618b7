"""Tests for the /metrics and /health endpoint."""

import json
from wsgiref.util import setup_testing_defaults

import requests

from msa_exporter.server import MetricsServer, create_app


def _call(app, path):
    environ = {}
    setup_testing_defaults(environ)
    environ["PATH_INFO"] = path
    captured = {}

    def start_response(status, headers, exc_info=None):
        captured["status"] = status
        captured["headers"] = dict(headers)

    body = b"".join(app(environ, start_response))
    return captured["status"], captured["headers"], body


def test_health_endpoint(registry):
    status, headers, body = _call(create_app(registry), "/health")

    assert status == "200 OK"
    assert headers["Content-Type"] == "application/json"
    assert json.loads(body) == {"status": "healthy", "service": "msa_exporter"}


def test_metrics_endpoint_serves_registry(registry):
    metric = registry.get_or_create("msa_controller_cpu", "CPU Load", ["controller"])
    registry.set(metric, {"controller": "controller_a"}, 12.0)

    status, headers, body = _call(create_app(registry), "/metrics")

    assert status.startswith("200")
    assert b"# HELP msa_controller_cpu CPU Load" in body
    assert b'msa_controller_cpu{controller="controller_a"} 12.0' in body


def test_unknown_path(registry):
    status, _, _ = _call(create_app(registry), "/nope")
    assert status == "404 Not Found"


def test_server_start_and_stop(registry):
    server = MetricsServer(registry, port=0, addr="127.0.0.1")
    server.start()
    server.start()
    try:
        resp = requests.get(f"http://127.0.0.1:{server.server_port}/health", timeout=5)
        assert resp.status_code == 200
        assert resp.json()["status"] == "healthy"
    finally:
        server.stop()
    assert server.server_started is False
