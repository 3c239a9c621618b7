"""Shared test fixtures."""

from unittest.mock import Mock

import pytest
from prometheus_client import CollectorRegistry

from msa_exporter.connection import MSASession
from msa_exporter.exceptions import FetchError
from msa_exporter.registry import MetricRegistry


class FakeSession:
    """Stands in for MSASession, serving canned bodies by show path."""

    def __init__(self, bodies):
        self.host = "msa.example.com"
        self.bodies = dict(bodies)
        self.calls = []

    def fetch(self, path):
        self.calls.append(path)
        body = self.bodies.get(path)
        if body is None:
            raise FetchError(self.host, path, "HTTP 404", status_code=404)
        return body


@pytest.fixture
def make_response():
    def _make(status_code=200, content=b""):
        return Mock(status_code=status_code, content=content)
    return _make


@pytest.fixture
def registry() -> MetricRegistry:
    return MetricRegistry(CollectorRegistry())


@pytest.fixture
def fake_session():
    def _make(bodies):
        return FakeSession(bodies)
    return _make


@pytest.fixture
def http_session() -> Mock:
    return Mock()


@pytest.fixture
def msa_session(http_session) -> MSASession:
    return MSASession("msa.example.com", "monitor", "KEY1", 5.0, http_session=http_session)
