"""Pytest configuration and shared fixtures for pbx3-client tests."""

import os

import httpx
import pytest

from pbx3_client import ApiClient
from pbx3_client.testing import RecordingSession


@pytest.fixture(autouse=True)
def clear_env(monkeypatch):
    """Keep PBX3 settings from the developer's shell out of the tests."""
    for key in list(os.environ.keys()):
        if key.startswith(("PBX3_", "TEST_")):
            monkeypatch.delenv(key, raising=False)
    yield


@pytest.fixture
def session():
    return RecordingSession("https://pbx.test/api", "test-token")


@pytest.fixture
def make_client(session):
    """Build an ApiClient on ``session`` that answers through ``handler``."""

    def factory(handler, **kwargs) -> ApiClient:
        return ApiClient(session, transport=httpx.MockTransport(handler), **kwargs)

    return factory
