"""
Shared fixtures: a client with a real requests.Session whose ``send`` is
patched per test, and a factory for canned HTTP responses.
"""
import json
import logging

import pytest
import requests

from asana_client import Client, ClientConfig


def _make_response(status_code=200, payload=None, body=None, headers=None, reason="OK"):
    response = requests.Response()
    response.status_code = status_code
    response.reason = reason
    response._content = body if body is not None else json.dumps(payload).encode("utf-8")
    response._content_consumed = True
    response.headers.update(headers or {})
    return response


@pytest.fixture
def make_response():
    """Build a requests.Response with a canned body."""
    return _make_response


@pytest.fixture
def client():
    """Client pointed at a test base URL with a bearer token."""
    config = ClientConfig(base_url="https://asana.test/api/1.0", access_token="secret-token")
    with Client(config) as c:
        yield c


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Debug clients raise the package logger's level; restore it after each test."""
    package_logger = logging.getLogger("asana_client")
    level = package_logger.level
    yield
    package_logger.setLevel(level)
