"""
Pytest configuration for openapi_router tests.

Each test gets a freshly built, unsealed router.
"""
import os

import pytest
from fastapi.testclient import TestClient

# Keep test runs independent of a developer's .env
os.environ.setdefault("LOG_LEVEL", "WARNING")

from openapi_router.config import Settings
from openapi_router.app import create_app

from tests.apps import build_router


@pytest.fixture
def settings():
    return Settings(LOG_LEVEL="WARNING", APP_TITLE="Test API", APP_VERSION="9.9.9")


@pytest.fixture
def router(settings):
    """Unsealed router with the sample todo routes registered."""
    return build_router(settings=settings)


@pytest.fixture
def app(router, settings):
    return create_app(router, settings=settings, context={"store": {"owner": "tests"}})


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def lenient_client(app):
    """Client that returns 5xx responses instead of re-raising server errors."""
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
