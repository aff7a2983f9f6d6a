"""API test fixtures: app wired to a JSON counter file in tmp_path."""

import pytest
from starlette.testclient import TestClient

from main import create_app


@pytest.fixture
def app(config, file_store):
    return create_app(config=config, store=file_store)


@pytest.fixture
def client(app):
    return TestClient(app, raise_server_exceptions=False)
