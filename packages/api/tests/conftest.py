# This project was developed with assistance from AI tools.
"""Shared fixtures for API unit tests.

``client`` wraps the real app with the database session, artifact store and
current user replaced by test doubles. Overrides are cleared after each test.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest
from db import get_db
from fastapi.testclient import TestClient

from src.main import app as real_app
from src.middleware.auth import get_current_user
from src.services.storage import get_storage_service

from tests.factories import make_session, make_user


@pytest.fixture(autouse=True)
def _clean_overrides():
    yield
    real_app.dependency_overrides.clear()


@pytest.fixture
def mock_session():
    return make_session()


@pytest.fixture
def mock_storage():
    storage = MagicMock()
    storage.store = AsyncMock(return_value="kyc/address/1700000000000-abcd.jpg")
    storage.exists = AsyncMock(return_value=True)
    storage.get_download_url = AsyncMock(return_value="http://minio/presigned")
    return storage


@pytest.fixture
def make_client(mock_session, mock_storage):
    """Factory fixture: TestClient acting as ``user`` against mocked backends."""

    def _make(user=None) -> TestClient:
        current = user or make_user()

        async def fake_db():
            yield mock_session

        real_app.dependency_overrides[get_current_user] = lambda: current
        real_app.dependency_overrides[get_db] = fake_db
        real_app.dependency_overrides[get_storage_service] = lambda: mock_storage
        return TestClient(real_app, raise_server_exceptions=False)

    return _make


@pytest.fixture
def client(make_client):
    """TestClient acting as driver-1."""
    return make_client()
