# This project was developed with assistance from AI tools.
"""Tests for the health endpoint."""

from unittest.mock import AsyncMock, MagicMock

from db import get_db_service
from fastapi.testclient import TestClient

from src.main import app


def test_health_reports_api_and_database():
    db_service = MagicMock()
    db_service.health_check = AsyncMock(
        return_value={"name": "Database", "status": "healthy", "message": "PostgreSQL 16.2"}
    )
    app.dependency_overrides[get_db_service] = lambda: db_service

    resp = TestClient(app).get("/health/")

    assert resp.status_code == 200
    body = resp.json()
    assert [c["name"] for c in body] == ["courier-kyc", "Database"]
    assert body[0]["status"] == "healthy"
    assert body[1]["message"] == "PostgreSQL 16.2"
