"""Shared fixtures: a fresh app and database for every test."""

import pytest
from fastapi.testclient import TestClient

from bluedock_api.app.core.config import Settings
from bluedock_api.app.main import create_app


@pytest.fixture
def settings(tmp_path):
    return Settings(
        database_url=str(tmp_path / "services.db"),
        log_level="WARNING",
        productivity_start_date="2025-11-27",
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    # The ``with`` block runs the startup/shutdown handlers.
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_service(client):
    def _make(**overrides):
        payload = {"customer_name": "Ana", "item_description": "Reel repair", "price": 150}
        payload.update(overrides)
        response = client.post("/api/services", json=payload)
        assert response.status_code == 201, response.text
        return response.json()["data"]

    return _make
