# tests/test_health.py
from typing import Generator

import pytest
from fastapi.testclient import TestClient

from review_pulse.main import app


@pytest.fixture(scope="module")
def client() -> Generator[TestClient, None, None]:
    """Reusable TestClient for the module."""
    with TestClient(app) as c:
        yield c
    app.state.orchestrator = None
    app.state.sheet_logger = None


def test_health_status(client: TestClient) -> None:
    res = client.get("/health")
    assert res.status_code == 200
    assert res.json()["status"] == "ok"


def test_health_content_type(client: TestClient) -> None:
    res = client.get("/health")
    assert res.headers["content-type"].startswith("application/json")


def test_startup_builds_orchestrator(client: TestClient) -> None:
    assert app.state.orchestrator is not None
    assert client.get("/api/v1/reviews").status_code == 200


def test_metrics_exposed(client: TestClient) -> None:
    res = client.get("/metrics")
    assert res.status_code == 200
