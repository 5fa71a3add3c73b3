from __future__ import annotations

from fastapi.testclient import TestClient

from tests.conftest import auth


def test_health_without_backing_services(client: TestClient) -> None:
    resp = client.get("/health")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "ok"
    assert body["checks"] == {"redis": "not_configured", "database": "not_configured"}


def test_health_counts_sessions(client: TestClient, token: str) -> None:
    client.get("/v1/courses", headers=auth(token))
    client.get("/v1/cart", headers=auth(token))
    assert client.get("/health").json()["sessions"] == 1
