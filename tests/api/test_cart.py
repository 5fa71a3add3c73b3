from __future__ import annotations

from fastapi.testclient import TestClient

from tests.conftest import auth, mint_token


def test_cart_starts_empty(client: TestClient, token: str) -> None:
    resp = client.get("/v1/cart", headers=auth(token))
    assert resp.status_code == 200
    assert resp.json() == {"items": [], "total": 0}


def test_add_and_remove(client: TestClient, token: str) -> None:
    headers = auth(token)
    resp = client.post("/v1/cart", json={"course_id": "course-1"}, headers=headers)
    assert resp.status_code == 201
    client.post("/v1/cart", json={"course_id": "course-1"}, headers=headers)
    resp = client.post("/v1/cart", json={"course_id": "course-2"}, headers=headers)
    body = resp.json()
    assert [i["course_id"] for i in body["items"]] == ["course-1", "course-2"]
    assert body["total"] == 70.0

    resp = client.delete("/v1/cart/course-1", headers=headers)
    assert [i["course_id"] for i in resp.json()["items"]] == ["course-2"]

    resp = client.delete("/v1/cart", headers=headers)
    assert resp.json()["items"] == []


def test_add_unknown_course_is_404(client: TestClient, token: str) -> None:
    resp = client.post("/v1/cart", json={"course_id": "nope"}, headers=auth(token))
    assert resp.status_code == 404


def test_carts_are_per_user(client: TestClient) -> None:
    alice = auth(mint_token("alice"))
    bob = auth(mint_token("bob"))
    client.post("/v1/cart", json={"course_id": "course-1"}, headers=alice)
    assert client.get("/v1/cart", headers=bob).json()["items"] == []
