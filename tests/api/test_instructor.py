from __future__ import annotations

from fastapi.testclient import TestClient

from tests.conftest import auth, mint_token


def _instructor_headers(user_id: str = "inst-1") -> dict[str, str]:
    return auth(mint_token(username=user_id, roles=["instructor"]))


def test_instructor_routes_need_the_role(client: TestClient, token: str) -> None:
    assert client.get("/v1/instructor/revenue", headers=auth(token)).status_code == 403
    resp = client.get(
        "/v1/instructor/courses/course-1/students", headers=auth(token)
    )
    assert resp.status_code == 403


def test_students_and_revenue_after_checkout(
    client: TestClient, token: str
) -> None:
    client.post("/v1/checkout/course-1", json={}, headers=auth(token))
    client.post(
        "/v1/checkout/course-2", json={"payment_method": "bank"}, headers=auth(token)
    )

    students = client.get(
        "/v1/instructor/courses/course-1/students", headers=_instructor_headers()
    )
    assert students.status_code == 200
    assert [e["user_id"] for e in students.json()] == ["test-user"]

    revenue = client.get("/v1/instructor/revenue", headers=_instructor_headers())
    assert revenue.status_code == 200
    body = revenue.json()
    assert body["total_revenue"] == 70.0
    assert body["platform_fees"] == 28.0
    assert body["instructor_earnings"] == 42.0
    assert body["payment_count"] == 2
    assert len(body["payments"]) == 2


def test_students_of_someone_elses_course_is_forbidden(client: TestClient) -> None:
    resp = client.get(
        "/v1/instructor/courses/course-1/students",
        headers=_instructor_headers("inst-9"),
    )
    assert resp.status_code == 403


def test_students_of_unknown_course_is_404(client: TestClient) -> None:
    resp = client.get(
        "/v1/instructor/courses/nope/students", headers=_instructor_headers()
    )
    assert resp.status_code == 404


def test_revenue_store_failure_is_502(
    client: TestClient, collaborators, monkeypatch
) -> None:
    async def down(*args, **kwargs):
        raise ConnectionError("payment store down")

    monkeypatch.setattr(collaborators.payments, "list_for_instructor", down)
    resp = client.get("/v1/instructor/revenue", headers=_instructor_headers())
    assert resp.status_code == 502
