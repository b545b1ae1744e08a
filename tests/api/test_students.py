from __future__ import annotations

import uuid

from fastapi.testclient import TestClient

from tests.conftest import auth, mint_token


def test_me_requires_token(client: TestClient) -> None:
    resp = client.get("/v1/students/me")
    assert resp.status_code == 401


def test_me_rejects_garbage_token(client: TestClient) -> None:
    resp = client.get("/v1/students/me", headers=auth("not-a-jwt"))
    assert resp.status_code == 401
    assert resp.json()["detail"] == "Invalid token"


def test_me_rejects_non_account_subject(client: TestClient) -> None:
    token = mint_token(username="service-account")
    resp = client.post("/v1/students/me", headers=auth(token))
    assert resp.status_code == 401


def test_get_me_before_creation_is_404(client: TestClient, token: str) -> None:
    resp = client.get("/v1/students/me", headers=auth(token))
    assert resp.status_code == 404
    assert resp.json()["code"] == "not_found"


def test_create_me_is_idempotent(client: TestClient) -> None:
    account = str(uuid.uuid4())
    token = mint_token(username=account)

    first = client.post("/v1/students/me", headers=auth(token))
    second = client.post("/v1/students/me", headers=auth(token))

    assert first.status_code == 200
    assert first.json() == second.json()
    assert first.json()["external_user_id"] == account

    resp = client.get("/v1/students/me", headers=auth(token))
    assert resp.json()["id"] == first.json()["id"]


def test_enrollment_and_certificate_lists(client: TestClient, course, token: str) -> None:
    course_, _ = course
    enrolled = client.post(
        "/v1/enrollments", json={"course_id": str(course_.id)}, headers=auth(token)
    )
    assert enrolled.status_code == 201

    all_resp = client.get("/v1/students/me/enrollments", headers=auth(token))
    completed_resp = client.get(
        "/v1/students/me/enrollments", params={"status": "completed"}, headers=auth(token)
    )
    certs = client.get("/v1/students/me/certificates", headers=auth(token))

    assert [e["id"] for e in all_resp.json()] == [enrolled.json()["id"]]
    assert completed_resp.json() == []
    assert certs.json() == []


def test_enrollment_list_rejects_unknown_status(client: TestClient, token: str) -> None:
    client.post("/v1/students/me", headers=auth(token))
    resp = client.get(
        "/v1/students/me/enrollments", params={"status": "archived"}, headers=auth(token)
    )
    assert resp.status_code == 422
