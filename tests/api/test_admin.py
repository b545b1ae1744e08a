from __future__ import annotations

import asyncio
import uuid

import pytest
from fastapi.testclient import TestClient

from coursetrack.services.enrollment_service import EnrollmentService
from tests.conftest import auth


def _student_id(service: EnrollmentService) -> str:
    return str(asyncio.run(service.create_student(uuid.uuid4())).id)


@pytest.mark.parametrize(
    ("method", "path"),
    [
        ("post", "/v1/admin/enrollments"),
        ("post", "/v1/admin/enrollments/00000000-0000-0000-0000-000000000000/complete"),
    ],
)
def test_admin_routes_forbid_plain_users(
    client: TestClient, token: str, method: str, path: str
) -> None:
    resp = getattr(client, method)(path, json={}, headers=auth(token))
    assert resp.status_code == 403


def test_admin_routes_require_token(client: TestClient) -> None:
    resp = client.post(f"/v1/admin/enrollments/{uuid.uuid4()}/complete")
    assert resp.status_code == 401


def test_admin_enrolls_existing_student(
    client: TestClient, service: EnrollmentService, course, admin_token: str
) -> None:
    course_, _ = course
    student_id = _student_id(service)

    resp = client.post(
        "/v1/admin/enrollments",
        json={"student_id": student_id, "course_id": str(course_.id)},
        headers=auth(admin_token),
    )

    assert resp.status_code == 201
    assert resp.json()["student_id"] == student_id


def test_admin_enroll_unknown_student_is_404(
    client: TestClient, course, admin_token: str
) -> None:
    course_, _ = course
    resp = client.post(
        "/v1/admin/enrollments",
        json={"student_id": str(uuid.uuid4()), "course_id": str(course_.id)},
        headers=auth(admin_token),
    )
    assert resp.status_code == 404


def test_force_complete_issues_one_certificate(
    client: TestClient, service: EnrollmentService, course, admin_token: str
) -> None:
    course_, _ = course
    student_id = _student_id(service)
    enrollment = client.post(
        "/v1/admin/enrollments",
        json={"student_id": student_id, "course_id": str(course_.id)},
        headers=auth(admin_token),
    ).json()
    path = f"/v1/admin/enrollments/{enrollment['id']}/complete"

    first = client.post(path, headers=auth(admin_token))
    second = client.post(path, headers=auth(admin_token))

    assert first.status_code == second.status_code == 200
    assert first.json()["status"] == "completed"
    assert second.json()["completed_at"] == first.json()["completed_at"]
    certificates = asyncio.run(service.certificates_for_student(uuid.UUID(student_id)))
    assert len(certificates) == 1

    progress = client.get(
        f"/v1/enrollments/{enrollment['id']}/progress", headers=auth(admin_token)
    )
    assert progress.json()["percent_complete"] == 0


def test_force_complete_unknown_enrollment_is_404(
    client: TestClient, admin_token: str
) -> None:
    resp = client.post(
        f"/v1/admin/enrollments/{uuid.uuid4()}/complete", headers=auth(admin_token)
    )
    assert resp.status_code == 404
