"""Student-facing endpoints, scoped to the calling account.

The caller is always identified by the token subject; a Student record
is created on first use (POST /v1/students/me or the first enrollment).
"""

from __future__ import annotations

from typing import Annotated, Literal
from uuid import UUID

from fastapi import APIRouter, Depends

from coursetrack.api.dependencies import EnrollmentServiceDep, require_external_user
from coursetrack.api.schemas import CertificateOut, EnrollmentOut, StudentOut

router = APIRouter(prefix="/v1/students", tags=["students"])

ExternalUser = Annotated[UUID, Depends(require_external_user)]


@router.post("/me", response_model=StudentOut)
async def create_me(
    external_user_id: ExternalUser, service: EnrollmentServiceDep
) -> StudentOut:
    student = await service.create_student(external_user_id)
    return StudentOut.of(student)


@router.get("/me", response_model=StudentOut)
async def get_me(external_user_id: ExternalUser, service: EnrollmentServiceDep) -> StudentOut:
    student = await service.get_student_by_external_user(external_user_id)
    return StudentOut.of(student)


@router.get("/me/enrollments", response_model=list[EnrollmentOut])
async def list_my_enrollments(
    external_user_id: ExternalUser,
    service: EnrollmentServiceDep,
    status: Literal["completed"] | None = None,
) -> list[EnrollmentOut]:
    student = await service.get_student_by_external_user(external_user_id)
    if status == "completed":
        enrollments = await service.completed_enrollments_for_student(student.id)
    else:
        enrollments = await service.enrollments_for_student(student.id)
    return [EnrollmentOut.of(e) for e in enrollments]


@router.get("/me/certificates", response_model=list[CertificateOut])
async def list_my_certificates(
    external_user_id: ExternalUser, service: EnrollmentServiceDep
) -> list[CertificateOut]:
    student = await service.get_student_by_external_user(external_user_id)
    certificates = await service.certificates_for_student(student.id)
    return [CertificateOut.of(c) for c in certificates]
