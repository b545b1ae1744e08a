"""Administrative enrollment operations (admin role only).

Forced completion bypasses lesson progress, so it is gated here rather
than in the enrollment core, which carries no authorization rules.
"""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, status

from coursetrack.api.dependencies import EnrollmentServiceDep, require_role
from coursetrack.api.schemas import AdminEnrollIn, EnrollmentOut

router = APIRouter(
    prefix="/v1/admin",
    tags=["admin"],
    dependencies=[Depends(require_role("admin"))],
)


@router.post(
    "/enrollments", response_model=EnrollmentOut, status_code=status.HTTP_201_CREATED
)
async def enroll_student(body: AdminEnrollIn, service: EnrollmentServiceDep) -> EnrollmentOut:
    enrollment = await service.enroll(body.student_id, body.course_id)
    return EnrollmentOut.of(enrollment)


@router.post("/enrollments/{enrollment_id}/complete", response_model=EnrollmentOut)
async def force_complete(enrollment_id: UUID, service: EnrollmentServiceDep) -> EnrollmentOut:
    enrollment = await service.force_complete(enrollment_id)
    return EnrollmentOut.of(enrollment)
