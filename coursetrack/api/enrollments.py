"""Enrollment and lesson progress endpoints.

  POST /v1/enrollments                                   enroll the caller
  GET  /v1/enrollments/{id}                              status + lessons + percent
  GET  /v1/enrollments/{id}/progress                     percent only
  POST /v1/enrollments/{id}/lessons/{lesson_id}/start
  POST /v1/enrollments/{id}/lessons/{lesson_id}/complete

Every route under an enrollment id is scoped to the enrollment's owner
(admins excepted).  Lesson events are idempotent: repeating one returns
the stored record.
"""

from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status

from coursetrack.api.dependencies import (
    EnrollmentServiceDep,
    require_enrollment_access,
    require_external_user,
    require_user,
)
from coursetrack.api.schemas import (
    EnrollIn,
    EnrollmentDetailOut,
    EnrollmentOut,
    LessonProgressOut,
    ProgressOut,
)
from coursetrack.models.enrollment import Enrollment

router = APIRouter(
    prefix="/v1/enrollments",
    tags=["enrollments"],
    dependencies=[Depends(require_user)],
)


EnrollmentAccess = Annotated[Enrollment, Depends(require_enrollment_access)]


@router.post("", response_model=EnrollmentOut, status_code=status.HTTP_201_CREATED)
async def enroll(
    body: EnrollIn,
    external_user_id: Annotated[UUID, Depends(require_external_user)],
    service: EnrollmentServiceDep,
) -> EnrollmentOut:
    enrollment = await service.enroll_by_external_user(external_user_id, body.course_id)
    return EnrollmentOut.of(enrollment)


@router.get("/{enrollment_id}", response_model=EnrollmentDetailOut)
async def get_enrollment(
    enrollment: EnrollmentAccess, service: EnrollmentServiceDep
) -> EnrollmentDetailOut:
    lessons = await service.lesson_progress(enrollment.id)
    percent = await service.overall_progress(enrollment.id)
    return EnrollmentDetailOut(
        **EnrollmentOut.of(enrollment).model_dump(),
        percent_complete=percent,
        lessons=[LessonProgressOut.of(p) for p in lessons],
    )


@router.get("/{enrollment_id}/progress", response_model=ProgressOut)
async def get_progress(
    enrollment: EnrollmentAccess, service: EnrollmentServiceDep
) -> ProgressOut:
    percent = await service.overall_progress(enrollment.id)
    return ProgressOut(enrollment_id=str(enrollment.id), percent_complete=percent)


@router.post(
    "/{enrollment_id}/lessons/{lesson_id}/start", response_model=LessonProgressOut
)
async def start_lesson(
    enrollment: EnrollmentAccess, lesson_id: UUID, service: EnrollmentServiceDep
) -> LessonProgressOut:
    progress = await service.start_lesson(enrollment.id, lesson_id)
    return LessonProgressOut.of(progress)


@router.post(
    "/{enrollment_id}/lessons/{lesson_id}/complete", response_model=LessonProgressOut
)
async def complete_lesson(
    enrollment: EnrollmentAccess, lesson_id: UUID, service: EnrollmentServiceDep
) -> LessonProgressOut:
    progress = await service.complete_lesson(enrollment.id, lesson_id)
    return LessonProgressOut.of(progress)
