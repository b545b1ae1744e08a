"""Response/request bodies for the gateway endpoints.

Ids travel as strings and timestamps as epoch seconds, matching the
domain dataclasses one-to-one.
"""

from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel

from coursetrack.models.certificate import Certificate
from coursetrack.models.enrollment import Enrollment, LessonProgress
from coursetrack.models.student import Student


class StudentOut(BaseModel):
    id: str
    external_user_id: str
    created_at: int

    @classmethod
    def of(cls, s: Student) -> StudentOut:
        return cls(id=str(s.id), external_user_id=str(s.external_user_id), created_at=s.created_at)


class EnrollmentOut(BaseModel):
    id: str
    student_id: str
    course_id: str
    status: str
    created_at: int
    completed_at: int | None = None

    @classmethod
    def of(cls, e: Enrollment) -> EnrollmentOut:
        return cls(
            id=str(e.id),
            student_id=str(e.student_id),
            course_id=str(e.course_id),
            status=e.status,
            created_at=e.created_at,
            completed_at=e.completed_at,
        )


class LessonProgressOut(BaseModel):
    enrollment_id: str
    lesson_id: str
    state: str
    started_at: int | None = None
    completed_at: int | None = None

    @classmethod
    def of(cls, p: LessonProgress) -> LessonProgressOut:
        return cls(
            enrollment_id=str(p.enrollment_id),
            lesson_id=str(p.lesson_id),
            state=p.state,
            started_at=p.started_at,
            completed_at=p.completed_at,
        )


class EnrollmentDetailOut(EnrollmentOut):
    percent_complete: int
    lessons: list[LessonProgressOut]


class ProgressOut(BaseModel):
    enrollment_id: str
    percent_complete: int


class CertificateOut(BaseModel):
    id: str
    enrollment_id: str
    student_id: str
    course_id: str
    issued_at: int

    @classmethod
    def of(cls, c: Certificate) -> CertificateOut:
        return cls(
            id=str(c.id),
            enrollment_id=str(c.enrollment_id),
            student_id=str(c.student_id),
            course_id=str(c.course_id),
            issued_at=c.issued_at,
        )


class EnrollIn(BaseModel):
    course_id: UUID


class AdminEnrollIn(BaseModel):
    student_id: UUID
    course_id: UUID
