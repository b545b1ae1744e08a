from __future__ import annotations

from dataclasses import dataclass
from typing import Literal
from uuid import UUID, uuid4

EnrollmentStatus = Literal["active", "completed"]
# A lesson with no stored record has not been started.
LessonState = Literal["in_progress", "done"]


@dataclass(frozen=True, slots=True)
class Enrollment:
    id: UUID
    student_id: UUID
    course_id: UUID
    created_at: int
    status: EnrollmentStatus = "active"
    completed_at: int | None = None  # set only on transition to completed

    @staticmethod
    def new(*, student_id: UUID, course_id: UUID, created_at: int) -> Enrollment:
        return Enrollment(
            id=uuid4(),
            student_id=student_id,
            course_id=course_id,
            created_at=created_at,
        )

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    @property
    def is_completed(self) -> bool:
        return self.status == "completed"


@dataclass(frozen=True, slots=True)
class LessonProgress:
    """Per-lesson record, keyed by (enrollment_id, lesson_id)."""

    enrollment_id: UUID
    lesson_id: UUID
    state: LessonState
    started_at: int | None = None
    completed_at: int | None = None

    @property
    def is_done(self) -> bool:
        return self.state == "done"
