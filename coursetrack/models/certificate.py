from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID, uuid4


@dataclass(frozen=True, slots=True)
class Certificate:
    """Proof of completion. At most one per enrollment; never modified."""

    id: UUID
    enrollment_id: UUID
    student_id: UUID
    course_id: UUID
    issued_at: int

    @staticmethod
    def new(
        *, enrollment_id: UUID, student_id: UUID, course_id: UUID, issued_at: int
    ) -> Certificate:
        return Certificate(
            id=uuid4(),
            enrollment_id=enrollment_id,
            student_id=student_id,
            course_id=course_id,
            issued_at=issued_at,
        )
