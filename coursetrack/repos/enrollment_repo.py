from __future__ import annotations

from dataclasses import replace
from typing import Protocol
from uuid import UUID

from coursetrack.models.enrollment import Enrollment, EnrollmentStatus


class EnrollmentRepo(Protocol):
    async def get(self, enrollment_id: UUID) -> Enrollment | None: ...

    async def get_for_update(self, enrollment_id: UUID) -> Enrollment | None:
        """Read and lock the enrollment until the unit of work ends."""
        ...

    async def get_by_student_and_course(
        self, student_id: UUID, course_id: UUID
    ) -> Enrollment | None: ...

    async def add_or_get(self, enrollment: Enrollment) -> tuple[Enrollment, bool]:
        """Insert unless the (student_id, course_id) pair is already enrolled.

        Returns (stored_enrollment, created).
        """
        ...

    async def mark_completed(
        self, enrollment_id: UUID, completed_at: int
    ) -> Enrollment | None:
        """Move an active enrollment to completed.

        Returns the updated enrollment, or None if it was not active
        (already completed by someone else, or missing).
        """
        ...

    async def list_by_student(
        self, student_id: UUID, status: EnrollmentStatus | None = None
    ) -> list[Enrollment]: ...


class InMemoryEnrollmentRepo:
    def __init__(self) -> None:
        self._by_id: dict[UUID, Enrollment] = {}
        self._by_pair: dict[tuple[UUID, UUID], UUID] = {}

    async def get(self, enrollment_id: UUID) -> Enrollment | None:
        return self._by_id.get(enrollment_id)

    async def get_for_update(self, enrollment_id: UUID) -> Enrollment | None:
        # The in-memory unit of work already holds the store lock.
        return self._by_id.get(enrollment_id)

    async def get_by_student_and_course(
        self, student_id: UUID, course_id: UUID
    ) -> Enrollment | None:
        enrollment_id = self._by_pair.get((student_id, course_id))
        if enrollment_id is None:
            return None
        return self._by_id[enrollment_id]

    async def add_or_get(self, enrollment: Enrollment) -> tuple[Enrollment, bool]:
        key = (enrollment.student_id, enrollment.course_id)
        existing_id = self._by_pair.get(key)
        if existing_id is not None:
            return self._by_id[existing_id], False
        self._by_id[enrollment.id] = enrollment
        self._by_pair[key] = enrollment.id
        return enrollment, True

    async def mark_completed(
        self, enrollment_id: UUID, completed_at: int
    ) -> Enrollment | None:
        e = self._by_id.get(enrollment_id)
        if e is None or not e.is_active:
            return None
        updated = replace(e, status="completed", completed_at=completed_at)
        self._by_id[enrollment_id] = updated
        return updated

    async def list_by_student(
        self, student_id: UUID, status: EnrollmentStatus | None = None
    ) -> list[Enrollment]:
        return [
            e
            for e in self._by_id.values()
            if e.student_id == student_id and (status is None or e.status == status)
        ]

    def snapshot(self) -> tuple[dict, dict]:
        return dict(self._by_id), dict(self._by_pair)

    def restore(self, snap: tuple[dict, dict]) -> None:
        self._by_id, self._by_pair = snap
