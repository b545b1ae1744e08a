from __future__ import annotations

import logging
from uuid import UUID

from coursetrack.models.student import Student
from coursetrack.repos.unit_of_work import UnitOfWork
from coursetrack.services.clock import Clock
from coursetrack.services.errors import NotFoundError

logger = logging.getLogger(__name__)


class StudentDirectory:
    """Maps identity-service accounts to Students, creating them lazily."""

    def __init__(self, clock: Clock) -> None:
        self._clock = clock

    async def get_or_create(self, uow: UnitOfWork, external_user_id: UUID) -> Student:
        existing = await uow.students.get_by_external_user(external_user_id)
        if existing is not None:
            return existing

        # No check-then-create: the insert itself resolves a concurrent
        # first call for the same account in favour of whoever committed.
        student, created = await uow.students.add_or_get(
            Student.new(external_user_id=external_user_id, created_at=self._clock.now())
        )
        if created:
            logger.info(
                "Student created id=%s external_user=%s",
                student.id,
                external_user_id,
                extra={"student_id": str(student.id)},
            )
        return student

    async def get_by_external_user(
        self, uow: UnitOfWork, external_user_id: UUID
    ) -> Student:
        student = await uow.students.get_by_external_user(external_user_id)
        if student is None:
            raise NotFoundError("student", external_user_id)
        return student

    async def get(self, uow: UnitOfWork, student_id: UUID) -> Student:
        student = await uow.students.get_by_id(student_id)
        if student is None:
            raise NotFoundError("student", student_id)
        return student
