from __future__ import annotations

from typing import Protocol
from uuid import UUID

from coursetrack.models.student import Student


class StudentRepo(Protocol):
    async def get_by_id(self, student_id: UUID) -> Student | None: ...
    async def get_by_external_user(self, external_user_id: UUID) -> Student | None: ...

    async def add_or_get(self, student: Student) -> tuple[Student, bool]:
        """Insert unless a student with the same external id exists.

        Returns (stored_student, created).  When another writer got there
        first, their row is returned with created=False.
        """
        ...


class InMemoryStudentRepo:
    def __init__(self) -> None:
        self._by_id: dict[UUID, Student] = {}
        self._by_external: dict[UUID, Student] = {}

    async def get_by_id(self, student_id: UUID) -> Student | None:
        return self._by_id.get(student_id)

    async def get_by_external_user(self, external_user_id: UUID) -> Student | None:
        return self._by_external.get(external_user_id)

    async def add_or_get(self, student: Student) -> tuple[Student, bool]:
        existing = self._by_external.get(student.external_user_id)
        if existing is not None:
            return existing, False
        self._by_id[student.id] = student
        self._by_external[student.external_user_id] = student
        return student, True

    def snapshot(self) -> tuple[dict, dict]:
        return dict(self._by_id), dict(self._by_external)

    def restore(self, snap: tuple[dict, dict]) -> None:
        self._by_id, self._by_external = snap
