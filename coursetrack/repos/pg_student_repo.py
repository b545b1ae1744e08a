"""PostgreSQL implementation of StudentRepo."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from coursetrack.db.tables import StudentRow
from coursetrack.models.student import Student


class PgStudentRepo:
    """Satisfies the StudentRepo Protocol using PostgreSQL via SQLAlchemy."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, student_id: UUID) -> Student | None:
        row = await self._session.get(StudentRow, student_id)
        if row is None:
            return None
        return _row_to_student(row)

    async def get_by_external_user(self, external_user_id: UUID) -> Student | None:
        stmt = select(StudentRow).where(StudentRow.external_user_id == external_user_id)
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_student(row)

    async def add_or_get(self, student: Student) -> tuple[Student, bool]:
        # ON CONFLICT DO NOTHING waits for a concurrent inserter to finish,
        # so the follow-up SELECT sees the winner's committed row.
        stmt = (
            pg_insert(StudentRow)
            .values(
                id=student.id,
                external_user_id=student.external_user_id,
                created_at=student.created_at,
            )
            .on_conflict_do_nothing(index_elements=[StudentRow.external_user_id])
            .returning(StudentRow.id)
        )
        inserted = (await self._session.execute(stmt)).scalar_one_or_none()
        if inserted is not None:
            return student, True

        existing = await self.get_by_external_user(student.external_user_id)
        if existing is None:
            raise RuntimeError(
                f"student for external user {student.external_user_id} vanished after conflict"
            )
        return existing, False


def _row_to_student(row: StudentRow) -> Student:
    return Student(
        id=row.id,
        external_user_id=row.external_user_id,
        created_at=row.created_at,
    )
