"""PostgreSQL implementation of EnrollmentRepo."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from coursetrack.db.tables import EnrollmentRow
from coursetrack.models.enrollment import Enrollment, EnrollmentStatus


class PgEnrollmentRepo:
    """Satisfies the EnrollmentRepo Protocol using PostgreSQL."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, enrollment_id: UUID) -> Enrollment | None:
        stmt = (
            select(EnrollmentRow)
            .where(EnrollmentRow.id == enrollment_id)
            .execution_options(populate_existing=True)
        )
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_enrollment(row)

    async def get_for_update(self, enrollment_id: UUID) -> Enrollment | None:
        # Row lock held until commit/rollback: every mutation of one
        # enrollment (lesson events, forced completion) runs one at a time.
        stmt = (
            select(EnrollmentRow)
            .where(EnrollmentRow.id == enrollment_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_enrollment(row)

    async def get_by_student_and_course(
        self, student_id: UUID, course_id: UUID
    ) -> Enrollment | None:
        stmt = select(EnrollmentRow).where(
            EnrollmentRow.student_id == student_id,
            EnrollmentRow.course_id == course_id,
        )
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_enrollment(row)

    async def add_or_get(self, enrollment: Enrollment) -> tuple[Enrollment, bool]:
        stmt = (
            pg_insert(EnrollmentRow)
            .values(
                id=enrollment.id,
                student_id=enrollment.student_id,
                course_id=enrollment.course_id,
                status=enrollment.status,
                created_at=enrollment.created_at,
                completed_at=enrollment.completed_at,
            )
            .on_conflict_do_nothing(
                index_elements=[EnrollmentRow.student_id, EnrollmentRow.course_id]
            )
            .returning(EnrollmentRow.id)
        )
        inserted = (await self._session.execute(stmt)).scalar_one_or_none()
        if inserted is not None:
            return enrollment, True

        existing = await self.get_by_student_and_course(
            enrollment.student_id, enrollment.course_id
        )
        if existing is None:
            raise RuntimeError(
                f"enrollment for student {enrollment.student_id} "
                f"course {enrollment.course_id} vanished after conflict"
            )
        return existing, False

    async def mark_completed(
        self, enrollment_id: UUID, completed_at: int
    ) -> Enrollment | None:
        stmt = (
            update(EnrollmentRow)
            .where(EnrollmentRow.id == enrollment_id)
            .where(EnrollmentRow.status == "active")
            .values(status="completed", completed_at=completed_at)
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        if result.rowcount == 0:
            return None  # not active any more: a concurrent completion won
        return await self.get(enrollment_id)

    async def list_by_student(
        self, student_id: UUID, status: EnrollmentStatus | None = None
    ) -> list[Enrollment]:
        stmt = select(EnrollmentRow).where(EnrollmentRow.student_id == student_id)
        if status is not None:
            stmt = stmt.where(EnrollmentRow.status == status)
        stmt = stmt.order_by(EnrollmentRow.created_at)
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_enrollment(r) for r in rows]


def _row_to_enrollment(row: EnrollmentRow) -> Enrollment:
    return Enrollment(
        id=row.id,
        student_id=row.student_id,
        course_id=row.course_id,
        created_at=row.created_at,
        status=row.status,  # type: ignore[arg-type]
        completed_at=row.completed_at,
    )
