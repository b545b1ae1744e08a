"""PostgreSQL implementation of LessonProgressRepo."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from coursetrack.db.tables import LessonProgressRow
from coursetrack.models.enrollment import LessonProgress


class PgLessonProgressRepo:
    """Satisfies the LessonProgressRepo Protocol using PostgreSQL."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, enrollment_id: UUID, lesson_id: UUID) -> LessonProgress | None:
        stmt = (
            select(LessonProgressRow)
            .where(
                LessonProgressRow.enrollment_id == enrollment_id,
                LessonProgressRow.lesson_id == lesson_id,
            )
            .execution_options(populate_existing=True)
        )
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_progress(row)

    async def save(self, progress: LessonProgress) -> None:
        values = {
            "state": progress.state,
            "started_at": progress.started_at,
            "completed_at": progress.completed_at,
        }
        stmt = (
            pg_insert(LessonProgressRow)
            .values(
                enrollment_id=progress.enrollment_id,
                lesson_id=progress.lesson_id,
                **values,
            )
            .on_conflict_do_update(
                index_elements=[
                    LessonProgressRow.enrollment_id,
                    LessonProgressRow.lesson_id,
                ],
                set_=values,
            )
        )
        await self._session.execute(stmt)

    async def count_done(self, enrollment_id: UUID) -> int:
        stmt = (
            select(func.count())
            .select_from(LessonProgressRow)
            .where(
                LessonProgressRow.enrollment_id == enrollment_id,
                LessonProgressRow.state == "done",
            )
        )
        return (await self._session.execute(stmt)).scalar_one()

    async def list_by_enrollment(self, enrollment_id: UUID) -> list[LessonProgress]:
        stmt = (
            select(LessonProgressRow)
            .where(LessonProgressRow.enrollment_id == enrollment_id)
            .execution_options(populate_existing=True)
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_progress(r) for r in rows]


def _row_to_progress(row: LessonProgressRow) -> LessonProgress:
    return LessonProgress(
        enrollment_id=row.enrollment_id,
        lesson_id=row.lesson_id,
        state=row.state,  # type: ignore[arg-type]
        started_at=row.started_at,
        completed_at=row.completed_at,
    )
