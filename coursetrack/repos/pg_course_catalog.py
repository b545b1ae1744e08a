"""PostgreSQL implementation of CourseCatalog.

Runs on the unit of work's session.  Lookups that happen while the
enrollment row is locked must not ask the pool for a second connection.
"""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from coursetrack.db.tables import CourseRow, LessonRow


class PgCourseCatalog:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def course_exists(self, course_id: UUID) -> bool:
        stmt = select(CourseRow.id).where(CourseRow.id == course_id)
        return (await self._session.execute(stmt)).scalar_one_or_none() is not None

    async def lesson_count(self, course_id: UUID) -> int:
        stmt = (
            select(func.count()).select_from(LessonRow).where(LessonRow.course_id == course_id)
        )
        return (await self._session.execute(stmt)).scalar_one()

    async def lesson_belongs_to_course(self, lesson_id: UUID, course_id: UUID) -> bool:
        stmt = select(LessonRow.id).where(
            LessonRow.id == lesson_id, LessonRow.course_id == course_id
        )
        return (await self._session.execute(stmt)).scalar_one_or_none() is not None
