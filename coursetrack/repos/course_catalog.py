"""Read-only course reference data consumed by the enrollment core."""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from coursetrack.models.course import Course, Lesson


class CourseCatalog(Protocol):
    async def course_exists(self, course_id: UUID) -> bool: ...
    async def lesson_count(self, course_id: UUID) -> int: ...
    async def lesson_belongs_to_course(self, lesson_id: UUID, course_id: UUID) -> bool: ...


class InMemoryCourseCatalog:
    def __init__(self) -> None:
        self._courses: dict[UUID, Course] = {}
        self._lessons: dict[UUID, Lesson] = {}

    def add_course(self, course: Course, lessons: list[Lesson] | None = None) -> None:
        self._courses[course.id] = course
        for lesson in lessons or []:
            if lesson.course_id != course.id:
                raise ValueError("lesson belongs to a different course")
            self._lessons[lesson.id] = lesson

    async def course_exists(self, course_id: UUID) -> bool:
        return course_id in self._courses

    async def lesson_count(self, course_id: UUID) -> int:
        return sum(1 for lesson in self._lessons.values() if lesson.course_id == course_id)

    async def lesson_belongs_to_course(self, lesson_id: UUID, course_id: UUID) -> bool:
        lesson = self._lessons.get(lesson_id)
        return lesson is not None and lesson.course_id == course_id
