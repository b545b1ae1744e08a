from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID, uuid4


@dataclass(frozen=True, slots=True)
class Course:
    """Read-only reference data. Owned by the catalog, not the enrollment core."""

    id: UUID
    slug: str
    title: str

    @staticmethod
    def new(*, slug: str, title: str) -> Course:
        return Course(id=uuid4(), slug=slug, title=title)


@dataclass(frozen=True, slots=True)
class Lesson:
    id: UUID
    course_id: UUID
    position: int
    title: str

    @staticmethod
    def new(*, course_id: UUID, position: int, title: str) -> Lesson:
        return Lesson(id=uuid4(), course_id=course_id, position=position, title=title)
