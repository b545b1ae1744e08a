from __future__ import annotations

from typing import Protocol
from uuid import UUID

from coursetrack.models.enrollment import LessonProgress


class LessonProgressRepo(Protocol):
    async def get(self, enrollment_id: UUID, lesson_id: UUID) -> LessonProgress | None: ...

    async def save(self, progress: LessonProgress) -> None:
        """Insert or overwrite the record for (enrollment_id, lesson_id)."""
        ...

    async def count_done(self, enrollment_id: UUID) -> int: ...
    async def list_by_enrollment(self, enrollment_id: UUID) -> list[LessonProgress]: ...


class InMemoryLessonProgressRepo:
    def __init__(self) -> None:
        self._store: dict[tuple[UUID, UUID], LessonProgress] = {}

    async def get(self, enrollment_id: UUID, lesson_id: UUID) -> LessonProgress | None:
        return self._store.get((enrollment_id, lesson_id))

    async def save(self, progress: LessonProgress) -> None:
        self._store[(progress.enrollment_id, progress.lesson_id)] = progress

    async def count_done(self, enrollment_id: UUID) -> int:
        return sum(
            1
            for p in self._store.values()
            if p.enrollment_id == enrollment_id and p.is_done
        )

    async def list_by_enrollment(self, enrollment_id: UUID) -> list[LessonProgress]:
        return [p for p in self._store.values() if p.enrollment_id == enrollment_id]

    def snapshot(self) -> dict:
        return dict(self._store)

    def restore(self, snap: dict) -> None:
        self._store = snap
