from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID, uuid4


@dataclass(frozen=True, slots=True)
class Student:
    """A learner, linked 1:1 to an account in the identity service."""

    id: UUID
    external_user_id: UUID  # unique, never changes after creation
    created_at: int

    @staticmethod
    def new(*, external_user_id: UUID, created_at: int) -> Student:
        return Student(id=uuid4(), external_user_id=external_user_id, created_at=created_at)
