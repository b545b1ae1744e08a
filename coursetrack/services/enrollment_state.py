"""Enrollment lifecycle rules.

An enrollment is `active` until it becomes `completed`, which is terminal.
A lesson has no record until it is started; its record then moves from
in_progress to done and never goes back.

These functions only compute the next state from the current one; the
enrollment service loads the inputs and persists whatever they return.
A function that returns its `current` argument unchanged is signalling an
idempotent no-op, and the caller skips the write.
"""

from __future__ import annotations

from dataclasses import replace
from uuid import UUID

from coursetrack.models.enrollment import Enrollment, LessonProgress
from coursetrack.services.errors import EnrollmentNotActiveError


def ensure_active(enrollment: Enrollment) -> None:
    if not enrollment.is_active:
        raise EnrollmentNotActiveError(enrollment.id)


def start_lesson(
    enrollment: Enrollment,
    current: LessonProgress | None,
    *,
    lesson_id: UUID,
    now: int,
) -> LessonProgress:
    # Re-starting a done lesson changes nothing, even once the enrollment
    # is completed.  An unfinished lesson may only be touched while active.
    if current is not None and current.is_done:
        return current
    ensure_active(enrollment)
    if current is not None:
        return current
    return LessonProgress(
        enrollment_id=enrollment.id,
        lesson_id=lesson_id,
        state="in_progress",
        started_at=now,
    )


def complete_lesson(
    enrollment: Enrollment,
    current: LessonProgress | None,
    *,
    lesson_id: UUID,
    now: int,
) -> LessonProgress:
    if current is not None and current.is_done:
        return current
    ensure_active(enrollment)
    started_at = now
    if current is not None and current.started_at is not None:
        started_at = current.started_at
    return LessonProgress(
        enrollment_id=enrollment.id,
        lesson_id=lesson_id,
        state="done",
        started_at=started_at,
        completed_at=now,
    )


def complete_enrollment(enrollment: Enrollment, *, now: int) -> Enrollment:
    """Target state for both organic and forced completion."""
    if enrollment.is_completed:
        return enrollment
    return replace(enrollment, status="completed", completed_at=now)
