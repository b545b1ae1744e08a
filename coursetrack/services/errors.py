"""Domain error taxonomy for the enrollment core.

Every business-rule violation is an EnrollmentError carrying a stable
`code` and the offending ids, so the HTTP layer can map it to a status
without parsing messages.  Infrastructure failures are a separate branch
(StorageUnavailableError) and are the only retryable kind.
"""

from __future__ import annotations

from uuid import UUID


class EnrollmentError(Exception):
    """Base class for business-rule violations. Never retryable."""

    code = "enrollment_error"
    retryable = False

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class NotFoundError(EnrollmentError):
    code = "not_found"

    def __init__(self, kind: str, entity_id: UUID) -> None:
        self.kind = kind  # student|enrollment|course|lesson
        self.entity_id = entity_id
        super().__init__(f"{kind} {entity_id} not found")


class EnrollmentNotActiveError(EnrollmentError):
    code = "enrollment_not_active"

    def __init__(self, enrollment_id: UUID) -> None:
        self.enrollment_id = enrollment_id
        super().__init__(f"enrollment {enrollment_id} is not active")


class EnrollmentNotCompletedError(EnrollmentError):
    code = "enrollment_not_completed"

    def __init__(self, enrollment_id: UUID) -> None:
        self.enrollment_id = enrollment_id
        super().__init__(f"enrollment {enrollment_id} is not completed")


class LessonNotInCourseError(EnrollmentError):
    code = "lesson_not_in_course"

    def __init__(self, lesson_id: UUID, course_id: UUID) -> None:
        self.lesson_id = lesson_id
        self.course_id = course_id
        super().__init__(f"lesson {lesson_id} does not belong to course {course_id}")


class StorageUnavailableError(Exception):
    """The storage collaborator could not be reached. Safe to retry."""

    code = "storage_unavailable"
    retryable = True
