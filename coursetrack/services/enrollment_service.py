"""Enrollment service: the public face of the enrollment core.

Composes the student directory, the lifecycle rules in enrollment_state,
the progress calculator and the certificate issuer.  Every public method
opens exactly one unit of work, so a mutation either lands completely
(progress record + enrollment status + certificate) or not at all.

Course reference checks read `uow.courses`, inside the same unit of work
as the writes they guard.

Completion has two entry points (the last lesson finishing, and an
administrative force_complete) that both go through `_complete`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from uuid import UUID

from coursetrack.core.metrics import (
    CERTIFICATES_ISSUED,
    ENROLLMENTS_COMPLETED,
    ENROLLMENTS_CREATED,
    LESSONS_COMPLETED,
)
from coursetrack.models.certificate import Certificate
from coursetrack.models.enrollment import Enrollment, LessonProgress
from coursetrack.models.student import Student
from coursetrack.repos.unit_of_work import UnitOfWork, UnitOfWorkFactory
from coursetrack.services import enrollment_state, progress_calculator
from coursetrack.services.certificate_issuer import CertificateIssuer
from coursetrack.services.clock import Clock, SystemClock
from coursetrack.services.errors import LessonNotInCourseError, NotFoundError
from coursetrack.services.student_directory import StudentDirectory

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class _Completion:
    enrollment: Enrollment
    certificate: Certificate
    transitioned: bool  # False when another writer had already completed it
    issued: bool


class EnrollmentService:
    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        clock: Clock | None = None,
    ) -> None:
        self._uow_factory = uow_factory
        self._clock = clock or SystemClock()
        self._students = StudentDirectory(self._clock)
        self._issuer = CertificateIssuer(self._clock)

    # ------------------------------------------------------------------
    # Students
    # ------------------------------------------------------------------

    async def create_student(self, external_user_id: UUID) -> Student:
        async with self._uow_factory() as uow:
            return await self._students.get_or_create(uow, external_user_id)

    async def get_student_by_external_user(self, external_user_id: UUID) -> Student:
        async with self._uow_factory() as uow:
            return await self._students.get_by_external_user(uow, external_user_id)

    # ------------------------------------------------------------------
    # Enrollment
    # ------------------------------------------------------------------

    async def enroll(self, student_id: UUID, course_id: UUID) -> Enrollment:
        async with self._uow_factory() as uow:
            student = await self._students.get(uow, student_id)
            enrollment, created = await self._enroll(uow, student, course_id)
        self._record_enrollment(enrollment, created)
        return enrollment

    async def enroll_by_external_user(
        self, external_user_id: UUID, course_id: UUID
    ) -> Enrollment:
        async with self._uow_factory() as uow:
            student = await self._students.get_or_create(uow, external_user_id)
            enrollment, created = await self._enroll(uow, student, course_id)
        self._record_enrollment(enrollment, created)
        return enrollment

    async def get_enrollment(self, enrollment_id: UUID) -> Enrollment:
        async with self._uow_factory() as uow:
            return await self._load(uow, enrollment_id)

    async def enrollments_for_student(self, student_id: UUID) -> list[Enrollment]:
        async with self._uow_factory() as uow:
            await self._students.get(uow, student_id)
            return await uow.enrollments.list_by_student(student_id)

    async def completed_enrollments_for_student(
        self, student_id: UUID
    ) -> list[Enrollment]:
        async with self._uow_factory() as uow:
            await self._students.get(uow, student_id)
            return await uow.enrollments.list_by_student(student_id, status="completed")

    # ------------------------------------------------------------------
    # Lesson progress
    # ------------------------------------------------------------------

    async def start_lesson(self, enrollment_id: UUID, lesson_id: UUID) -> LessonProgress:
        async with self._uow_factory() as uow:
            enrollment = await self._load(uow, enrollment_id, for_update=True)
            await self._check_lesson(uow, enrollment, lesson_id)

            current = await uow.progress.get(enrollment.id, lesson_id)
            progress = enrollment_state.start_lesson(
                enrollment, current, lesson_id=lesson_id, now=self._clock.now()
            )
            if progress is current:
                return progress
            await uow.progress.save(progress)

        logger.info(
            "Lesson started enrollment=%s lesson=%s",
            enrollment_id,
            lesson_id,
            extra={"enrollment_id": str(enrollment_id), "lesson_id": str(lesson_id)},
        )
        return progress

    async def complete_lesson(
        self, enrollment_id: UUID, lesson_id: UUID
    ) -> LessonProgress:
        completion: _Completion | None = None
        async with self._uow_factory() as uow:
            enrollment = await self._load(uow, enrollment_id, for_update=True)
            await self._check_lesson(uow, enrollment, lesson_id)

            current = await uow.progress.get(enrollment.id, lesson_id)
            now = self._clock.now()
            progress = enrollment_state.complete_lesson(
                enrollment, current, lesson_id=lesson_id, now=now
            )
            if progress is current:
                return progress
            await uow.progress.save(progress)

            total = await uow.courses.lesson_count(enrollment.course_id)
            done = await uow.progress.count_done(enrollment.id)
            if progress_calculator.is_complete(total, done):
                completion = await self._complete(uow, enrollment, now=now)

        LESSONS_COMPLETED.inc()
        logger.info(
            "Lesson completed enrollment=%s lesson=%s",
            enrollment_id,
            lesson_id,
            extra={"enrollment_id": str(enrollment_id), "lesson_id": str(lesson_id)},
        )
        if completion is not None:
            self._record_completion(completion, path="organic")
        return progress

    async def overall_progress(self, enrollment_id: UUID) -> int:
        async with self._uow_factory() as uow:
            enrollment = await self._load(uow, enrollment_id)
            done = await uow.progress.count_done(enrollment.id)
            total = await uow.courses.lesson_count(enrollment.course_id)
        return progress_calculator.percentage(total, done)

    async def lesson_progress(self, enrollment_id: UUID) -> list[LessonProgress]:
        async with self._uow_factory() as uow:
            enrollment = await self._load(uow, enrollment_id)
            return await uow.progress.list_by_enrollment(enrollment.id)

    # ------------------------------------------------------------------
    # Completion and certificates
    # ------------------------------------------------------------------

    async def force_complete(self, enrollment_id: UUID) -> Enrollment:
        async with self._uow_factory() as uow:
            enrollment = await self._load(uow, enrollment_id, for_update=True)
            if enrollment.is_completed:
                return enrollment
            completion = await self._complete(uow, enrollment, now=self._clock.now())

        self._record_completion(completion, path="forced")
        return completion.enrollment

    async def certificates_for_student(self, student_id: UUID) -> list[Certificate]:
        async with self._uow_factory() as uow:
            await self._students.get(uow, student_id)
            return await uow.certificates.list_by_student(student_id)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _load(
        self, uow: UnitOfWork, enrollment_id: UUID, *, for_update: bool = False
    ) -> Enrollment:
        if for_update:
            enrollment = await uow.enrollments.get_for_update(enrollment_id)
        else:
            enrollment = await uow.enrollments.get(enrollment_id)
        if enrollment is None:
            raise NotFoundError("enrollment", enrollment_id)
        return enrollment

    async def _check_lesson(
        self, uow: UnitOfWork, enrollment: Enrollment, lesson_id: UUID
    ) -> None:
        if not await uow.courses.lesson_belongs_to_course(lesson_id, enrollment.course_id):
            logger.warning(
                "Lesson rejected: lesson=%s not in course=%s (enrollment=%s)",
                lesson_id,
                enrollment.course_id,
                enrollment.id,
            )
            raise LessonNotInCourseError(lesson_id, enrollment.course_id)

    async def _enroll(
        self, uow: UnitOfWork, student: Student, course_id: UUID
    ) -> tuple[Enrollment, bool]:
        if not await uow.courses.course_exists(course_id):
            raise NotFoundError("course", course_id)

        # Re-enrolling returns whatever enrollment exists, completed or not.
        existing = await uow.enrollments.get_by_student_and_course(student.id, course_id)
        if existing is not None:
            return existing, False

        return await uow.enrollments.add_or_get(
            Enrollment.new(
                student_id=student.id,
                course_id=course_id,
                created_at=self._clock.now(),
            )
        )

    async def _complete(
        self, uow: UnitOfWork, enrollment: Enrollment, *, now: int
    ) -> _Completion:
        target = enrollment_state.complete_enrollment(enrollment, now=now)
        updated = await uow.enrollments.mark_completed(enrollment.id, target.completed_at or now)
        transitioned = updated is not None
        if updated is None:
            # Already completed by a concurrent caller; adopt their state.
            updated = await self._load(uow, enrollment.id)

        certificate, issued = await self._issuer.issue_if_absent(uow, updated)
        return _Completion(
            enrollment=updated,
            certificate=certificate,
            transitioned=transitioned,
            issued=issued,
        )

    def _record_enrollment(self, enrollment: Enrollment, created: bool) -> None:
        ENROLLMENTS_CREATED.labels(outcome="created" if created else "existing").inc()
        if created:
            logger.info(
                "Enrolled student=%s course=%s enrollment=%s",
                enrollment.student_id,
                enrollment.course_id,
                enrollment.id,
                extra={
                    "enrollment_id": str(enrollment.id),
                    "student_id": str(enrollment.student_id),
                    "course_id": str(enrollment.course_id),
                },
            )

    def _record_completion(self, completion: _Completion, *, path: str) -> None:
        if completion.transitioned:
            ENROLLMENTS_COMPLETED.labels(path=path).inc()
            logger.info(
                "Enrollment completed (%s) enrollment=%s",
                path,
                completion.enrollment.id,
                extra={"enrollment_id": str(completion.enrollment.id)},
            )
        if completion.issued:
            CERTIFICATES_ISSUED.inc()
