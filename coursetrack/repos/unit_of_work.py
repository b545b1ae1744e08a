"""Unit of work: one transactional scope over all enrollment repositories
and the course catalog they are checked against.

Usage::

    async with uow_factory() as uow:
        enrollment = await uow.enrollments.get_for_update(enrollment_id)
        ...

Leaving the block normally commits; leaving it with an exception (or by
cancellation) rolls every write back.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from types import TracebackType
from typing import Protocol

from coursetrack.repos.certificate_repo import CertificateRepo, InMemoryCertificateRepo
from coursetrack.repos.course_catalog import CourseCatalog, InMemoryCourseCatalog
from coursetrack.repos.enrollment_repo import EnrollmentRepo, InMemoryEnrollmentRepo
from coursetrack.repos.lesson_progress_repo import (
    InMemoryLessonProgressRepo,
    LessonProgressRepo,
)
from coursetrack.repos.student_repo import InMemoryStudentRepo, StudentRepo


class UnitOfWork(Protocol):
    students: StudentRepo
    enrollments: EnrollmentRepo
    progress: LessonProgressRepo
    certificates: CertificateRepo
    courses: CourseCatalog

    async def __aenter__(self) -> UnitOfWork: ...

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None: ...


UnitOfWorkFactory = Callable[[], UnitOfWork]


class InMemoryStore:
    """Process-local storage shared by every InMemoryUnitOfWork.

    Units of work run one at a time (serializable), so uniqueness checks
    and the active to completed transition can never interleave.
    The course catalog is reference data: it is read inside units of
    work but never snapshotted or rolled back.
    """

    def __init__(self) -> None:
        self.students = InMemoryStudentRepo()
        self.enrollments = InMemoryEnrollmentRepo()
        self.progress = InMemoryLessonProgressRepo()
        self.certificates = InMemoryCertificateRepo()
        self.courses = InMemoryCourseCatalog()
        self._lock: asyncio.Lock | None = None
        self._lock_loop: asyncio.AbstractEventLoop | None = None

    def lock(self) -> asyncio.Lock:
        # asyncio.Lock binds to one loop; tests drive the store from several.
        loop = asyncio.get_running_loop()
        if self._lock is None or self._lock_loop is not loop:
            self._lock = asyncio.Lock()
            self._lock_loop = loop
        return self._lock

    def snapshot(self) -> tuple:
        return (
            self.students.snapshot(),
            self.enrollments.snapshot(),
            self.progress.snapshot(),
            self.certificates.snapshot(),
        )

    def restore(self, snap: tuple) -> None:
        students, enrollments, progress, certificates = snap
        self.students.restore(students)
        self.enrollments.restore(enrollments)
        self.progress.restore(progress)
        self.certificates.restore(certificates)


class InMemoryUnitOfWork:
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store
        self._held: asyncio.Lock | None = None
        self._snapshot: tuple | None = None
        self.students = store.students
        self.enrollments = store.enrollments
        self.progress = store.progress
        self.certificates = store.certificates
        self.courses = store.courses

    async def __aenter__(self) -> InMemoryUnitOfWork:
        held = self._store.lock()
        await held.acquire()
        self._held = held
        self._snapshot = self._store.snapshot()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        try:
            if exc is not None and self._snapshot is not None:
                self._store.restore(self._snapshot)
        finally:
            self._snapshot = None
            if self._held is not None:
                self._held.release()
                self._held = None
