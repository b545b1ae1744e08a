"""SQLAlchemy-backed unit of work.

One AsyncSession (one database transaction) per unit of work, committed
on clean exit and rolled back otherwise, the same contract as the
request-scoped session dependency.  Driver-level connection failures are
re-raised as StorageUnavailableError so callers can tell "retry later"
apart from business-rule violations.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from types import TracebackType

from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from coursetrack.repos.pg_certificate_repo import PgCertificateRepo
from coursetrack.repos.pg_course_catalog import PgCourseCatalog
from coursetrack.repos.pg_enrollment_repo import PgEnrollmentRepo
from coursetrack.repos.pg_lesson_progress_repo import PgLessonProgressRepo
from coursetrack.repos.pg_student_repo import PgStudentRepo
from coursetrack.services.errors import StorageUnavailableError

logger = logging.getLogger(__name__)

# PoolTimeoutError is raised when no connection frees up in time; it is not
# the builtin TimeoutError.
_UNAVAILABLE = (
    OperationalError,
    InterfaceError,
    PoolTimeoutError,
    ConnectionError,
    TimeoutError,
)


@asynccontextmanager
async def storage_errors() -> AsyncIterator[None]:
    """Translate connection-level failures into StorageUnavailableError."""
    try:
        yield
    except _UNAVAILABLE as e:
        logger.warning("Storage unavailable: %s", e)
        raise StorageUnavailableError(str(e)) from e


class SqlUnitOfWork:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory
        self._session: AsyncSession | None = None

    async def __aenter__(self) -> SqlUnitOfWork:
        session = self._session_factory()
        self._session = session
        self.students = PgStudentRepo(session)
        self.enrollments = PgEnrollmentRepo(session)
        self.progress = PgLessonProgressRepo(session)
        self.certificates = PgCertificateRepo(session)
        self.courses = PgCourseCatalog(session)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        session = self._session
        if session is None:
            return
        self._session = None
        try:
            async with storage_errors():
                if exc is None:
                    await session.commit()
                else:
                    await session.rollback()
        finally:
            await session.close()

        if isinstance(exc, _UNAVAILABLE):
            logger.warning("Storage unavailable: %s", exc)
            raise StorageUnavailableError(str(exc)) from exc
