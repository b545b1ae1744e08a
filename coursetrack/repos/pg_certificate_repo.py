"""PostgreSQL implementation of CertificateRepo."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from coursetrack.db.tables import CertificateRow
from coursetrack.models.certificate import Certificate


class PgCertificateRepo:
    """Satisfies the CertificateRepo Protocol using PostgreSQL."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_enrollment(self, enrollment_id: UUID) -> Certificate | None:
        stmt = select(CertificateRow).where(CertificateRow.enrollment_id == enrollment_id)
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_certificate(row)

    async def add_or_get(self, certificate: Certificate) -> tuple[Certificate, bool]:
        stmt = (
            pg_insert(CertificateRow)
            .values(
                id=certificate.id,
                enrollment_id=certificate.enrollment_id,
                student_id=certificate.student_id,
                course_id=certificate.course_id,
                issued_at=certificate.issued_at,
            )
            .on_conflict_do_nothing(index_elements=[CertificateRow.enrollment_id])
            .returning(CertificateRow.id)
        )
        inserted = (await self._session.execute(stmt)).scalar_one_or_none()
        if inserted is not None:
            return certificate, True

        existing = await self.get_by_enrollment(certificate.enrollment_id)
        if existing is None:
            raise RuntimeError(
                f"certificate for enrollment {certificate.enrollment_id} vanished after conflict"
            )
        return existing, False

    async def list_by_student(self, student_id: UUID) -> list[Certificate]:
        stmt = (
            select(CertificateRow)
            .where(CertificateRow.student_id == student_id)
            .order_by(CertificateRow.issued_at)
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_certificate(r) for r in rows]


def _row_to_certificate(row: CertificateRow) -> Certificate:
    return Certificate(
        id=row.id,
        enrollment_id=row.enrollment_id,
        student_id=row.student_id,
        course_id=row.course_id,
        issued_at=row.issued_at,
    )
