from __future__ import annotations

from typing import Protocol
from uuid import UUID

from coursetrack.models.certificate import Certificate


class CertificateRepo(Protocol):
    async def get_by_enrollment(self, enrollment_id: UUID) -> Certificate | None: ...

    async def add_or_get(self, certificate: Certificate) -> tuple[Certificate, bool]:
        """Insert unless the enrollment already has a certificate.

        The existing certificate wins; the new one is discarded.
        """
        ...

    async def list_by_student(self, student_id: UUID) -> list[Certificate]: ...


class InMemoryCertificateRepo:
    def __init__(self) -> None:
        self._by_enrollment: dict[UUID, Certificate] = {}

    async def get_by_enrollment(self, enrollment_id: UUID) -> Certificate | None:
        return self._by_enrollment.get(enrollment_id)

    async def add_or_get(self, certificate: Certificate) -> tuple[Certificate, bool]:
        existing = self._by_enrollment.get(certificate.enrollment_id)
        if existing is not None:
            return existing, False
        self._by_enrollment[certificate.enrollment_id] = certificate
        return certificate, True

    async def list_by_student(self, student_id: UUID) -> list[Certificate]:
        return [c for c in self._by_enrollment.values() if c.student_id == student_id]

    def snapshot(self) -> dict:
        return dict(self._by_enrollment)

    def restore(self, snap: dict) -> None:
        self._by_enrollment = snap
