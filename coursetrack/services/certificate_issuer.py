from __future__ import annotations

import logging

from coursetrack.models.certificate import Certificate
from coursetrack.models.enrollment import Enrollment
from coursetrack.repos.unit_of_work import UnitOfWork
from coursetrack.services.clock import Clock
from coursetrack.services.errors import EnrollmentNotCompletedError

logger = logging.getLogger(__name__)


class CertificateIssuer:
    """Issues the single certificate a completed enrollment is entitled to."""

    def __init__(self, clock: Clock) -> None:
        self._clock = clock

    async def issue_if_absent(
        self, uow: UnitOfWork, enrollment: Enrollment
    ) -> tuple[Certificate, bool]:
        """Return (certificate, newly_issued).

        An existing certificate is returned as-is; issued_at is only ever
        set by the first successful insert.
        """
        if not enrollment.is_completed:
            logger.warning(
                "Certificate refused: enrollment=%s status=%s",
                enrollment.id,
                enrollment.status,
            )
            raise EnrollmentNotCompletedError(enrollment.id)

        existing = await uow.certificates.get_by_enrollment(enrollment.id)
        if existing is not None:
            return existing, False

        certificate, created = await uow.certificates.add_or_get(
            Certificate.new(
                enrollment_id=enrollment.id,
                student_id=enrollment.student_id,
                course_id=enrollment.course_id,
                issued_at=self._clock.now(),
            )
        )
        if created:
            logger.info(
                "Certificate issued id=%s enrollment=%s",
                certificate.id,
                enrollment.id,
                extra={"enrollment_id": str(enrollment.id)},
            )
        return certificate, created
