from __future__ import annotations

import asyncio
from dataclasses import replace
from uuid import uuid4

import pytest

from coursetrack.models.certificate import Certificate
from coursetrack.models.enrollment import Enrollment
from coursetrack.repos.certificate_repo import InMemoryCertificateRepo
from coursetrack.repos.unit_of_work import InMemoryStore, InMemoryUnitOfWork
from coursetrack.services.certificate_issuer import CertificateIssuer
from coursetrack.services.clock import ManualClock
from coursetrack.services.errors import EnrollmentNotCompletedError


def _completed() -> Enrollment:
    e = Enrollment.new(student_id=uuid4(), course_id=uuid4(), created_at=10)
    return replace(e, status="completed", completed_at=20)


async def _issue(store: InMemoryStore, issuer: CertificateIssuer, enrollment: Enrollment):
    async with InMemoryUnitOfWork(store) as uow:
        return await issuer.issue_if_absent(uow, enrollment)


def test_issues_certificate_for_completed_enrollment() -> None:
    store, clock = InMemoryStore(), ManualClock(start=1000)
    enrollment = _completed()

    cert, issued = asyncio.run(_issue(store, CertificateIssuer(clock), enrollment))

    assert issued is True
    assert cert.enrollment_id == enrollment.id
    assert cert.student_id == enrollment.student_id
    assert cert.course_id == enrollment.course_id
    assert cert.issued_at == 1000


def test_second_issue_returns_original_certificate() -> None:
    store, clock = InMemoryStore(), ManualClock(start=1000)
    issuer = CertificateIssuer(clock)
    enrollment = _completed()

    first, _ = asyncio.run(_issue(store, issuer, enrollment))
    clock.advance(60)
    second, issued = asyncio.run(_issue(store, issuer, enrollment))

    assert issued is False
    assert second == first
    assert second.issued_at == 1000


def test_refuses_active_enrollment() -> None:
    store = InMemoryStore()
    active = Enrollment.new(student_id=uuid4(), course_id=uuid4(), created_at=10)

    with pytest.raises(EnrollmentNotCompletedError):
        asyncio.run(_issue(store, CertificateIssuer(ManualClock()), active))

    assert asyncio.run(store.certificates.get_by_enrollment(active.id)) is None


class _LateCertificateRepo(InMemoryCertificateRepo):
    """Misses on lookup, as if a concurrent writer inserted between the
    read and the insert."""

    async def get_by_enrollment(self, enrollment_id):
        return None


def test_losing_writer_gets_the_stored_certificate() -> None:
    store = InMemoryStore()
    store.certificates = _LateCertificateRepo()
    enrollment = _completed()
    winner = Certificate.new(
        enrollment_id=enrollment.id,
        student_id=enrollment.student_id,
        course_id=enrollment.course_id,
        issued_at=5,
    )
    asyncio.run(store.certificates.add_or_get(winner))

    cert, issued = asyncio.run(_issue(store, CertificateIssuer(ManualClock()), enrollment))

    assert issued is False
    assert cert == winner
