from __future__ import annotations

import logging
from typing import Annotated
from uuid import UUID

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from coursetrack.db.engine import async_session_factory
from coursetrack.models.course import Course, Lesson
from coursetrack.models.enrollment import Enrollment
from coursetrack.models.principal import Principal
from coursetrack.repos.course_catalog import InMemoryCourseCatalog
from coursetrack.repos.pg_unit_of_work import SqlUnitOfWork
from coursetrack.repos.unit_of_work import InMemoryStore, InMemoryUnitOfWork
from coursetrack.services import token_service
from coursetrack.services.enrollment_service import EnrollmentService
from coursetrack.services.errors import NotFoundError

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/oauth/token")


# ---------------------------------------------------------------------------
# Enrollment service wiring
# ---------------------------------------------------------------------------


def seed_sample_course(catalog: InMemoryCourseCatalog) -> Course:
    """Seed a three-lesson course so the in-memory mode is usable in dev."""
    course = Course(
        id=UUID("00000000-0000-0000-0000-000000000001"),
        slug="intro-to-python",
        title="Introduction to Python",
    )
    lessons = [
        Lesson(
            id=UUID(f"00000000-0000-0000-0001-{position:012d}"),
            course_id=course.id,
            position=position,
            title=title,
        )
        for position, title in enumerate(
            ["Variables and types", "Control flow", "Functions"], start=1
        )
    ]
    catalog.add_course(course, lessons)
    return course


if async_session_factory is not None:
    _session_factory = async_session_factory
    enrollment_service = EnrollmentService(
        uow_factory=lambda: SqlUnitOfWork(_session_factory),
    )
else:
    memory_store = InMemoryStore()
    seed_sample_course(memory_store.courses)
    enrollment_service = EnrollmentService(
        uow_factory=lambda: InMemoryUnitOfWork(memory_store),
    )


def get_enrollment_service() -> EnrollmentService:
    return enrollment_service


EnrollmentServiceDep = Annotated[EnrollmentService, Depends(get_enrollment_service)]


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------


def require_user(
    raw_token: Annotated[str, Depends(oauth2_scheme)],
) -> Principal:
    """Validate the bearer token and return the calling Principal."""
    try:
        claims = token_service.decode_access_token(raw_token)
    except jwt.ExpiredSignatureError:
        logger.warning("Expired token rejected")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token expired",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None
    except jwt.InvalidTokenError as e:
        logger.warning("Invalid token rejected: %s", e)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None

    principal = Principal(
        user_id=claims["sub"],
        roles=frozenset(claims.get("roles", [])),
    )
    logger.debug("Token validated for user=%s roles=%s", principal.user_id, principal.roles)
    return principal


def require_external_user(
    principal: Annotated[Principal, Depends(require_user)],
) -> UUID:
    """The caller's identity-service account id, as a UUID."""
    external_user_id = principal.external_user_id()
    if external_user_id is None:
        logger.warning("Token subject is not an account id: sub=%s", principal.user_id)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token subject is not a user account",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return external_user_id


def require_role(role: str):
    """Dependency factory: demand a specific role.

    Usage: Depends(require_role("admin"))
    """

    def _guard(
        principal: Annotated[Principal, Depends(require_user)],
    ) -> Principal:
        if not principal.has_role(role):
            logger.warning(
                "Access denied: user=%s missing role=%s",
                principal.user_id,
                role,
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return principal

    return _guard


# ---------------------------------------------------------------------------
# Ownership
# ---------------------------------------------------------------------------


async def require_enrollment_access(
    enrollment_id: UUID,
    principal: Annotated[Principal, Depends(require_user)],
    service: EnrollmentServiceDep,
) -> Enrollment:
    """Load an enrollment the caller is allowed to act on.

    Admins may act on any enrollment. Anyone else must own it; someone
    else's enrollment answers 404 exactly like a missing one, so the
    response does not reveal which enrollment ids exist.
    """
    enrollment = await service.get_enrollment(enrollment_id)
    if principal.has_role("admin"):
        return enrollment

    external_user_id = principal.external_user_id()
    caller_student_id: UUID | None = None
    if external_user_id is not None:
        try:
            caller = await service.get_student_by_external_user(external_user_id)
            caller_student_id = caller.id
        except NotFoundError:
            caller_student_id = None

    if caller_student_id != enrollment.student_id:
        logger.warning(
            "Access denied: user=%s does not own enrollment=%s",
            principal.user_id,
            enrollment_id,
            extra={"enrollment_id": str(enrollment_id)},
        )
        raise NotFoundError("enrollment", enrollment_id)
    return enrollment
