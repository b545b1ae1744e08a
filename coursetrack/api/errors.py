"""Translate domain errors into HTTP responses.

The enrollment core raises structured errors and never knows about HTTP;
this is the one place that decides which status code each kind maps to.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from coursetrack.core.metrics import DOMAIN_ERRORS
from coursetrack.services.errors import (
    EnrollmentError,
    EnrollmentNotActiveError,
    EnrollmentNotCompletedError,
    LessonNotInCourseError,
    NotFoundError,
    StorageUnavailableError,
)

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: dict[type[EnrollmentError], int] = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    EnrollmentNotActiveError: status.HTTP_409_CONFLICT,
    EnrollmentNotCompletedError: status.HTTP_409_CONFLICT,
    LessonNotInCourseError: status.HTTP_422_UNPROCESSABLE_ENTITY,
}


def status_for(exc: EnrollmentError) -> int:
    for cls in type(exc).__mro__:
        code = _STATUS_BY_ERROR.get(cls)  # type: ignore[arg-type]
        if code is not None:
            return code
    return status.HTTP_400_BAD_REQUEST


async def enrollment_error_handler(request: Request, exc: EnrollmentError) -> JSONResponse:
    DOMAIN_ERRORS.labels(code=exc.code).inc()
    logger.info("Domain error %s on %s %s: %s", exc.code, request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status_for(exc),
        content={"detail": exc.message, "code": exc.code},
    )


async def storage_unavailable_handler(
    request: Request, exc: StorageUnavailableError
) -> JSONResponse:
    logger.error("Storage unavailable on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "storage temporarily unavailable", "code": StorageUnavailableError.code},
        headers={"Retry-After": "1"},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(EnrollmentError, enrollment_error_handler)
    app.add_exception_handler(StorageUnavailableError, storage_unavailable_handler)
