"""
HTTP mapping for business errors.

Services raise tasklane.errors exceptions; this is the only place that
knows which status code each one becomes.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from tasklane.errors import (
    ConflictError,
    ExpiredError,
    ForbiddenError,
    NotFoundError,
    TasklaneError,
    UnauthorizedError,
    ValidationError,
)

logger = logging.getLogger(__name__)

STATUS_BY_ERROR = {
    UnauthorizedError: status.HTTP_401_UNAUTHORIZED,
    ForbiddenError: status.HTTP_403_FORBIDDEN,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
    ExpiredError: status.HTTP_410_GONE,
    ValidationError: status.HTTP_400_BAD_REQUEST,
}


def status_for(exc: TasklaneError) -> int:
    for error_class, status_code in STATUS_BY_ERROR.items():
        if isinstance(exc, error_class):
            return status_code
    return status.HTTP_400_BAD_REQUEST


async def tasklane_error_handler(request: Request, exc: TasklaneError) -> JSONResponse:
    status_code = status_for(exc)
    logger.info(f"{request.method} {request.url.path} -> {status_code} {exc.code}: {exc.message}")

    headers = {"WWW-Authenticate": "Bearer"} if status_code == status.HTTP_401_UNAUTHORIZED else None
    return JSONResponse(
        status_code=status_code,
        content={"detail": exc.message, "code": exc.code},
        headers=headers,
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(TasklaneError, tasklane_error_handler)
