"""
Exception handlers - map domain errors to `{"error": message}` responses.
"""

import logging
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..core.exceptions import (
    CoachError, ValidationError, NotFoundError, SessionBusyError, UnknownScenarioError
)

logger = logging.getLogger(__name__)


def status_for(error: CoachError) -> int:
    """HTTP status for a domain error."""
    if isinstance(error, (ValidationError, UnknownScenarioError)):
        return status.HTTP_400_BAD_REQUEST
    if isinstance(error, NotFoundError):
        return status.HTTP_404_NOT_FOUND
    if isinstance(error, SessionBusyError):
        return status.HTTP_409_CONFLICT
    # StorageError, UploadError, AnalysisError
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def coach_error_handler(request: Request, exc: CoachError) -> JSONResponse:
    status_code = status_for(exc)
    log_level = logging.ERROR if status_code >= 500 else logging.INFO
    logger.log(
        log_level,
        f"{request.method} {request.url.path} failed: {exc.message}",
        extra={"extra_fields": {"error_code": exc.code, "status_code": status_code}}
    )
    return JSONResponse(status_code=status_code, content={"error": exc.message})


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = "; ".join(
        f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg', 'invalid')}"
        for error in exc.errors()
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": f"Invalid request: {details}"}
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install all error handlers on the application."""
    app.add_exception_handler(CoachError, coach_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
