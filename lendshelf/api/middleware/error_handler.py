"""
Error Handling for LendShelf

Centralized error handling:
- Structured error responses
- Logging of errors
- Exception translation (the only place domain errors become HTTP)
"""

import traceback
from datetime import datetime, timezone

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from pydantic import ValidationError

from ...errors import AppError, UnauthenticatedError
from .logging import get_request_id


def create_error_response(
    error: str,
    code: str,
    status_code: int,
    detail: str = None,
    headers: dict = None,
) -> JSONResponse:
    """Create standardized error response."""
    return JSONResponse(
        status_code=status_code,
        content={
            "error": error,
            "code": code,
            "detail": detail,
            "request_id": get_request_id() or None,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
        headers=headers,
    )


def setup_exception_handlers(app):
    """Register exception handlers with FastAPI app."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.opt(exception=exc).error(
                f"{exc.code} - {exc.message} on {request.method} {request.url.path}"
            )
        else:
            logger.warning(f"{exc.code} - {exc.message} on {request.method} {request.url.path}")

        headers = None
        if isinstance(exc, UnauthenticatedError):
            headers = {"WWW-Authenticate": "Bearer"}

        return create_error_response(
            error=exc.message,
            code=exc.code,
            status_code=exc.status_code,
            detail=exc.detail,
            headers=headers,
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        detail = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        )
        logger.warning(f"Invalid request on {request.method} {request.url.path}: {detail}")
        return create_error_response(
            error="Validation Error",
            code="VALIDATION_ERROR",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=detail,
        )

    @app.exception_handler(ValidationError)
    async def validation_exception_handler(request: Request, exc: ValidationError):
        logger.warning(f"Validation error: {str(exc)}")
        return create_error_response(
            error="Validation Error",
            code="VALIDATION_ERROR",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error(
            f"Unhandled exception: {type(exc).__name__}: {str(exc)}\n{traceback.format_exc()}"
        )
        return create_error_response(
            error="Internal Server Error",
            code="INTERNAL_ERROR",
            status_code=500,
            detail="An unexpected error occurred",
        )
