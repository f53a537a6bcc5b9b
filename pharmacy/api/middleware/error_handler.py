"""Error handling middleware and exception handlers."""

import logging

import httpx
from fastapi import Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError

logger = logging.getLogger(__name__)


class ErrorResponse:
    """Standardized error response format."""

    @staticmethod
    def create(
        error_type: str,
        message: str,
        details: str | dict | list | None = None,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
    ) -> JSONResponse:
        """Create error response.

        Args:
            error_type: Error type identifier
            message: Human-readable error message
            details: Additional error details
            status_code: HTTP status code

        Returns:
            JSONResponse with error information
        """
        content = {
            "error": {
                "type": error_type,
                "message": message,
            }
        }

        if details:
            content["error"]["details"] = details

        return JSONResponse(
            status_code=status_code,
            content=content,
        )


async def validation_exception_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """Handle Pydantic validation errors raised outside request parsing.

    Args:
        request: FastAPI request
        exc: Validation error

    Returns:
        JSON error response
    """
    logger.warning(f"Validation error: {exc}")

    return ErrorResponse.create(
        error_type="validation_error",
        message="Request validation failed",
        details=exc.errors(include_url=False, include_context=False),
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
    )


async def integrity_exception_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    """Handle unique and foreign key violations.

    Args:
        request: FastAPI request
        exc: Database integrity error

    Returns:
        JSON error response
    """
    logger.warning(f"Integrity error on {request.url.path}: {exc.orig}")

    return ErrorResponse.create(
        error_type="conflict",
        message="The record conflicts with existing data",
        status_code=status.HTTP_409_CONFLICT,
    )


async def value_exception_handler(request: Request, exc: ValueError) -> JSONResponse:
    """Handle business rule violations reported by services.

    Args:
        request: FastAPI request
        exc: Value error

    Returns:
        JSON error response
    """
    logger.info(f"Rejected request on {request.url.path}: {exc}")

    return ErrorResponse.create(
        error_type="bad_request",
        message=str(exc),
        status_code=status.HTTP_400_BAD_REQUEST,
    )


async def permission_exception_handler(request: Request, exc: PermissionError) -> JSONResponse:
    """Handle permission errors.

    Args:
        request: FastAPI request
        exc: Permission error

    Returns:
        JSON error response
    """
    logger.warning(f"Permission denied: {exc}")

    return ErrorResponse.create(
        error_type="permission_denied",
        message=str(exc),
        status_code=status.HTTP_403_FORBIDDEN,
    )


async def upstream_exception_handler(request: Request, exc: httpx.HTTPError) -> JSONResponse:
    """Handle failures fetching a third-party website."""
    logger.warning(f"Upstream request failed: {exc}")

    return ErrorResponse.create(
        error_type="upstream_error",
        message="Failed to fetch the requested website",
        details=str(exc) or None,
        status_code=status.HTTP_502_BAD_GATEWAY,
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions.

    Args:
        request: FastAPI request
        exc: Any exception

    Returns:
        JSON error response
    """
    logger.error(f"Unexpected error: {exc}", exc_info=True)

    return ErrorResponse.create(
        error_type="internal_error",
        message="An unexpected error occurred. Please try again later.",
        details=str(exc) if logger.isEnabledFor(logging.DEBUG) else None,
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
