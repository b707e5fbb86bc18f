"""
Secure Error Handling

Provides the error taxonomy shared by the services, the JSON error envelope
and utilities for handling errors securely without leaking sensitive
information.
"""

import logging
import os
import traceback
import uuid
from enum import Enum
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

ENVIRONMENT = os.getenv("ENVIRONMENT", "development")


class ErrorKind(str, Enum):
    MISSING_FIELD = "missing_field"
    VALIDATION = "validation"
    INVALID_ID = "invalid_id"
    NOT_FOUND = "not_found"
    NO_UPDATE_FIELDS = "no_update_fields"
    STORE = "store"
    ROUTE_NOT_FOUND = "route_not_found"
    UNHANDLED = "unhandled"


STATUS_CODES = {
    ErrorKind.MISSING_FIELD: status.HTTP_400_BAD_REQUEST,
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.INVALID_ID: status.HTTP_400_BAD_REQUEST,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.NO_UPDATE_FIELDS: status.HTTP_400_BAD_REQUEST,
    ErrorKind.STORE: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.ROUTE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.UNHANDLED: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class ApiError(Exception):
    """
    An anticipated failure with a client-facing message.

    Args:
        kind: Which entry of the error taxonomy this is
        message: Message returned to the client
        errors: Optional list of per-field messages
        detail: Internal detail, only exposed outside production
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        errors: Optional[list[str]] = None,
        detail: Optional[str] = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.errors = errors
        self.detail = detail

    @property
    def status_code(self) -> int:
        return STATUS_CODES[self.kind]


def expose_error_detail() -> bool:
    return ENVIRONMENT != "production"


def error_response(
    message: str,
    status_code: int,
    errors: Optional[list[str]] = None,
    detail: Optional[str] = None,
) -> JSONResponse:
    """Consistent error payloads across the API."""
    content = {"success": False, "message": message}
    if errors is not None:
        content["errors"] = errors
    if detail is not None and expose_error_detail():
        content["error"] = detail
    return JSONResponse(status_code=status_code, content=content)


def log_and_sanitize_error(
    error: Exception,
    context: str,
    user_message: Optional[str] = None
) -> tuple[str, str]:
    """
    Log full error details server-side and return sanitized message for client.

    Args:
        error: The exception that occurred
        context: Description of what operation failed (e.g., "GET /api/posts")
        user_message: Optional custom message to show user. If None, uses generic message.

    Returns:
        Tuple of (sanitized_message, error_id) for client response
    """
    # Generate unique error ID for correlation
    error_id = str(uuid.uuid4())[:8]

    # Log full error server-side
    logger.error(
        f"{context} failed [{error_id}]: {type(error).__name__}: {str(error)}",
        exc_info=error
    )

    # Return sanitized message for client
    if user_message:
        sanitized = f"{user_message} (Error ID: {error_id})"
    else:
        sanitized = f"{context} failed. Please try again later. (Error ID: {error_id})"

    return sanitized, error_id


def _request_target(request: Request) -> str:
    target = request.url.path
    if request.url.query:
        target = f"{target}?{request.url.query}"
    return target


def setup_error_handlers(app: FastAPI) -> None:
    """Register the JSON error envelope for every failure path of an app."""

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        if exc.status_code >= 500:
            logger.error("%s on %s %s: %s", exc.kind.value, request.method, request.url.path, exc.detail)
        return error_response(
            message=exc.message,
            status_code=exc.status_code,
            errors=exc.errors,
            detail=exc.detail,
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        # Unknown paths and unsupported methods on known paths look alike to clients
        if exc.status_code in (status.HTTP_404_NOT_FOUND, status.HTTP_405_METHOD_NOT_ALLOWED):
            return error_response(
                message=f"Route {request.method} {_request_target(request)} not found",
                status_code=STATUS_CODES[ErrorKind.ROUTE_NOT_FOUND],
            )
        return error_response(message=str(exc.detail), status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = []
        for error in exc.errors():
            location = ".".join(str(part) for part in error.get("loc", ()))
            errors.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
        return error_response(
            message="Invalid request body",
            status_code=status.HTTP_400_BAD_REQUEST,
            errors=errors,
        )

    @app.exception_handler(SQLAlchemyError)
    async def database_exception_handler(request: Request, exc: SQLAlchemyError):
        logger.exception("Database error on %s", request.url.path, exc_info=exc)
        return error_response(
            message="A database error occurred while processing the request.",
            status_code=STATUS_CODES[ErrorKind.STORE],
            detail=str(exc),
        )

    @app.exception_handler(Exception)
    async def unexpected_exception_handler(request: Request, exc: Exception):
        sanitized, _ = log_and_sanitize_error(
            exc,
            f"{request.method} {request.url.path}",
            "Internal Server Error",
        )
        return error_response(
            message=sanitized,
            status_code=STATUS_CODES[ErrorKind.UNHANDLED],
            detail="".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
        )
