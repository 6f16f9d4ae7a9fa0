"""Application-level exception types and their JSON rendering."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ApplicationError(Exception):
    """Base class for domain-specific errors."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_detail: str = "Bad request"

    def __init__(self, detail: Optional[str] = None) -> None:
        detail = detail or self.default_detail
        super().__init__(detail)
        self.detail = detail


class InvalidInputError(ApplicationError, ValueError):
    """Malformed or out-of-range input. Also a ``ValueError`` so pydantic validators may raise it."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid input"


class NotFoundError(ApplicationError):
    """Absent entity, or one owned by somebody else; callers cannot tell which."""

    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Task not found"


class AuthenticationError(ApplicationError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Unauthorized"


class ConfigurationError(ApplicationError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Server misconfiguration"


class StorageError(ApplicationError):
    """Unexpected store failure; carries a generic detail only."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Internal server error"


def _error_body(message: str) -> Dict[str, Any]:
    return {"error": message}


def _validation_message(exc: RequestValidationError) -> str:
    """Pick the most descriptive message out of a request validation failure."""
    errors = exc.errors()
    for error in errors:
        original = (error.get("ctx") or {}).get("error")
        if isinstance(original, InvalidInputError):
            return original.detail
    if not errors:
        return "Request validation failed"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query", "path"))
    message = str(first.get("msg", "Request validation failed"))
    return f"{location}: {message}" if location else message


def register_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers that render every failure as ``{"error": message}``."""

    @app.exception_handler(ApplicationError)
    async def _handle_application_error(request: Request, exc: ApplicationError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=_error_body(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def _handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_error_body(_validation_message(exc)),
        )

    @app.exception_handler(StarletteHTTPException)
    async def _handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=_error_body(str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def _handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_error_body(StorageError.default_detail),
        )


__all__ = [
    "ApplicationError",
    "AuthenticationError",
    "ConfigurationError",
    "InvalidInputError",
    "NotFoundError",
    "StorageError",
    "register_exception_handlers",
]
