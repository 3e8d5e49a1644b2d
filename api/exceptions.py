"""
Custom exceptions and error handlers for the API.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from movie_catalog.errors import (
    CatalogError,
    DuplicateKeyError,
    TokenError,
    UpstreamParseError,
)

logger = logging.getLogger("api.errors")


class APIError(HTTPException):
    """Base API error with structured error response."""

    def __init__(
        self,
        status_code: int,
        error: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.error = error
        self.message = message
        self.details = details
        super().__init__(status_code=status_code, detail=message)


class NotFoundError(APIError):
    """Resource not found error."""

    def __init__(self, resource: str, identifier: Any):
        super().__init__(
            status_code=404,
            error="not_found",
            message=f"{resource} not found",
            details={"resource": resource, "id": identifier},
        )


class ValidationError(APIError):
    """Malformed or missing request input."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            status_code=400,
            error="validation_error",
            message=message,
            details=details,
        )


class UnauthorizedError(APIError):
    """Missing, invalid or expired credentials, or insufficient role."""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(
            status_code=401,
            error="unauthorized",
            message=message,
        )


class ConflictError(APIError):
    """Duplicate unique key."""

    def __init__(self, message: str):
        super().__init__(
            status_code=409,
            error="conflict",
            message=message,
        )


class InternalError(APIError):
    """Store, upstream or configuration failure."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            status_code=500,
            error="internal_error",
            message=message,
            details=details,
        )


def from_catalog_error(exc: CatalogError) -> APIError:
    """Translate a domain error into its HTTP counterpart."""
    if isinstance(exc, TokenError):
        return UnauthorizedError()
    if isinstance(exc, DuplicateKeyError):
        return ConflictError(exc.message)
    if isinstance(exc, UpstreamParseError):
        return InternalError(exc.message, details={"raw_response": exc.raw_response})
    return InternalError(exc.message)


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    """Handle APIError exceptions and return structured JSON response."""
    content = {
        "error": exc.error,
        "message": exc.message,
    }
    if exc.details:
        content["details"] = exc.details
    return JSONResponse(status_code=exc.status_code, content=content)


async def catalog_error_handler(request: Request, exc: CatalogError) -> JSONResponse:
    """Handle domain errors raised by the catalog core."""
    api_error = from_catalog_error(exc)
    if api_error.status_code >= 500:
        logger.error(f"{type(exc).__name__} on {request.url.path}: {exc.message}")
    return await api_error_handler(request, api_error)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render body/query validation failures as 400 in the standard shape."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = first.get("msg", "Invalid request")
    if location:
        message = f"{location}: {message}"
    error = ValidationError(message, details={"errors": [
        {"loc": list(e.get("loc", ())), "msg": e.get("msg", "")} for e in errors
    ]})
    return await api_error_handler(request, error)


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.exception(f"Unhandled error on {request.url.path}")
    return JSONResponse(
        status_code=500,
        content={
            "error": "internal_error",
            "message": "An unexpected error occurred",
        },
    )
