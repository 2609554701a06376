"""Application errors and the handlers that turn them into responses.

Every JSON error leaves the API in one envelope:

    {"error": {"code": "PERMISSION_DENIED", "message": "...", "details": {...}}}

`details` is omitted when empty. Page guards raise `RedirectRequired`
instead, which becomes a 303 rather than an error body.
"""

import logging
from typing import Any, Optional, Union

from fastapi import HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError, OperationalError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


# ── Application errors ───────────────────────────────────────

class DealerPortalException(Exception):
    """Base class for errors the API reports to clients as-is."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code: str = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        self.message = message
        if error_code:
            self.error_code = error_code
        self.details = details
        super().__init__(message)


class BusinessLogicError(DealerPortalException):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    error_code = "BUSINESS_LOGIC_ERROR"


class ResourceNotFoundError(DealerPortalException):
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "RESOURCE_NOT_FOUND"

    def __init__(self, resource: str, identifier: str):
        super().__init__(
            f"{resource} not found: {identifier}",
            details={"resource": resource, "id": identifier},
        )


class PermissionDeniedError(DealerPortalException):
    """The principal is authenticated but ranks too low for the action."""

    status_code = status.HTTP_403_FORBIDDEN
    error_code = "PERMISSION_DENIED"

    def __init__(self, message: str = "Permission denied"):
        super().__init__(message)


class DealerScopeError(DealerPortalException):
    """A tenant-scoped principal reached for another dealer's data."""

    status_code = status.HTTP_403_FORBIDDEN
    error_code = "DEALER_SCOPE_VIOLATION"

    def __init__(self, message: str = "You do not have access to this dealer"):
        super().__init__(message)


class RedirectRequired(Exception):
    """Raised by page guards; rendered as a 303 to `location`."""

    def __init__(self, location: str):
        self.location = location
        super().__init__(location)


# ── Envelope ─────────────────────────────────────────────────

def create_error_response(
    status_code: int,
    message: str,
    error_code: str = "ERROR",
    details: Union[dict, list, None] = None,
    headers: Optional[dict[str, str]] = None,
) -> JSONResponse:
    error: dict[str, Any] = {"code": error_code, "message": message}
    if details:
        error["details"] = details
    return JSONResponse(status_code=status_code, content={"error": error}, headers=headers)


def _request_context(request: Request) -> dict[str, str]:
    return {"path": request.url.path, "method": request.method}


# ── Handlers ─────────────────────────────────────────────────

async def dealer_portal_exception_handler(
    request: Request,
    exc: DealerPortalException,
) -> JSONResponse:
    logger.warning(
        f"{exc.error_code}: {exc.message}",
        extra={"error_code": exc.error_code, **_request_context(request)},
    )
    return create_error_response(exc.status_code, exc.message, exc.error_code, exc.details)


async def redirect_required_handler(
    request: Request,
    exc: RedirectRequired,
) -> RedirectResponse:
    logger.info(
        f"Redirecting {request.url.path} -> {exc.location}",
        extra={"location": exc.location, **_request_context(request)},
    )
    return RedirectResponse(exc.location, status_code=status.HTTP_303_SEE_OTHER)


async def http_exception_handler(
    request: Request,
    exc: Union[HTTPException, StarletteHTTPException],
) -> JSONResponse:
    """Wrap HTTPException in the error envelope, keeping its headers."""
    if exc.status_code >= 500:
        logger.error(f"HTTP {exc.status_code}: {exc.detail}", extra=_request_context(request))

    return create_error_response(
        exc.status_code,
        str(exc.detail),
        f"HTTP_{exc.status_code}",
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request,
    exc: Union[RequestValidationError, ValidationError],
) -> JSONResponse:
    errors = [
        {
            "field": " -> ".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]
    logger.warning(
        f"Validation error on {request.url.path}",
        extra={"errors": errors, **_request_context(request)},
    )
    return create_error_response(
        status.HTTP_422_UNPROCESSABLE_ENTITY,
        "Validation error",
        "VALIDATION_ERROR",
        {"errors": errors},
    )


# Unique indexes and the error code reported when a write collides with one.
_UNIQUE_VIOLATIONS = {
    "ix_users_email": ("A user with this email already exists", "EMAIL_TAKEN"),
    "ix_dealers_code": ("A dealer with this code already exists", "DEALER_CODE_TAKEN"),
}


def _classify_integrity_error(exc: IntegrityError) -> tuple[str, str]:
    text = str(getattr(exc, "orig", exc)).lower()
    for index, outcome in _UNIQUE_VIOLATIONS.items():
        if index in text:
            return outcome
    if "unique" in text:
        return "A record with this value already exists", "DUPLICATE_RECORD"
    if "foreign key" in text:
        return "Referenced record does not exist", "FOREIGN_KEY_VIOLATION"
    if "not null" in text:
        return "Required field is missing", "NULL_VALUE_NOT_ALLOWED"
    return "Database constraint violation", "INTEGRITY_ERROR"


async def database_exception_handler(
    request: Request,
    exc: IntegrityError,
) -> JSONResponse:
    message, error_code = _classify_integrity_error(exc)
    logger.error(
        f"Integrity error on {request.url.path}: {error_code}",
        extra={"error_code": error_code, **_request_context(request)},
    )
    return create_error_response(status.HTTP_422_UNPROCESSABLE_ENTITY, message, error_code)


async def operational_exception_handler(
    request: Request,
    exc: OperationalError,
) -> JSONResponse:
    logger.error(f"Database unavailable on {request.url.path}: {exc}", extra=_request_context(request))
    return create_error_response(
        status.HTTP_503_SERVICE_UNAVAILABLE,
        "Database temporarily unavailable. Please try again.",
        "DATABASE_UNAVAILABLE",
    )


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled exception on {request.url.path}: {exc}",
        extra=_request_context(request),
        exc_info=exc,
    )
    # never leak internals
    return create_error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "An unexpected error occurred. Please try again later.",
        "INTERNAL_SERVER_ERROR",
    )


def register_exception_handlers(app):
    app.add_exception_handler(DealerPortalException, dealer_portal_exception_handler)
    app.add_exception_handler(RedirectRequired, redirect_required_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(ValidationError, validation_exception_handler)
    app.add_exception_handler(IntegrityError, database_exception_handler)
    app.add_exception_handler(OperationalError, operational_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
