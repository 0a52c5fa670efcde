"""Centralized error transformation for API routes.

Maps repocache errors (domain and infrastructure) to HTTPException responses.
"""

from typing import Any

from fastapi import HTTPException
from fastapi.exceptions import RequestValidationError

from repocache.domain.shared.error import (
    DomainError,
    InfrastructureError,
    InvalidFormatError,
    NotFoundError,
    RateLimitedError,
    RepoCacheError,
    StorageUnavailableError,
    UpstreamError,
    ValidationError,
)

_REQUEST_LOCATIONS = {"path", "query", "body", "header", "cookie"}

DOMAIN_ERROR_STATUS_MAP: dict[type[DomainError], int] = {
    NotFoundError: 404,
    InvalidFormatError: 422,
    ValidationError: 422,
}

INFRASTRUCTURE_ERROR_STATUS_MAP: dict[type[InfrastructureError], int] = {
    RateLimitedError: 429,
    UpstreamError: 502,
    StorageUnavailableError: 503,
}


def map_error(error: RepoCacheError) -> HTTPException:
    """Map a repocache error to an HTTPException.

    Args:
        error: The error to map.

    Returns:
        HTTPException with appropriate status code and detail.
    """
    detail: dict[str, Any] = {
        "code": error.code,
        "message": error.message,
    }

    if isinstance(error, InfrastructureError):
        status_code = INFRASTRUCTURE_ERROR_STATUS_MAP.get(type(error), 503)
        if isinstance(error, RateLimitedError) and error.retry_after is not None:
            return HTTPException(
                status_code=status_code,
                detail=detail,
                headers={"Retry-After": str(error.retry_after)},
            )
        return HTTPException(status_code=status_code, detail=detail)

    if isinstance(error, DomainError):
        status_code = DOMAIN_ERROR_STATUS_MAP.get(type(error), 400)
        if isinstance(error, ValidationError) and error.field is not None:
            detail["field"] = error.field
        return HTTPException(status_code=status_code, detail=detail)

    # Fallback for unknown RepoCacheError subclasses
    return HTTPException(status_code=500, detail=detail)


def from_request_validation(exc: RequestValidationError) -> ValidationError:
    """Convert FastAPI's request validation failure into a ValidationError.

    Only the first problem is reported; ``field`` names the offending parameter.
    """
    errors = exc.errors()
    if not errors:
        return ValidationError("Invalid request")

    first = errors[0]
    parts = [str(p) for p in first.get("loc", ()) if p not in _REQUEST_LOCATIONS]
    field = ".".join(parts) or None
    message = first.get("msg", "Invalid value")
    return ValidationError(f"{field}: {message}" if field else message, field=field)
