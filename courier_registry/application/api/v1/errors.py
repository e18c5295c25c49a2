"""Centralized error transformation for API routes.

Maps registry errors (domain and infrastructure) to HTTPException responses.
"""

from typing import Any

from fastapi import HTTPException

from courier_registry.domain.shared.error import (
    ConflictError,
    DomainError,
    InfrastructureError,
    NotFoundError,
    RegistryError,
    StorageUnavailableError,
    ValidationError,
    VerificationError,
)

DOMAIN_ERROR_STATUS_MAP: dict[type[DomainError], int] = {
    NotFoundError: 404,
    ValidationError: 400,
    VerificationError: 400,
    ConflictError: 409,
}


def map_registry_error(error: RegistryError) -> HTTPException:
    """Map a registry error to an HTTPException.

    Args:
        error: The registry error to map.

    Returns:
        HTTPException with appropriate status code and detail.
    """
    detail: dict[str, Any] = {
        "code": error.code,
        "message": error.message,
    }

    if isinstance(error, StorageUnavailableError):
        # Storage details stay in the server log
        return HTTPException(
            status_code=500,
            detail={"code": "InternalError", "message": "Internal server error"},
        )

    if isinstance(error, InfrastructureError):
        return HTTPException(status_code=503, detail=detail)

    if isinstance(error, DomainError):
        status_code = DOMAIN_ERROR_STATUS_MAP.get(type(error), 400)
        if isinstance(error, ValidationError) and error.fields:
            detail["fields"] = error.fields
        if isinstance(error, VerificationError):
            detail["reason"] = error.reason
            if error.status_code is not None:
                detail["statusCode"] = error.status_code
        return HTTPException(status_code=status_code, detail=detail)

    # Fallback for unknown RegistryError subclasses
    return HTTPException(status_code=500, detail=detail)
