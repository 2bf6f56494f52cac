"""Centralized error transformation for API routes.

Maps dcat-bridge errors (domain and infrastructure) to HTTPException responses.
"""

from typing import Any

from fastapi import HTTPException

from dcatbridge.domain.shared.error import (
    DcatError,
    DomainError,
    InfrastructureError,
    NotFoundError,
)

DOMAIN_ERROR_STATUS_MAP: dict[type[DomainError], int] = {
    NotFoundError: 404,
}


def map_dcat_error(error: DcatError) -> HTTPException:
    """Map a dcat-bridge error to an HTTPException.

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
        # Upstream unavailable or misbehaving → 503 Service Unavailable
        return HTTPException(status_code=503, detail=detail)

    if isinstance(error, DomainError):
        status_code = DOMAIN_ERROR_STATUS_MAP.get(type(error), 400)
        return HTTPException(status_code=status_code, detail=detail)

    return HTTPException(status_code=500, detail=detail)
