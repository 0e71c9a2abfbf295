"""HTTP mapping for tenancy errors."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from backend.app.tenancy.errors import (
    CrossTenantDenied,
    NotFound,
    TenancyError,
    TenantMismatch,
    TenantScopeViolation,
    TenantUnresolved,
    UnknownCollection,
)

logger = logging.getLogger(__name__)

_STATUS: dict[type[TenancyError], int] = {
    TenantUnresolved: status.HTTP_401_UNAUTHORIZED,
    TenantMismatch: status.HTTP_403_FORBIDDEN,
    CrossTenantDenied: status.HTTP_403_FORBIDDEN,
    NotFound: status.HTTP_404_NOT_FOUND,
    TenantScopeViolation: status.HTTP_500_INTERNAL_SERVER_ERROR,
    UnknownCollection: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def status_for(exc: TenancyError) -> int:
    """Return the HTTP status code for a tenancy error."""
    for cls in type(exc).__mro__:
        if cls in _STATUS:
            return _STATUS[cls]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def tenancy_error_handler(request: Request, exc: TenancyError) -> JSONResponse:
    """Render a tenancy error as a JSON response.

    Server-side errors get a generic body; details stay in the logs.
    """
    status_code = status_for(exc)

    if status_code >= 500:
        logger.error(
            "Tenancy programming error",
            exc_info=exc,
            extra={"structured": {"path": request.url.path, "code": exc.code}},
        )
        detail = "Internal server error"
    else:
        detail = str(exc)

    return JSONResponse(status_code=status_code, content={"detail": detail, "code": exc.code})


def register_error_handlers(app: FastAPI) -> None:
    """Install the tenancy exception handlers on the application."""
    app.add_exception_handler(TenancyError, tenancy_error_handler)
