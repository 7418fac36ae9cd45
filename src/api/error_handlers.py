"""Map pet matching exceptions to JSON error responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from src.errors import (
    PetMatchError,
    PetNotFoundError,
    PetStatusMismatchError,
    RepositoryError,
)

logger = logging.getLogger(__name__)

EXCEPTION_STATUS_MAP: dict[type[PetMatchError], int] = {
    PetNotFoundError: status.HTTP_404_NOT_FOUND,
    PetStatusMismatchError: status.HTTP_400_BAD_REQUEST,
    RepositoryError: status.HTTP_503_SERVICE_UNAVAILABLE,
}

GENERIC_ERROR_MESSAGE = "Failed to find pet matches"
GENERIC_ERROR_CODE = "InternalError"
INVALID_QUERY_CODE = "InvalidQuery"


def register_exception_handlers(app: FastAPI) -> None:
    """Attach handlers turning exceptions into ``{"error": ...}`` bodies."""
    app.add_exception_handler(PetMatchError, _pet_match_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(Exception, _unhandled_exception_handler)


async def _pet_match_error_handler(request: Request, exc: PetMatchError) -> JSONResponse:
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    for exc_type, mapped in EXCEPTION_STATUS_MAP.items():
        if isinstance(exc, exc_type):
            status_code = mapped
            break

    if status_code >= 500:
        logger.error("%s on %s: %s", exc.code, request.url.path, exc.message)
    return JSONResponse(status_code=status_code, content={"error": exc.message, "code": exc.code})


async def _validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    first = exc.errors()[0] if exc.errors() else {}
    field = ".".join(str(part) for part in first.get("loc", ())[1:])
    message = f"Invalid {field}: {first.get('msg', 'bad value')}" if field else "Invalid request"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": message, "code": INVALID_QUERY_CODE},
    )


async def _unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s", request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": GENERIC_ERROR_MESSAGE, "code": GENERIC_ERROR_CODE},
    )
