"""Domain error → HTTP mapping shared by all endpoints."""

import logging

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import JSONResponse

from carbonflow.domain.exceptions import (
    ConflictError,
    DuplicateEntityError,
    EntityNotFoundError,
    HasDependentsError,
    InvalidCursorError,
    InvalidEntityError,
    InvalidStateError,
    StorageError,
)

logger = logging.getLogger(__name__)

# Errors an endpoint translates itself; the rest go through the app-level handlers.
DOMAIN_ERRORS = (
    EntityNotFoundError,
    DuplicateEntityError,
    HasDependentsError,
    InvalidStateError,
    InvalidEntityError,
    ConflictError,
)


def to_http_exception(exc: Exception) -> HTTPException:
    if isinstance(exc, EntityNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, HasDependentsError):
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"message": str(exc), "dependent_count": exc.dependent_count},
        )
    if isinstance(exc, (DuplicateEntityError, InvalidStateError, ConflictError)):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    if isinstance(exc, InvalidEntityError):
        return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
    if isinstance(exc, InvalidCursorError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    raise TypeError(f"No HTTP mapping for {type(exc).__name__}") from exc


async def invalid_cursor_handler(request: Request, exc: InvalidCursorError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": f"{exc}. Restart pagination without next_token."},
    )


async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Storage temporarily unavailable"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(InvalidCursorError, invalid_cursor_handler)  # type: ignore[arg-type]
    app.add_exception_handler(StorageError, storage_error_handler)  # type: ignore[arg-type]
