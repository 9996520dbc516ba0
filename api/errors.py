"""Exception handlers mapping domain errors to HTTP responses.

InvalidInput, CapacityExceeded       -> 400
NotFound                             -> 404
AlreadySettled, Conflict             -> 409
StorageError, anything unhandled     -> 500 with an opaque body

Request-shape failures (RequestValidationError) are reported as 400 like
any other invalid input.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from api.middleware import get_current_request_id
from verticals.boardcamp.exceptions import (
    AlreadySettled,
    BoardcampError,
    CapacityExceeded,
    Conflict,
    InvalidInput,
    NotFound,
)

logger = structlog.get_logger(__name__)

_STATUS_BY_ERROR: list[tuple[type[BoardcampError], int, str]] = [
    (CapacityExceeded, 400, "capacity_exceeded"),
    (InvalidInput, 400, "invalid_input"),
    (NotFound, 404, "not_found"),
    (AlreadySettled, 409, "already_settled"),
    (Conflict, 409, "conflict"),
]


def _error_body(error: str, message: str, details: dict | None = None) -> dict:
    return {"error": error, "message": message, "details": details or {}}


async def boardcamp_error_handler(request: Request, exc: BoardcampError) -> JSONResponse:
    for error_type, status_code, code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            logger.info(
                "request_rejected",
                path=request.url.path,
                error=code,
                message=exc.message,
            )
            return JSONResponse(
                status_code=status_code,
                content=jsonable_encoder(_error_body(code, exc.message, exc.details)),
            )

    # StorageError and any future subclass without a client-facing status
    logger.error(
        "request_failed",
        path=request.url.path,
        method=request.method,
        error=exc.message,
    )
    return JSONResponse(
        status_code=500,
        content=_error_body(
            "internal_server_error",
            "An unexpected error occurred",
            {"request_id": get_current_request_id()},
        ),
    )


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content=jsonable_encoder(
            _error_body("invalid_input", "Request validation failed", {"errors": exc.errors()})
        ),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        exc_info=True,
    )
    return JSONResponse(
        status_code=500,
        content=_error_body("internal_server_error", "An unexpected error occurred"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BoardcampError, boardcamp_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
