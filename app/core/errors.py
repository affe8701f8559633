"""Map domain exceptions onto the JSON error contract."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.schemas.common import ErrorResponse
from engine.errors import (
    ApplianceValidationError,
    RecommendationError,
    RecommendationInvalid,
    RecommendationUnavailable,
    ResponseParseError,
)

logger = logging.getLogger(__name__)

_STATUS_CODES: dict[type[RecommendationError], int] = {
    ApplianceValidationError: status.HTTP_400_BAD_REQUEST,
    ResponseParseError: status.HTTP_503_SERVICE_UNAVAILABLE,
    RecommendationInvalid: status.HTTP_422_UNPROCESSABLE_ENTITY,
    RecommendationUnavailable: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def status_for(exc: RecommendationError) -> int:
    for cls in type(exc).__mro__:
        if cls in _STATUS_CODES:
            return _STATUS_CODES[cls]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def error_body(exc: RecommendationError) -> dict:
    body = ErrorResponse(
        message=exc.message,
        errors=exc.errors or None,
        required=(
            list(ApplianceValidationError.REQUIRED_FIELDS)
            if isinstance(exc, ApplianceValidationError) else None
        ),
        suggestion=exc.suggestion,
        can_retry=exc.can_retry,
    )
    return body.model_dump(by_alias=True, exclude_none=True)


async def recommendation_error_handler(request: Request, exc: RecommendationError) -> JSONResponse:
    code = status_for(exc)
    log = logger.warning if code < 500 else logger.error
    log("%s %s -> %d %s: %s", request.method, request.url.path, code, type(exc).__name__, exc.errors)
    return JSONResponse(status_code=code, content=error_body(exc))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render request-body validation failures in the error envelope."""
    errors = [
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg', 'invalid')}"
        for err in exc.errors()
    ]
    logger.warning("%s %s -> 400 invalid request: %s", request.method, request.url.path, errors)
    body = ErrorResponse(
        message="Invalid request body",
        errors=errors,
        suggestion="Check the request body and try again",
        can_retry=False,
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=body.model_dump(by_alias=True, exclude_none=True),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RecommendationError, recommendation_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
