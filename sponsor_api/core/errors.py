"""Uniform JSON error payloads and the exception handlers that produce them."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from http import HTTPStatus
from typing import Any

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.status import (
    HTTP_422_UNPROCESSABLE_CONTENT,
    HTTP_429_TOO_MANY_REQUESTS,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

logger = logging.getLogger(__name__)

ERROR_CODE_BY_STATUS: dict[int, str] = {
    400: "bad_request",
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    409: "conflict",
    422: "validation_error",
    429: "rate_limited",
    500: "internal_error",
    503: "service_unavailable",
}


class ErrorResponse(BaseModel):
    """Standardized error response payload."""

    error: str
    message: str
    details: Any | None = None


def error_code_for(status_code: int) -> str:
    return ERROR_CODE_BY_STATUS.get(status_code, "error")


def status_phrase(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Error"


def _error_json(
    status_code: int,
    *,
    error: str | None = None,
    message: str | None = None,
    details: Any | None = None,
    headers: Mapping[str, str] | None = None,
) -> JSONResponse:
    payload = ErrorResponse(
        error=error or error_code_for(status_code),
        message=message or status_phrase(status_code),
        details=details,
    ).model_dump(exclude_none=True)
    return JSONResponse(status_code=status_code, content=payload, headers=headers)


def build_http_error(
    status_code: int,
    error: str,
    message: str,
    details: Any | None = None,
    headers: dict[str, str] | None = None,
) -> HTTPException:
    return HTTPException(
        status_code=status_code,
        detail=ErrorResponse(error=error, message=message, details=details).model_dump(
            exclude_none=True
        ),
        headers=headers,
    )


def build_validation_error(field_errors: dict[str, list[str]]) -> HTTPException:
    """HTTP 422 carrying field-level messages for form re-display."""
    return build_http_error(
        status_code=HTTP_422_UNPROCESSABLE_CONTENT,
        error=error_code_for(HTTP_422_UNPROCESSABLE_CONTENT),
        message="Validation failed",
        details=field_errors,
    )


def http_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    if not isinstance(exc, StarletteHTTPException):
        return _error_json(HTTP_500_INTERNAL_SERVER_ERROR)
    headers = getattr(exc, "headers", None)
    detail = exc.detail
    if isinstance(detail, dict) and "error" in detail and "message" in detail:
        parsed = ErrorResponse.model_validate(detail)
        return _error_json(
            exc.status_code,
            error=parsed.error,
            message=parsed.message,
            details=parsed.details,
            headers=headers,
        )
    return _error_json(exc.status_code, message=str(detail) if detail else None, headers=headers)


def service_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render a service-layer error using the status and code the error class declares."""
    status_code = getattr(exc, "status_code", HTTP_500_INTERNAL_SERVER_ERROR)
    return _error_json(
        status_code,
        error=getattr(exc, "error_code", None),
        message=str(exc),
    )


def request_validation_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    if not isinstance(exc, RequestValidationError):
        return _error_json(HTTP_500_INTERNAL_SERVER_ERROR)
    return _error_json(
        HTTP_422_UNPROCESSABLE_CONTENT,
        message="Request validation failed",
        details=exc.errors(),
    )


def rate_limit_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    return _error_json(
        HTTP_429_TOO_MANY_REQUESTS,
        message="Too many requests",
        headers=getattr(exc, "headers", None),
    )


def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        "Unhandled exception",
        exc_info=exc,
        extra={"method": request.method, "path": request.url.path},
    )
    return _error_json(HTTP_500_INTERNAL_SERVER_ERROR)
