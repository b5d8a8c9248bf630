"""OpenAPI ``responses=`` entries documenting the error envelope per route."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from fastapi import status

from sponsor_api.core.errors import ErrorResponse
from sponsor_api.services.errors import ServiceError

Responses = dict[int | str, dict[str, Any]]


@dataclass(frozen=True)
class ErrorExample:
    status_code: int
    error: str
    message: str
    description: str
    summary: str | None = None
    details: Any | None = None


def error_responses(*examples: ErrorExample) -> Responses:
    """Group examples by status code; the first example of a status sets its description."""
    responses: Responses = {}
    for example in examples:
        response = responses.setdefault(
            example.status_code,
            {
                "model": ErrorResponse,
                "description": example.description,
                "content": {"application/json": {"examples": {}}},
            },
        )
        payload = ErrorResponse(
            error=example.error, message=example.message, details=example.details
        ).model_dump(exclude_none=True)
        response["content"]["application/json"]["examples"][example.error] = {
            "summary": example.summary or example.description,
            "value": payload,
        }
    return responses


def service_error_responses(description: str, *errors: type[ServiceError]) -> Responses:
    """Document service errors with the status, code and message each class declares."""
    return error_responses(
        *(
            ErrorExample(
                status_code=error.status_code,
                error=error.error_code,
                message=error.message,
                description=description,
                summary=error.message,
            )
            for error in errors
        )
    )


def rate_limited_response(description: str = "Rate limit exceeded") -> Responses:
    return error_responses(
        ErrorExample(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            error="rate_limited",
            message="Too many requests",
            description=description,
            summary="Too many requests",
        )
    )


def unauthorized_response(description: str = "Missing or invalid token") -> Responses:
    return error_responses(
        ErrorExample(
            status_code=status.HTTP_401_UNAUTHORIZED,
            error="unauthorized",
            message="Could not validate credentials",
            description=description,
            summary="Unauthorized",
        )
    )


def not_found_response(description: str = "Not found") -> Responses:
    return error_responses(
        ErrorExample(
            status_code=status.HTTP_404_NOT_FOUND,
            error="not_found",
            message="Resource not found",
            description=description,
            summary="Not found",
        )
    )


def validation_failed_response(
    field: str, message: str, description: str = "Invalid attributes"
) -> Responses:
    return error_responses(
        ErrorExample(
            status_code=status.HTTP_422_UNPROCESSABLE_CONTENT,
            error="validation_error",
            message="Validation failed",
            description=description,
            summary="Validation failed",
            details={field: [message]},
        )
    )


def forbidden_response(role: str) -> Responses:
    return error_responses(
        ErrorExample(
            status_code=status.HTTP_403_FORBIDDEN,
            error="onboarding_required",
            message="Finish onboarding before using this resource",
            description="Not allowed for this account",
            summary="Onboarding not finished",
        ),
        ErrorExample(
            status_code=status.HTTP_403_FORBIDDEN,
            error="forbidden",
            message=f"A {role} account is required",
            description="Not allowed for this account",
            summary=f"Not a {role}",
        ),
    )
