"""Errors raised by the service layer.

Each class declares the HTTP status and error code it is rendered with by
``sponsor_api.core.errors.service_exception_handler``.
"""

from __future__ import annotations

from typing import ClassVar

from sqlalchemy.exc import IntegrityError


class ServiceError(Exception):
    """Base error for service-layer failures."""

    status_code: ClassVar[int] = 400
    error_code: ClassVar[str] = "service_error"
    message: ClassVar[str] = "Service error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)


class NotFoundError(ServiceError):
    """Raised when a record does not exist, is soft-deleted, or belongs to someone else.

    The three cases share one message so callers cannot tell them apart.
    """

    status_code = 404
    error_code = "not_found"
    message = "Resource not found"


class AlreadyConfirmedError(ServiceError):
    """Raised when an issue already has a confirmed sponsorship."""

    status_code = 409
    error_code = "already_confirmed"
    message = "Issue already has a confirmed sponsorship"


class SponsorWindowClosedError(ServiceError):
    """Raised when confirming outside the issue's sponsor window."""

    status_code = 409
    error_code = "sponsor_window_closed"
    message = "Issue is not open for sponsorship"


class SponsorshipLockedError(ServiceError):
    """Raised when withdrawing an offer that has been confirmed."""

    status_code = 409
    error_code = "sponsorship_locked"
    message = "Confirmed sponsorships cannot be withdrawn"


def is_unique_violation(exc: IntegrityError, constraint: str, columns: str) -> bool:
    """Tell whether ``exc`` violates the named unique constraint.

    PostgreSQL reports the constraint name (SQLSTATE 23505); SQLite reports the
    ``table.column`` list instead.
    """
    error_str = str(exc.orig)
    lowered = error_str.lower()
    is_unique = "unique" in lowered or "duplicate" in lowered or "23505" in error_str
    return is_unique and (constraint in error_str or columns in error_str)
