"""Issue due-date projection from a newsletter's cadence."""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta
from typing import Final

logger = logging.getLogger(__name__)

DEFAULT_MAX_ISSUES: Final[int] = 500
# Upper bound for every day-count setting of a newsletter (about ten years).
MAX_CADENCE_DAYS: Final[int] = 3650


class InvalidCadenceError(ValueError):
    """Raised when cadence parameters cannot produce a schedule."""

    error_code: str = "invalid_cadence"


def as_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime; naive values are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def truncate_to_second(value: datetime) -> datetime:
    return as_utc(value).replace(microsecond=0)


def validate_cadence(interval_days: int) -> None:
    if isinstance(interval_days, bool) or not isinstance(interval_days, int):
        raise InvalidCadenceError("must be an integer")
    if interval_days <= 0:
        raise InvalidCadenceError("must be greater than 0")
    if interval_days > MAX_CADENCE_DAYS:
        raise InvalidCadenceError(f"must be less than or equal to {MAX_CADENCE_DAYS}")


def issue_horizon(next_issue_at: datetime, sponsor_in_days: int) -> datetime:
    """Exclusive cutoff for the issues materialised when a newsletter is created.

    Every issue due before this instant can already be booked by a sponsor,
    or becomes bookable before the first issue ships. Saturates at the latest
    representable instant.
    """
    start = truncate_to_second(next_issue_at)
    try:
        return start + timedelta(days=sponsor_in_days)
    except OverflowError:
        return datetime.max.replace(tzinfo=UTC)


def generate_due_dates(
    next_issue_at: datetime,
    interval_days: int,
    *,
    until: datetime | None = None,
    count: int | None = None,
    limit: int = DEFAULT_MAX_ISSUES,
) -> list[datetime]:
    """Project the due-dates of consecutive issues.

    The first due-date is ``next_issue_at`` truncated to whole seconds; each
    following one is ``interval_days`` days later. Exactly one horizon must be
    given: ``until`` (exclusive cutoff) or ``count`` (number of issues). The
    result never holds more than ``limit`` entries.

    Raises:
        InvalidCadenceError: If ``interval_days`` is not a positive integer.
        ValueError: If the horizon arguments are inconsistent.
    """
    validate_cadence(interval_days)
    if (until is None) == (count is None):
        raise ValueError("Exactly one of 'until' or 'count' must be provided")
    if count is not None and count < 0:
        raise ValueError("count must not be negative")
    if limit <= 0:
        raise ValueError("limit must be greater than 0")

    step = timedelta(days=interval_days)
    due_at = truncate_to_second(next_issue_at)
    cutoff = as_utc(until) if until is not None else None
    wanted = min(count, limit) if count is not None else limit

    due_dates: list[datetime] = []
    while len(due_dates) < wanted:
        if cutoff is not None and due_at >= cutoff:
            break
        due_dates.append(due_at)
        if len(due_dates) == wanted:
            break
        try:
            due_at = due_at + step
        except OverflowError:
            # Nothing past datetime.max can be scheduled.
            break

    if count is not None and count > limit:
        logger.warning(
            "Issue schedule truncated",
            extra={"requested": count, "limit": limit},
        )
    elif cutoff is not None and len(due_dates) == limit and cutoff - due_at > step:
        logger.warning(
            "Issue schedule truncated",
            extra={"cutoff": cutoff.isoformat(), "limit": limit},
        )

    return due_dates
