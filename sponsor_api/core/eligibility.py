"""Sponsor booking window of an issue."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from sponsor_api.core.schedule import as_utc


class InvalidWindowError(ValueError):
    """Raised when lead-time constants leave no time to book a sponsor."""

    error_code: str = "invalid_window"


@dataclass(frozen=True)
class SponsorWindow:
    """Half-open interval ``[opens_at, closes_at)`` during which an issue can be booked."""

    opens_at: datetime
    closes_at: datetime

    def is_open(self, now: datetime) -> bool:
        return self.opens_at <= as_utc(now) < self.closes_at


def _days_before(due_at: datetime, days: int) -> datetime:
    try:
        return due_at - timedelta(days=days)
    except OverflowError:
        return datetime.min.replace(tzinfo=UTC)


def window_for(due_at: datetime, sponsor_in_days: int, sponsor_before_days: int) -> SponsorWindow:
    """Window of an issue due at ``due_at``; bounds never reach before ``datetime.min``."""
    due_at = as_utc(due_at)
    return SponsorWindow(
        opens_at=_days_before(due_at, sponsor_in_days),
        closes_at=_days_before(due_at, sponsor_before_days),
    )


def validate_window(sponsor_in_days: int, sponsor_before_days: int) -> None:
    """Check that the window opens strictly before it closes.

    Raises:
        InvalidWindowError: If ``sponsor_in_days`` does not exceed ``sponsor_before_days``.
    """
    if sponsor_in_days <= sponsor_before_days:
        raise InvalidWindowError("must be greater than sponsor_before_days")
