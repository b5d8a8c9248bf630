"""Attribute validation for create/update operations.

Validation failures are returned to the caller as ``FieldErrors`` values,
mapping each field to its messages, so forms can be re-displayed.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Annotated, Any, Final, TypeVar

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

from sponsor_api.core.eligibility import InvalidWindowError, validate_window
from sponsor_api.core.schedule import MAX_CADENCE_DAYS, InvalidCadenceError, validate_cadence

BLANK_MESSAGE: Final[str] = "can't be blank"
TAKEN_MESSAGE: Final[str] = "has already been taken"
MISSING_REFERENCE_MESSAGE: Final[str] = "does not exist"
SLUG_MESSAGE: Final[str] = (
    'must only contain lowercase characters (a-z), numbers (0-9), and "-"'
)
_SLUG_PATTERN = re.compile(r"^[a-z0-9-]+$")


@dataclass(frozen=True)
class FieldErrors:
    """Field name to error messages."""

    errors: dict[str, list[str]] = field(default_factory=dict)

    @classmethod
    def single(cls, field_name: str, message: str) -> FieldErrors:
        return cls({field_name: [message]})

    def merged(self, other: FieldErrors | None) -> FieldErrors:
        if other is None:
            return self
        errors = {name: list(messages) for name, messages in self.errors.items()}
        for name, messages in other.errors.items():
            known = errors.setdefault(name, [])
            known.extend(m for m in messages if m not in known)
        return FieldErrors(errors)


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def field_errors_from(exc: ValidationError) -> FieldErrors:
    errors: dict[str, list[str]] = {}
    for error in exc.errors():
        loc = error.get("loc", ())
        field_name = str(loc[0]) if loc else "base"
        if error["type"] == "missing" or _is_blank(error.get("input")):
            message = BLANK_MESSAGE
        elif error["type"] == "value_error":
            message = str(error.get("ctx", {}).get("error", error["msg"]))
        else:
            message = error["msg"]
        messages = errors.setdefault(field_name, [])
        if message not in messages:
            messages.append(message)
    return FieldErrors(errors)


def cadence_errors(
    interval_days: int | None, sponsor_in_days: int | None, sponsor_before_days: int | None
) -> FieldErrors | None:
    """Cross-field cadence checks; a None argument skips the checks that need it."""
    errors: dict[str, list[str]] = {}
    if interval_days is not None:
        try:
            validate_cadence(interval_days)
        except InvalidCadenceError as exc:
            errors["interval_days"] = [str(exc)]
    if sponsor_in_days is not None and sponsor_before_days is not None:
        try:
            validate_window(sponsor_in_days, sponsor_before_days)
        except InvalidWindowError as exc:
            errors["sponsor_in_days"] = [str(exc)]
    return FieldErrors(errors) if errors else None


def _check_slug(value: str) -> str:
    if not _SLUG_PATTERN.match(value):
        raise ValueError(SLUG_MESSAGE)
    return value


class _Attrs(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)


IntervalDays = Annotated[int, Field(le=MAX_CADENCE_DAYS)]
LeadDays = Annotated[int, Field(ge=0, le=MAX_CADENCE_DAYS)]

_INTERVAL_DAYS: TypeAdapter[int] = TypeAdapter(IntervalDays)
_LEAD_DAYS: TypeAdapter[int] = TypeAdapter(LeadDays)


class NewsletterUpdateAttrs(_Attrs):
    name: str = Field(min_length=1, max_length=200)
    slug: str = Field(min_length=1, max_length=100)
    interval_days: IntervalDays
    sponsor_in_days: LeadDays
    sponsor_before_days: LeadDays

    @field_validator("slug")
    @classmethod
    def validate_slug(cls, v: str) -> str:
        return _check_slug(v)


class NewsletterCreateAttrs(NewsletterUpdateAttrs):
    user_id: int
    next_issue_at: datetime


class IssueUpdateAttrs(_Attrs):
    name: str = Field(min_length=1, max_length=200)
    due_at: datetime


class IssueCreateAttrs(IssueUpdateAttrs):
    newsletter_id: int


class SponsorshipUpdateAttrs(_Attrs):
    ad_copy: str | None = Field(default=None, max_length=2000)


class SponsorshipCreateAttrs(SponsorshipUpdateAttrs):
    issue_id: int


def normalize_issue_attrs(attrs: Mapping[str, Any]) -> dict[str, Any]:
    """Accept ``due_date`` as an alias of ``due_at``."""
    data = dict(attrs)
    if "due_date" in data:
        due_date = data.pop("due_date")
        data.setdefault("due_at", due_date)
    return data


NewsletterAttrsT = TypeVar("NewsletterAttrsT", bound=NewsletterUpdateAttrs)


def _valid_or_none(
    adapter: TypeAdapter[int], attrs: Mapping[str, Any], name: str, errors: FieldErrors
) -> int | None:
    if name in errors.errors:
        return None
    try:
        return adapter.validate_python(attrs.get(name))
    except ValidationError:
        return None


def validate_newsletter_attrs(
    model: type[NewsletterAttrsT], attrs: Mapping[str, Any]
) -> NewsletterAttrsT | FieldErrors:
    """Validate newsletter attributes, reporting field and cadence problems together."""
    try:
        data = model.model_validate(dict(attrs))
    except ValidationError as e:
        errors = field_errors_from(e)
        return errors.merged(
            cadence_errors(
                _valid_or_none(_INTERVAL_DAYS, attrs, "interval_days", errors),
                _valid_or_none(_LEAD_DAYS, attrs, "sponsor_in_days", errors),
                _valid_or_none(_LEAD_DAYS, attrs, "sponsor_before_days", errors),
            )
        )
    errors = cadence_errors(data.interval_days, data.sponsor_in_days, data.sponsor_before_days)
    return errors if errors is not None else data
