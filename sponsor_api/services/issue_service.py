"""Issue service layer - persistence and lookup of newsletter issues."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping, Sequence
from datetime import datetime
from typing import Any

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sponsor_api.core.clock import Clock, system_clock
from sponsor_api.core.eligibility import SponsorWindow, window_for
from sponsor_api.core.schedule import truncate_to_second
from sponsor_api.db.models.issue import Issue
from sponsor_api.db.models.newsletter import Newsletter
from sponsor_api.db.models.user import User
from sponsor_api.services.errors import NotFoundError
from sponsor_api.services.validation import (
    MISSING_REFERENCE_MESSAGE,
    FieldErrors,
    IssueCreateAttrs,
    IssueUpdateAttrs,
    field_errors_from,
    normalize_issue_attrs,
)

logger = logging.getLogger(__name__)


def scheduled_issue_name(newsletter_name: str, due_at: datetime) -> str:
    return f"{newsletter_name} {due_at:%Y-%m-%d}"


class IssueService:
    """Reads and writes issues. Soft-deleted issues are invisible to every read."""

    def __init__(self, session: AsyncSession, clock: Clock = system_clock) -> None:
        self._session = session
        self._clock = clock

    async def list_issues(self, newsletter_id: int) -> list[Issue]:
        """Return the live issues of a newsletter, earliest due first."""
        result = await self._session.execute(
            select(Issue)
            .where(Issue.newsletter_id == newsletter_id, Issue.deleted.is_(False))
            .order_by(Issue.due_at, Issue.id)
        )
        return list(result.scalars().all())

    async def list_issues_of_slugs(self, user_slug: str, newsletter_slug: str) -> list[Issue]:
        """Return the issues a sponsor can still book: not yet due, earliest first."""
        now = self._clock.now_utc()
        result = await self._session.execute(
            select(Issue)
            .join(Newsletter, Issue.newsletter_id == Newsletter.id)
            .join(User, Newsletter.user_id == User.id)
            .where(
                User.slug == user_slug,
                Newsletter.slug == newsletter_slug,
                Newsletter.deleted.is_(False),
                Issue.deleted.is_(False),
                Issue.due_at > now,
            )
            .order_by(Issue.due_at, Issue.id)
        )
        return list(result.scalars().all())

    def sponsor_window(self, newsletter: Newsletter, issue: Issue) -> tuple[SponsorWindow, bool]:
        """Return the issue's booking window and whether it is open right now."""
        window = window_for(
            issue.due_at, newsletter.sponsor_in_days, newsletter.sponsor_before_days
        )
        return window, window.is_open(self._clock.now_utc())

    async def get_issue(self, newsletter_id: int, issue_id: int) -> Issue:
        """Return one live issue of a newsletter.

        Raises:
            NotFoundError: If the issue is missing, soft-deleted, or in another newsletter.
        """
        result = await self._session.execute(
            select(Issue).where(
                Issue.id == issue_id,
                Issue.newsletter_id == newsletter_id,
                Issue.deleted.is_(False),
            )
        )
        issue = result.scalar_one_or_none()
        if issue is None:
            raise NotFoundError()
        return issue

    async def create_issue(self, attrs: Mapping[str, Any]) -> Issue | FieldErrors:
        try:
            data = IssueCreateAttrs.model_validate(normalize_issue_attrs(attrs))
        except ValidationError as e:
            return field_errors_from(e)

        newsletter = await self._session.get(Newsletter, data.newsletter_id)
        if newsletter is None or newsletter.deleted:
            return FieldErrors.single("newsletter_id", MISSING_REFERENCE_MESSAGE)

        issue = Issue(
            newsletter_id=data.newsletter_id,
            name=data.name,
            due_at=truncate_to_second(data.due_at),
        )
        self._session.add(issue)
        await self._session.flush()
        logger.info(
            "Issue created",
            extra={"issue_id": issue.id, "newsletter_id": issue.newsletter_id},
        )
        return issue

    async def add_scheduled_issues(
        self, newsletter: Newsletter, due_dates: Sequence[datetime]
    ) -> list[Issue]:
        """Persist one issue per generated due-date for a newsletter being created."""
        issues = [
            Issue(
                newsletter_id=newsletter.id,
                name=scheduled_issue_name(newsletter.name, due_at),
                due_at=truncate_to_second(due_at),
            )
            for due_at in due_dates
        ]
        self._session.add_all(issues)
        await self._session.flush()
        return issues

    async def update_issue(self, issue: Issue, attrs: Mapping[str, Any]) -> Issue | FieldErrors:
        """Update name and due date. The owning newsletter never changes."""
        merged = {"name": issue.name, "due_at": issue.due_at, **normalize_issue_attrs(attrs)}
        try:
            data = IssueUpdateAttrs.model_validate(merged)
        except ValidationError as e:
            return field_errors_from(e)

        issue.name = data.name
        issue.due_at = truncate_to_second(data.due_at)
        await self._session.flush()
        return issue

    async def soft_delete_issue(self, issue: Issue) -> Issue:
        issue.deleted = True
        await self._session.flush()
        logger.info("Issue soft deleted", extra={"issue_id": issue.id})
        return issue


def issue_service_factory_provider(
    clock: Clock = system_clock,
) -> Callable[[AsyncSession], IssueService]:
    def factory(session: AsyncSession) -> IssueService:
        return IssueService(session, clock)

    return factory
