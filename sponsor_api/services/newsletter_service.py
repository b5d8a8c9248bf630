"""Newsletter service layer - creation with its initial run of issues, updates, lookups."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from sponsor_api.core.clock import Clock, system_clock
from sponsor_api.core.config import settings
from sponsor_api.core.schedule import generate_due_dates, issue_horizon, truncate_to_second
from sponsor_api.db.models.newsletter import Newsletter
from sponsor_api.db.models.user import User
from sponsor_api.services.errors import NotFoundError, is_unique_violation
from sponsor_api.services.issue_service import IssueService
from sponsor_api.services.validation import (
    MISSING_REFERENCE_MESSAGE,
    TAKEN_MESSAGE,
    FieldErrors,
    NewsletterCreateAttrs,
    NewsletterUpdateAttrs,
    validate_newsletter_attrs,
)

logger = logging.getLogger(__name__)

_SLUG_CONSTRAINT = "uq_newsletters_user_id_slug"
_SLUG_COLUMNS = "newsletters.user_id, newsletters.slug"


class NewsletterService:
    """Creates newsletters together with their scheduled issues, and looks them up."""

    def __init__(
        self,
        session: AsyncSession,
        clock: Clock = system_clock,
        max_issues: int | None = None,
    ) -> None:
        self._session = session
        self._clock = clock
        self._max_issues = max_issues or settings.schedule_max_issues
        self._issues = IssueService(session, clock)

    async def list_newsletters(self, user_id: int) -> list[Newsletter]:
        result = await self._session.execute(
            select(Newsletter)
            .where(Newsletter.user_id == user_id, Newsletter.deleted.is_(False))
            .order_by(Newsletter.id)
        )
        return list(result.scalars().all())

    async def list_newsletters_of_slug(self, user_slug: str) -> list[Newsletter]:
        result = await self._session.execute(
            select(Newsletter)
            .join(User, Newsletter.user_id == User.id)
            .where(User.slug == user_slug, Newsletter.deleted.is_(False))
            .order_by(Newsletter.id)
        )
        return list(result.scalars().all())

    async def get_newsletter(self, user_id: int, newsletter_id: int) -> Newsletter:
        """Return a live newsletter owned by ``user_id``.

        Raises:
            NotFoundError: If the newsletter is missing, soft-deleted, or owned by someone else.
        """
        result = await self._session.execute(
            select(Newsletter).where(
                Newsletter.id == newsletter_id,
                Newsletter.user_id == user_id,
                Newsletter.deleted.is_(False),
            )
        )
        newsletter = result.scalar_one_or_none()
        if newsletter is None:
            raise NotFoundError()
        return newsletter

    async def get_newsletter_by_slugs(self, user_slug: str, newsletter_slug: str) -> Newsletter:
        """Return a live newsletter by its creator's slug and its own slug.

        Raises:
            NotFoundError: If no live newsletter matches both slugs.
        """
        result = await self._session.execute(
            select(Newsletter)
            .join(User, Newsletter.user_id == User.id)
            .where(
                User.slug == user_slug,
                Newsletter.slug == newsletter_slug,
                Newsletter.deleted.is_(False),
            )
        )
        newsletter = result.scalar_one_or_none()
        if newsletter is None:
            raise NotFoundError()
        return newsletter

    async def create_newsletter(self, attrs: Mapping[str, Any]) -> Newsletter | FieldErrors:
        """Create a newsletter and its initial run of issues as one unit.

        Issues are generated from ``next_issue_at`` every ``interval_days`` days,
        up to (excluding) ``next_issue_at + sponsor_in_days``. If anything fails
        after the newsletter row is written, the whole unit is rolled back.

        Returns:
            The new Newsletter, or FieldErrors when the attributes are invalid.
        """
        data = validate_newsletter_attrs(NewsletterCreateAttrs, attrs)
        if isinstance(data, FieldErrors):
            return data

        if await self._session.get(User, data.user_id) is None:
            return FieldErrors.single("user_id", MISSING_REFERENCE_MESSAGE)
        if await self._slug_taken(data.user_id, data.slug):
            return FieldErrors.single("slug", TAKEN_MESSAGE)

        next_issue_at = truncate_to_second(data.next_issue_at)
        due_dates = generate_due_dates(
            next_issue_at,
            data.interval_days,
            until=issue_horizon(next_issue_at, data.sponsor_in_days),
            limit=self._max_issues,
        )

        newsletter = Newsletter(
            user_id=data.user_id,
            name=data.name,
            slug=data.slug,
            interval_days=data.interval_days,
            sponsor_in_days=data.sponsor_in_days,
            sponsor_before_days=data.sponsor_before_days,
            next_issue_at=next_issue_at,
        )
        try:
            self._session.add(newsletter)
            await self._session.flush()
            issues = await self._issues.add_scheduled_issues(newsletter, due_dates)
        except IntegrityError as e:
            await self._session.rollback()
            if is_unique_violation(e, _SLUG_CONSTRAINT, _SLUG_COLUMNS):
                return FieldErrors.single("slug", TAKEN_MESSAGE)
            raise
        except SQLAlchemyError:
            await self._session.rollback()
            raise

        logger.info(
            "Newsletter created",
            extra={
                "newsletter_id": newsletter.id,
                "user_id": newsletter.user_id,
                "issue_count": len(issues),
            },
        )
        return newsletter

    async def update_newsletter(
        self, newsletter: Newsletter, attrs: Mapping[str, Any]
    ) -> Newsletter | FieldErrors:
        """Update name, slug and cadence numbers. The owner never changes.

        Existing issues keep their due-dates; the cadence only affects what the
        newsletter advertises from now on.
        """
        merged = {
            "name": newsletter.name,
            "slug": newsletter.slug,
            "interval_days": newsletter.interval_days,
            "sponsor_in_days": newsletter.sponsor_in_days,
            "sponsor_before_days": newsletter.sponsor_before_days,
            **attrs,
        }
        data = validate_newsletter_attrs(NewsletterUpdateAttrs, merged)
        if isinstance(data, FieldErrors):
            return data
        if data.slug != newsletter.slug and await self._slug_taken(
            newsletter.user_id, data.slug, exclude_id=newsletter.id
        ):
            return FieldErrors.single("slug", TAKEN_MESSAGE)

        newsletter.name = data.name
        newsletter.slug = data.slug
        newsletter.interval_days = data.interval_days
        newsletter.sponsor_in_days = data.sponsor_in_days
        newsletter.sponsor_before_days = data.sponsor_before_days
        try:
            await self._session.flush()
        except IntegrityError as e:
            await self._session.rollback()
            if is_unique_violation(e, _SLUG_CONSTRAINT, _SLUG_COLUMNS):
                return FieldErrors.single("slug", TAKEN_MESSAGE)
            raise
        return newsletter

    async def soft_delete_newsletter(self, newsletter: Newsletter) -> Newsletter:
        """Mark a newsletter deleted. Its issues are left untouched."""
        newsletter.deleted = True
        await self._session.flush()
        logger.info("Newsletter soft deleted", extra={"newsletter_id": newsletter.id})
        return newsletter

    async def _slug_taken(
        self, user_id: int, slug: str, exclude_id: int | None = None
    ) -> bool:
        # Deleted newsletters still hold their slug; the unique constraint covers them too.
        stmt = select(Newsletter.id).where(Newsletter.user_id == user_id, Newsletter.slug == slug)
        if exclude_id is not None:
            stmt = stmt.where(Newsletter.id != exclude_id)
        result = await self._session.execute(stmt.limit(1))
        return result.scalar_one_or_none() is not None


def newsletter_service_factory_provider(
    clock: Clock = system_clock,
    max_issues: int | None = None,
) -> Callable[[AsyncSession], NewsletterService]:
    def factory(session: AsyncSession) -> NewsletterService:
        return NewsletterService(session, clock, max_issues)

    return factory
