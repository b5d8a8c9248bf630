"""Sponsorship service layer - sponsor offers and the confirm transition."""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from sponsor_api.core.clock import Clock, system_clock
from sponsor_api.core.eligibility import window_for
from sponsor_api.db.models.confirmed_sponsorship import ConfirmedSponsorship
from sponsor_api.db.models.issue import Issue
from sponsor_api.db.models.newsletter import Newsletter
from sponsor_api.db.models.sponsorship import Sponsorship
from sponsor_api.services.errors import (
    AlreadyConfirmedError,
    NotFoundError,
    SponsorshipLockedError,
    SponsorWindowClosedError,
    is_unique_violation,
)
from sponsor_api.services.validation import (
    FieldErrors,
    SponsorshipCreateAttrs,
    SponsorshipUpdateAttrs,
    field_errors_from,
)

logger = logging.getLogger(__name__)

_CONFIRMED_CONSTRAINT = "uq_confirmed_sponsorships_issue_id"
_CONFIRMED_COLUMNS = "confirmed_sponsorships.issue_id"

NOT_SPONSORABLE_MESSAGE = "is not open for sponsorship"
ALREADY_SPONSORED_MESSAGE = "already has a confirmed sponsorship"


class SponsorshipService:
    """Manages sponsor offers on issues and their promotion to a confirmed sponsorship.

    An issue accepts any number of pending offers. Confirming one inserts a row
    into ``confirmed_sponsorships``, whose unique constraint on ``issue_id``
    guarantees that at most one confirmation per issue ever commits.
    """

    def __init__(self, session: AsyncSession, clock: Clock = system_clock) -> None:
        self._session = session
        self._clock = clock

    # Offers (sponsor side)

    async def list_sponsorships(self, sponsor_id: int) -> list[Sponsorship]:
        result = await self._session.execute(
            select(Sponsorship)
            .where(Sponsorship.user_id == sponsor_id, Sponsorship.deleted.is_(False))
            .order_by(Sponsorship.id)
        )
        return list(result.scalars().all())

    async def get_sponsorship(self, sponsor_id: int, sponsorship_id: int) -> Sponsorship:
        result = await self._session.execute(
            select(Sponsorship).where(
                Sponsorship.id == sponsorship_id,
                Sponsorship.user_id == sponsor_id,
                Sponsorship.deleted.is_(False),
            )
        )
        sponsorship = result.scalar_one_or_none()
        if sponsorship is None:
            raise NotFoundError()
        return sponsorship

    async def create_sponsorship(
        self, sponsor_id: int, attrs: Mapping[str, Any]
    ) -> Sponsorship | FieldErrors:
        """Record a sponsor's offer on an issue that is not yet due."""
        try:
            data = SponsorshipCreateAttrs.model_validate(dict(attrs))
        except ValidationError as e:
            return field_errors_from(e)

        result = await self._session.execute(
            select(Issue)
            .join(Newsletter, Issue.newsletter_id == Newsletter.id)
            .where(
                Issue.id == data.issue_id,
                Issue.deleted.is_(False),
                Newsletter.deleted.is_(False),
                Issue.due_at > self._clock.now_utc(),
            )
        )
        issue = result.scalar_one_or_none()
        if issue is None:
            return FieldErrors.single("issue_id", NOT_SPONSORABLE_MESSAGE)
        if await self._confirmed_for_issue(issue.id) is not None:
            return FieldErrors.single("issue_id", ALREADY_SPONSORED_MESSAGE)

        sponsorship = Sponsorship(issue_id=issue.id, user_id=sponsor_id, ad_copy=data.ad_copy)
        self._session.add(sponsorship)
        await self._session.flush()
        logger.info(
            "Sponsorship offered",
            extra={"sponsorship_id": sponsorship.id, "issue_id": issue.id},
        )
        return sponsorship

    async def update_sponsorship(
        self, sponsorship: Sponsorship, attrs: Mapping[str, Any]
    ) -> Sponsorship | FieldErrors:
        """Change the ad copy of an offer. The issue and sponsor never change."""
        try:
            data = SponsorshipUpdateAttrs.model_validate(
                {"ad_copy": sponsorship.ad_copy, **attrs}
            )
        except ValidationError as e:
            return field_errors_from(e)
        sponsorship.ad_copy = data.ad_copy
        await self._session.flush()
        return sponsorship

    async def soft_delete_sponsorship(self, sponsorship: Sponsorship) -> Sponsorship:
        """Withdraw an offer.

        Raises:
            SponsorshipLockedError: If the offer is the issue's confirmed sponsorship.
        """
        result = await self._session.execute(
            select(ConfirmedSponsorship.id).where(
                ConfirmedSponsorship.sponsorship_id == sponsorship.id
            )
        )
        if result.scalar_one_or_none() is not None:
            raise SponsorshipLockedError()
        sponsorship.deleted = True
        await self._session.flush()
        logger.info("Sponsorship withdrawn", extra={"sponsorship_id": sponsorship.id})
        return sponsorship

    # Offers (creator side)

    async def list_offers_for_issue(self, owner_id: int, issue_id: int) -> list[Sponsorship]:
        """Return live offers on an issue of one of ``owner_id``'s newsletters."""
        result = await self._session.execute(
            select(Sponsorship)
            .join(Issue, Sponsorship.issue_id == Issue.id)
            .join(Newsletter, Issue.newsletter_id == Newsletter.id)
            .where(
                Issue.id == issue_id,
                Newsletter.user_id == owner_id,
                Sponsorship.deleted.is_(False),
                Issue.deleted.is_(False),
                Newsletter.deleted.is_(False),
            )
            .order_by(Sponsorship.id)
        )
        return list(result.scalars().all())

    async def confirm_sponsorship(
        self, owner_id: int, sponsorship_id: int
    ) -> ConfirmedSponsorship:
        """Promote an offer to the issue's confirmed sponsorship.

        The insert is the only guard: when two confirmations race, the unique
        constraint lets exactly one commit and the other fails here.

        Raises:
            NotFoundError: If the offer is not on a live issue of ``owner_id``.
            SponsorWindowClosedError: If the issue's sponsor window is not open now.
            AlreadyConfirmedError: If the issue already has a confirmed sponsorship.
        """
        result = await self._session.execute(
            select(Sponsorship, Issue, Newsletter)
            .join(Issue, Sponsorship.issue_id == Issue.id)
            .join(Newsletter, Issue.newsletter_id == Newsletter.id)
            .where(
                Sponsorship.id == sponsorship_id,
                Newsletter.user_id == owner_id,
                Sponsorship.deleted.is_(False),
                Issue.deleted.is_(False),
                Newsletter.deleted.is_(False),
            )
        )
        row = result.one_or_none()
        if row is None:
            raise NotFoundError()
        sponsorship, issue, newsletter = row

        window = window_for(
            issue.due_at, newsletter.sponsor_in_days, newsletter.sponsor_before_days
        )
        if not window.is_open(self._clock.now_utc()):
            raise SponsorWindowClosedError()

        issue_id = issue.id
        confirmed = ConfirmedSponsorship(
            issue_id=issue_id,
            sponsorship_id=sponsorship.id,
            ad_copy=sponsorship.ad_copy,
        )
        self._session.add(confirmed)
        try:
            await self._session.flush()
        except IntegrityError as e:
            await self._session.rollback()
            if is_unique_violation(e, _CONFIRMED_CONSTRAINT, _CONFIRMED_COLUMNS):
                logger.info(
                    "Sponsorship confirmation rejected, issue already confirmed",
                    extra={"issue_id": issue_id, "sponsorship_id": sponsorship_id},
                )
                raise AlreadyConfirmedError() from e
            raise

        logger.info(
            "Sponsorship confirmed",
            extra={"issue_id": issue_id, "sponsorship_id": sponsorship_id},
        )
        return confirmed

    # Confirmed sponsorships (creator side)

    async def get_confirmed_sponsorship(
        self, owner_id: int, confirmed_id: int
    ) -> ConfirmedSponsorship:
        result = await self._session.execute(
            select(ConfirmedSponsorship)
            .join(Issue, ConfirmedSponsorship.issue_id == Issue.id)
            .join(Newsletter, Issue.newsletter_id == Newsletter.id)
            .where(
                ConfirmedSponsorship.id == confirmed_id,
                Newsletter.user_id == owner_id,
                Issue.deleted.is_(False),
                Newsletter.deleted.is_(False),
            )
        )
        confirmed = result.scalar_one_or_none()
        if confirmed is None:
            raise NotFoundError()
        return confirmed

    async def update_confirmed_sponsorship(
        self, confirmed: ConfirmedSponsorship, attrs: Mapping[str, Any]
    ) -> ConfirmedSponsorship | FieldErrors:
        try:
            data = SponsorshipUpdateAttrs.model_validate({"ad_copy": confirmed.ad_copy, **attrs})
        except ValidationError as e:
            return field_errors_from(e)
        confirmed.ad_copy = data.ad_copy
        await self._session.flush()
        return confirmed

    async def delete_confirmed_sponsorship(
        self, confirmed: ConfirmedSponsorship
    ) -> ConfirmedSponsorship:
        """Cancel a confirmation, reopening the issue.

        The confirmation row is removed so the issue can be confirmed again; the
        original offer stays on the issue as a pending offer.
        """
        await self._session.delete(confirmed)
        await self._session.flush()
        logger.info(
            "Sponsorship confirmation cancelled",
            extra={"issue_id": confirmed.issue_id, "sponsorship_id": confirmed.sponsorship_id},
        )
        return confirmed

    async def _confirmed_for_issue(self, issue_id: int) -> int | None:
        result = await self._session.execute(
            select(ConfirmedSponsorship.id).where(ConfirmedSponsorship.issue_id == issue_id)
        )
        return result.scalar_one_or_none()


def sponsorship_service_factory_provider(
    clock: Clock = system_clock,
) -> Callable[[AsyncSession], SponsorshipService]:
    def factory(session: AsyncSession) -> SponsorshipService:
        return SponsorshipService(session, clock)

    return factory
