"""Unit of Work: one transaction per request, session-scoped services from registry."""

from __future__ import annotations

from collections.abc import AsyncIterator, Mapping
from typing import Any, cast

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from sponsor_api.db.session import get_session_maker
from sponsor_api.services.issue_service import IssueService
from sponsor_api.services.newsletter_service import NewsletterService
from sponsor_api.services.sponsorship_service import SponsorshipService
from sponsor_api.services.user_service import UserService


class UnitOfWork:
    """Holds the request's session and exposes session-scoped services from the registry."""

    def __init__(self, session: AsyncSession, services: Mapping[str, Any]) -> None:
        self._session = session
        self._services = services
        self._resolved: dict[str, Any] = {}

    def _resolve(self, key: str) -> Any:
        if key not in self._resolved:
            service = self._services[key]
            self._resolved[key] = service(self._session) if callable(service) else service
        return self._resolved[key]

    @property
    def user_service(self) -> UserService:
        """Session-scoped user lookups."""
        return cast(UserService, self._resolve("user_service"))

    @property
    def newsletter_service(self) -> NewsletterService:
        """Session-scoped newsletter lifecycle service."""
        return cast(NewsletterService, self._resolve("newsletter_service"))

    @property
    def issue_service(self) -> IssueService:
        """Session-scoped issue store."""
        return cast(IssueService, self._resolve("issue_service"))

    @property
    def sponsorship_service(self) -> SponsorshipService:
        """Session-scoped sponsorship slot manager."""
        return cast(SponsorshipService, self._resolve("sponsorship_service"))


async def get_uow(request: Request) -> AsyncIterator[UnitOfWork]:
    """Per-request dependency: one session, commit on success, rollback on exception."""
    session_maker = get_session_maker()
    async with session_maker() as session:
        try:
            yield UnitOfWork(session, request.app.state.services)
            await session.commit()
        except Exception:
            await session.rollback()
            raise
