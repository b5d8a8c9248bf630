"""User lookups for request authentication and public creator pages."""

from __future__ import annotations

from collections.abc import Callable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sponsor_api.db.models.user import User


class UserService:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_user_by_id(self, user_id: int) -> User | None:
        result = await self._session.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_user_by_slug(self, slug: str) -> User | None:
        result = await self._session.execute(select(User).where(User.slug == slug))
        return result.scalar_one_or_none()


def user_service_factory_provider() -> Callable[[AsyncSession], UserService]:
    return UserService
