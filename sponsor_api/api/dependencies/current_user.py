"""Dependency that provides the authenticated user from the request."""

from __future__ import annotations

from fastapi import Depends, HTTPException, status

from sponsor_api.api.dependencies.unit_of_work import UnitOfWork, get_uow
from sponsor_api.core.auth import oauth2_scheme, verify_token
from sponsor_api.core.errors import build_http_error
from sponsor_api.db.models.user import User


def _credentials_error() -> HTTPException:
    return build_http_error(
        status_code=status.HTTP_401_UNAUTHORIZED,
        error="unauthorized",
        message="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )


def user_id_from_token(token: str) -> int | None:
    """Return the numeric user id in the token's ``sub`` claim, or None if unusable."""
    payload = verify_token(token)
    subject = payload.get("sub") if payload else None
    if not isinstance(subject, str) or not subject.isdigit():
        return None
    return int(subject)


async def get_current_user(
    token: str = Depends(oauth2_scheme), uow: UnitOfWork = Depends(get_uow)
) -> User:
    """Resolve the bearer token to a stored user, or fail with 401.

    Creators and sponsors are both plain users; which role applies is decided
    by the operation, not here.
    """
    user_id = user_id_from_token(token)
    if user_id is None:
        raise _credentials_error()
    user = await uow.user_service.get_user_by_id(user_id)
    if user is None:
        raise _credentials_error()
    return user


async def get_onboarded_user(user: User = Depends(get_current_user)) -> User:
    """Require a user who finished onboarding, i.e. has a public slug."""
    if user.slug is None:
        raise build_http_error(
            status_code=status.HTTP_403_FORBIDDEN,
            error="onboarding_required",
            message="Finish onboarding before using this resource",
        )
    return user


def _role_forbidden(role: str) -> HTTPException:
    return build_http_error(
        status_code=status.HTTP_403_FORBIDDEN,
        error="forbidden",
        message=f"A {role} account is required",
    )


async def get_current_creator(user: User = Depends(get_onboarded_user)) -> User:
    if not user.is_creator:
        raise _role_forbidden("creator")
    return user


async def get_current_sponsor(user: User = Depends(get_onboarded_user)) -> User:
    if not user.is_sponsor:
        raise _role_forbidden("sponsor")
    return user
