from __future__ import annotations

from collections.abc import Callable
from typing import Final, ParamSpec, TypeVar, cast

from fastapi import Request
from fastapi.security.utils import get_authorization_scheme_param
from slowapi import Limiter
from slowapi.util import get_remote_address

from sponsor_api.core.auth import verify_token
from sponsor_api.core.config import settings

DEFAULT_RATE_LIMIT: Final[str] = "120/minute"
HEALTH_RATE_LIMIT: Final[str] = "300/minute"
# Anonymous sponsor-facing pages.
PUBLIC_LISTING_RATE_LIMIT: Final[str] = "60/minute"
SPONSORSHIP_OFFER_RATE_LIMIT: Final[str] = "20/minute"
SPONSORSHIP_CONFIRM_RATE_LIMIT: Final[str] = "30/minute"

P = ParamSpec("P")
R = TypeVar("R")
KeyFunc = Callable[[Request], str]


def rate_limit_ip_key(request: Request) -> str:
    return f"ip:{get_remote_address(request)}"


def rate_limit_user_or_ip_key(request: Request) -> str:
    """Key by the token's user id when a valid bearer token is present, else by client IP."""
    scheme, token = get_authorization_scheme_param(request.headers.get("Authorization"))
    if scheme.lower() == "bearer" and token:
        payload = verify_token(token)
        user_id = payload.get("sub") if payload else None
        if isinstance(user_id, str) and user_id:
            return f"user:{user_id}"
    return rate_limit_ip_key(request)


limiter = Limiter(
    key_func=rate_limit_user_or_ip_key,
    default_limits=[DEFAULT_RATE_LIMIT],
    storage_uri=settings.rate_limit_storage_url,
    in_memory_fallback_enabled=True,
    in_memory_fallback=[DEFAULT_RATE_LIMIT],
)


def limit(
    limit_value: str, *, key_func: KeyFunc | None = None
) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Typed wrapper for SlowAPI's limit decorator.

    The decorated endpoint must accept a ``request: Request`` parameter.
    """
    limit_decorator = cast(
        Callable[..., Callable[[Callable[P, R]], Callable[P, R]]],
        limiter.limit,
    )
    return limit_decorator(limit_value, key_func=key_func)
