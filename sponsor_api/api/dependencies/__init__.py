"""API-layer dependencies: request-scoped wiring (UoW, current user)."""

from sponsor_api.api.dependencies.current_user import (
    get_current_creator,
    get_current_sponsor,
    get_current_user,
    get_onboarded_user,
)
from sponsor_api.api.dependencies.unit_of_work import UnitOfWork, get_uow

__all__ = [
    "UnitOfWork",
    "get_current_creator",
    "get_current_sponsor",
    "get_current_user",
    "get_onboarded_user",
    "get_uow",
]
