from __future__ import annotations

from fastapi import APIRouter, Depends

from sponsor_api.api.dependencies import UnitOfWork, get_current_creator, get_uow
from sponsor_api.api.openapi_responses import (
    forbidden_response,
    not_found_response,
    unauthorized_response,
    validation_failed_response,
)
from sponsor_api.api.schemas import (
    ConfirmedSponsorshipResponse,
    DeletedResponse,
    UpdateSponsorshipRequest,
)
from sponsor_api.core.errors import build_validation_error
from sponsor_api.db.models.user import User
from sponsor_api.services.validation import FieldErrors

router = APIRouter()


@router.get(
    "/{confirmed_id}",
    summary="Get confirmed sponsorship",
    response_model=ConfirmedSponsorshipResponse,
    responses={
        **unauthorized_response(),
        **forbidden_response("creator"),
        **not_found_response(),
    },
)
async def get_confirmed_sponsorship(
    confirmed_id: int,
    current_user: User = Depends(get_current_creator),
    uow: UnitOfWork = Depends(get_uow),
) -> ConfirmedSponsorshipResponse:
    confirmed = await uow.sponsorship_service.get_confirmed_sponsorship(
        current_user.id, confirmed_id
    )
    return ConfirmedSponsorshipResponse.model_validate(confirmed)


@router.put(
    "/{confirmed_id}",
    summary="Edit confirmed ad copy",
    description="Change the copy that will run in the issue.",
    response_model=ConfirmedSponsorshipResponse,
    responses={
        **unauthorized_response(),
        **forbidden_response("creator"),
        **not_found_response(),
        **validation_failed_response(
            "ad_copy", "String should have at most 2000 characters", "Invalid ad copy"
        ),
    },
)
async def update_confirmed_sponsorship(
    confirmed_id: int,
    request_data: UpdateSponsorshipRequest,
    current_user: User = Depends(get_current_creator),
    uow: UnitOfWork = Depends(get_uow),
) -> ConfirmedSponsorshipResponse:
    confirmed = await uow.sponsorship_service.get_confirmed_sponsorship(
        current_user.id, confirmed_id
    )
    result = await uow.sponsorship_service.update_confirmed_sponsorship(
        confirmed, request_data.model_dump(exclude_unset=True)
    )
    if isinstance(result, FieldErrors):
        raise build_validation_error(result.errors)
    return ConfirmedSponsorshipResponse.model_validate(result)


@router.delete(
    "/{confirmed_id}",
    summary="Cancel confirmation",
    description="Remove the confirmation so the issue can be confirmed again.",
    response_model=DeletedResponse,
    responses={
        **unauthorized_response(),
        **forbidden_response("creator"),
        **not_found_response(),
    },
)
async def delete_confirmed_sponsorship(
    confirmed_id: int,
    current_user: User = Depends(get_current_creator),
    uow: UnitOfWork = Depends(get_uow),
) -> DeletedResponse:
    confirmed = await uow.sponsorship_service.get_confirmed_sponsorship(
        current_user.id, confirmed_id
    )
    await uow.sponsorship_service.delete_confirmed_sponsorship(confirmed)
    return DeletedResponse(id=confirmed_id)
