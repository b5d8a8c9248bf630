from __future__ import annotations

from fastapi import APIRouter, Depends, Request, status

from sponsor_api.api.dependencies import (
    UnitOfWork,
    get_current_creator,
    get_current_sponsor,
    get_uow,
)
from sponsor_api.api.openapi_responses import (
    forbidden_response,
    not_found_response,
    rate_limited_response,
    service_error_responses,
    unauthorized_response,
    validation_failed_response,
)
from sponsor_api.api.schemas import (
    ConfirmedSponsorshipResponse,
    CreateSponsorshipRequest,
    DeletedResponse,
    SponsorshipResponse,
    UpdateSponsorshipRequest,
)
from sponsor_api.core.errors import build_validation_error
from sponsor_api.core.rate_limit import (
    SPONSORSHIP_CONFIRM_RATE_LIMIT,
    SPONSORSHIP_OFFER_RATE_LIMIT,
    limit,
    rate_limit_user_or_ip_key,
)
from sponsor_api.db.models.user import User
from sponsor_api.services.errors import (
    AlreadyConfirmedError,
    SponsorshipLockedError,
    SponsorWindowClosedError,
)
from sponsor_api.services.sponsorship_service import NOT_SPONSORABLE_MESSAGE
from sponsor_api.services.validation import FieldErrors

router = APIRouter()


@router.get(
    "",
    summary="List my offers",
    response_model=list[SponsorshipResponse],
    responses={**unauthorized_response(), **forbidden_response("sponsor")},
)
async def list_sponsorships(
    current_user: User = Depends(get_current_sponsor),
    uow: UnitOfWork = Depends(get_uow),
) -> list[SponsorshipResponse]:
    sponsorships = await uow.sponsorship_service.list_sponsorships(current_user.id)
    return [SponsorshipResponse.model_validate(s) for s in sponsorships]


@router.post(
    "",
    summary="Offer to sponsor an issue",
    description="Record an offer on an upcoming issue. The creator confirms at most one.",
    response_model=SponsorshipResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        **unauthorized_response(),
        **forbidden_response("sponsor"),
        **validation_failed_response(
            "issue_id", NOT_SPONSORABLE_MESSAGE, "Issue cannot take offers"
        ),
        **rate_limited_response(),
    },
)
@limit(SPONSORSHIP_OFFER_RATE_LIMIT, key_func=rate_limit_user_or_ip_key)
async def create_sponsorship(
    request: Request,
    request_data: CreateSponsorshipRequest,
    current_user: User = Depends(get_current_sponsor),
    uow: UnitOfWork = Depends(get_uow),
) -> SponsorshipResponse:
    result = await uow.sponsorship_service.create_sponsorship(
        current_user.id, request_data.model_dump()
    )
    if isinstance(result, FieldErrors):
        raise build_validation_error(result.errors)
    return SponsorshipResponse.model_validate(result)


@router.get(
    "/{sponsorship_id}",
    summary="Get offer",
    response_model=SponsorshipResponse,
    responses={
        **unauthorized_response(),
        **forbidden_response("sponsor"),
        **not_found_response(),
    },
)
async def get_sponsorship(
    sponsorship_id: int,
    current_user: User = Depends(get_current_sponsor),
    uow: UnitOfWork = Depends(get_uow),
) -> SponsorshipResponse:
    sponsorship = await uow.sponsorship_service.get_sponsorship(current_user.id, sponsorship_id)
    return SponsorshipResponse.model_validate(sponsorship)


@router.put(
    "/{sponsorship_id}",
    summary="Update offer copy",
    response_model=SponsorshipResponse,
    responses={
        **unauthorized_response(),
        **forbidden_response("sponsor"),
        **not_found_response(),
        **validation_failed_response(
            "ad_copy", "String should have at most 2000 characters", "Invalid ad copy"
        ),
    },
)
async def update_sponsorship(
    sponsorship_id: int,
    request_data: UpdateSponsorshipRequest,
    current_user: User = Depends(get_current_sponsor),
    uow: UnitOfWork = Depends(get_uow),
) -> SponsorshipResponse:
    sponsorship = await uow.sponsorship_service.get_sponsorship(current_user.id, sponsorship_id)
    result = await uow.sponsorship_service.update_sponsorship(
        sponsorship, request_data.model_dump(exclude_unset=True)
    )
    if isinstance(result, FieldErrors):
        raise build_validation_error(result.errors)
    return SponsorshipResponse.model_validate(result)


@router.delete(
    "/{sponsorship_id}",
    summary="Withdraw offer",
    response_model=DeletedResponse,
    responses={
        **unauthorized_response(),
        **forbidden_response("sponsor"),
        **not_found_response(),
        **service_error_responses("Offer already confirmed", SponsorshipLockedError),
    },
)
async def delete_sponsorship(
    sponsorship_id: int,
    current_user: User = Depends(get_current_sponsor),
    uow: UnitOfWork = Depends(get_uow),
) -> DeletedResponse:
    sponsorship = await uow.sponsorship_service.get_sponsorship(current_user.id, sponsorship_id)
    await uow.sponsorship_service.soft_delete_sponsorship(sponsorship)
    return DeletedResponse(id=sponsorship_id)


@router.post(
    "/{sponsorship_id}/confirm",
    summary="Confirm offer",
    description=(
        "Make this offer the issue's sponsorship. Only the newsletter's creator can "
        "confirm, only while the issue's sponsor window is open, and only once per issue."
    ),
    response_model=ConfirmedSponsorshipResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        **unauthorized_response(),
        **forbidden_response("creator"),
        **not_found_response(),
        **service_error_responses(
            "Issue cannot be confirmed", AlreadyConfirmedError, SponsorWindowClosedError
        ),
        **rate_limited_response(),
    },
)
@limit(SPONSORSHIP_CONFIRM_RATE_LIMIT, key_func=rate_limit_user_or_ip_key)
async def confirm_sponsorship(
    request: Request,
    sponsorship_id: int,
    current_user: User = Depends(get_current_creator),
    uow: UnitOfWork = Depends(get_uow),
) -> ConfirmedSponsorshipResponse:
    confirmed = await uow.sponsorship_service.confirm_sponsorship(current_user.id, sponsorship_id)
    return ConfirmedSponsorshipResponse.model_validate(confirmed)
