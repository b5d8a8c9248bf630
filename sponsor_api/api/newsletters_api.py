from __future__ import annotations

from fastapi import APIRouter, Depends, status

from sponsor_api.api.dependencies import UnitOfWork, get_current_creator, get_uow
from sponsor_api.api.openapi_responses import (
    forbidden_response,
    not_found_response,
    unauthorized_response,
    validation_failed_response,
)
from sponsor_api.api.schemas import (
    CreateIssueRequest,
    CreateNewsletterRequest,
    DeletedResponse,
    IssueResponse,
    NewsletterResponse,
    SponsorshipResponse,
    UpdateIssueRequest,
    UpdateNewsletterRequest,
)
from sponsor_api.core.errors import build_validation_error
from sponsor_api.db.models.user import User
from sponsor_api.services.validation import TAKEN_MESSAGE, FieldErrors

router = APIRouter()


@router.get(
    "",
    summary="List newsletters",
    description="Return the current user's newsletters.",
    response_model=list[NewsletterResponse],
    responses={**unauthorized_response(), **forbidden_response("creator")},
)
async def list_newsletters(
    current_user: User = Depends(get_current_creator),
    uow: UnitOfWork = Depends(get_uow),
) -> list[NewsletterResponse]:
    newsletters = await uow.newsletter_service.list_newsletters(current_user.id)
    return [NewsletterResponse.model_validate(n) for n in newsletters]


@router.post(
    "",
    summary="Create newsletter",
    description="Create a newsletter and schedule its first run of issues.",
    response_model=NewsletterResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        **unauthorized_response(),
        **forbidden_response("creator"),
        **validation_failed_response("slug", TAKEN_MESSAGE, "Invalid newsletter attributes"),
    },
)
async def create_newsletter(
    request_data: CreateNewsletterRequest,
    current_user: User = Depends(get_current_creator),
    uow: UnitOfWork = Depends(get_uow),
) -> NewsletterResponse:
    attrs = {**request_data.model_dump(), "user_id": current_user.id}
    result = await uow.newsletter_service.create_newsletter(attrs)
    if isinstance(result, FieldErrors):
        raise build_validation_error(result.errors)
    return NewsletterResponse.model_validate(result)


@router.get(
    "/{newsletter_id}",
    summary="Get newsletter",
    response_model=NewsletterResponse,
    responses={
        **unauthorized_response(),
        **forbidden_response("creator"),
        **not_found_response(),
    },
)
async def get_newsletter(
    newsletter_id: int,
    current_user: User = Depends(get_current_creator),
    uow: UnitOfWork = Depends(get_uow),
) -> NewsletterResponse:
    newsletter = await uow.newsletter_service.get_newsletter(current_user.id, newsletter_id)
    return NewsletterResponse.model_validate(newsletter)


@router.put(
    "/{newsletter_id}",
    summary="Update newsletter",
    description="Change name, slug or cadence. The owner cannot be changed.",
    response_model=NewsletterResponse,
    responses={
        **unauthorized_response(),
        **forbidden_response("creator"),
        **not_found_response(),
        **validation_failed_response("slug", TAKEN_MESSAGE, "Invalid newsletter attributes"),
    },
)
async def update_newsletter(
    newsletter_id: int,
    request_data: UpdateNewsletterRequest,
    current_user: User = Depends(get_current_creator),
    uow: UnitOfWork = Depends(get_uow),
) -> NewsletterResponse:
    newsletter = await uow.newsletter_service.get_newsletter(current_user.id, newsletter_id)
    result = await uow.newsletter_service.update_newsletter(
        newsletter, request_data.model_dump(exclude_unset=True)
    )
    if isinstance(result, FieldErrors):
        raise build_validation_error(result.errors)
    return NewsletterResponse.model_validate(result)


@router.delete(
    "/{newsletter_id}",
    summary="Delete newsletter",
    description="Soft delete a newsletter. Its issues are kept.",
    response_model=DeletedResponse,
    responses={
        **unauthorized_response(),
        **forbidden_response("creator"),
        **not_found_response(),
    },
)
async def delete_newsletter(
    newsletter_id: int,
    current_user: User = Depends(get_current_creator),
    uow: UnitOfWork = Depends(get_uow),
) -> DeletedResponse:
    newsletter = await uow.newsletter_service.get_newsletter(current_user.id, newsletter_id)
    await uow.newsletter_service.soft_delete_newsletter(newsletter)
    return DeletedResponse(id=newsletter_id)


@router.get(
    "/{newsletter_id}/issues",
    summary="List issues",
    description="Return every live issue of the newsletter, earliest due first.",
    response_model=list[IssueResponse],
    responses={
        **unauthorized_response(),
        **forbidden_response("creator"),
        **not_found_response(),
    },
)
async def list_issues(
    newsletter_id: int,
    current_user: User = Depends(get_current_creator),
    uow: UnitOfWork = Depends(get_uow),
) -> list[IssueResponse]:
    newsletter = await uow.newsletter_service.get_newsletter(current_user.id, newsletter_id)
    issues = await uow.issue_service.list_issues(newsletter.id)
    return [IssueResponse.model_validate(issue) for issue in issues]


@router.post(
    "/{newsletter_id}/issues",
    summary="Create issue",
    response_model=IssueResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        **unauthorized_response(),
        **forbidden_response("creator"),
        **not_found_response(),
        **validation_failed_response("name", "can't be blank", "Invalid issue attributes"),
    },
)
async def create_issue(
    newsletter_id: int,
    request_data: CreateIssueRequest,
    current_user: User = Depends(get_current_creator),
    uow: UnitOfWork = Depends(get_uow),
) -> IssueResponse:
    newsletter = await uow.newsletter_service.get_newsletter(current_user.id, newsletter_id)
    result = await uow.issue_service.create_issue(
        {**request_data.model_dump(), "newsletter_id": newsletter.id}
    )
    if isinstance(result, FieldErrors):
        raise build_validation_error(result.errors)
    return IssueResponse.model_validate(result)


@router.get(
    "/{newsletter_id}/issues/{issue_id}",
    summary="Get issue",
    response_model=IssueResponse,
    responses={
        **unauthorized_response(),
        **forbidden_response("creator"),
        **not_found_response(),
    },
)
async def get_issue(
    newsletter_id: int,
    issue_id: int,
    current_user: User = Depends(get_current_creator),
    uow: UnitOfWork = Depends(get_uow),
) -> IssueResponse:
    newsletter = await uow.newsletter_service.get_newsletter(current_user.id, newsletter_id)
    issue = await uow.issue_service.get_issue(newsletter.id, issue_id)
    return IssueResponse.model_validate(issue)


@router.put(
    "/{newsletter_id}/issues/{issue_id}",
    summary="Update issue",
    description="Change an issue's name or due date. It cannot move to another newsletter.",
    response_model=IssueResponse,
    responses={
        **unauthorized_response(),
        **forbidden_response("creator"),
        **not_found_response(),
        **validation_failed_response("due_at", "can't be blank", "Invalid issue attributes"),
    },
)
async def update_issue(
    newsletter_id: int,
    issue_id: int,
    request_data: UpdateIssueRequest,
    current_user: User = Depends(get_current_creator),
    uow: UnitOfWork = Depends(get_uow),
) -> IssueResponse:
    newsletter = await uow.newsletter_service.get_newsletter(current_user.id, newsletter_id)
    issue = await uow.issue_service.get_issue(newsletter.id, issue_id)
    result = await uow.issue_service.update_issue(
        issue, request_data.model_dump(exclude_unset=True)
    )
    if isinstance(result, FieldErrors):
        raise build_validation_error(result.errors)
    return IssueResponse.model_validate(result)


@router.delete(
    "/{newsletter_id}/issues/{issue_id}",
    summary="Delete issue",
    response_model=DeletedResponse,
    responses={
        **unauthorized_response(),
        **forbidden_response("creator"),
        **not_found_response(),
    },
)
async def delete_issue(
    newsletter_id: int,
    issue_id: int,
    current_user: User = Depends(get_current_creator),
    uow: UnitOfWork = Depends(get_uow),
) -> DeletedResponse:
    newsletter = await uow.newsletter_service.get_newsletter(current_user.id, newsletter_id)
    issue = await uow.issue_service.get_issue(newsletter.id, issue_id)
    await uow.issue_service.soft_delete_issue(issue)
    return DeletedResponse(id=issue_id)


@router.get(
    "/{newsletter_id}/issues/{issue_id}/sponsorships",
    summary="List offers on issue",
    description="Return the sponsors' live offers on one of the creator's issues.",
    response_model=list[SponsorshipResponse],
    responses={
        **unauthorized_response(),
        **forbidden_response("creator"),
        **not_found_response(),
    },
)
async def list_issue_offers(
    newsletter_id: int,
    issue_id: int,
    current_user: User = Depends(get_current_creator),
    uow: UnitOfWork = Depends(get_uow),
) -> list[SponsorshipResponse]:
    newsletter = await uow.newsletter_service.get_newsletter(current_user.id, newsletter_id)
    issue = await uow.issue_service.get_issue(newsletter.id, issue_id)
    offers = await uow.sponsorship_service.list_offers_for_issue(current_user.id, issue.id)
    return [SponsorshipResponse.model_validate(offer) for offer in offers]
