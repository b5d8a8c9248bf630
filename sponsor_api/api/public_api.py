"""Public sponsor-facing listings, addressed by creator and newsletter slugs."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from sponsor_api.api.dependencies import UnitOfWork, get_uow
from sponsor_api.api.openapi_responses import not_found_response, rate_limited_response
from sponsor_api.api.schemas import NewsletterResponse, SponsorableIssueResponse
from sponsor_api.core.rate_limit import PUBLIC_LISTING_RATE_LIMIT, limit, rate_limit_ip_key
from sponsor_api.services.errors import NotFoundError

router = APIRouter()


@router.get(
    "/{user_slug}",
    summary="List a creator's newsletters",
    response_model=list[NewsletterResponse],
    responses={**not_found_response(), **rate_limited_response()},
)
@limit(PUBLIC_LISTING_RATE_LIMIT, key_func=rate_limit_ip_key)
async def list_creator_newsletters(
    request: Request,
    user_slug: str,
    uow: UnitOfWork = Depends(get_uow),
) -> list[NewsletterResponse]:
    if await uow.user_service.get_user_by_slug(user_slug) is None:
        raise NotFoundError()
    newsletters = await uow.newsletter_service.list_newsletters_of_slug(user_slug)
    return [NewsletterResponse.model_validate(n) for n in newsletters]


@router.get(
    "/{user_slug}/{newsletter_slug}",
    summary="List sponsorable issues",
    description=(
        "Return the newsletter's upcoming issues with the window during which "
        "each one can be sponsored."
    ),
    response_model=list[SponsorableIssueResponse],
    responses={**not_found_response(), **rate_limited_response()},
)
@limit(PUBLIC_LISTING_RATE_LIMIT, key_func=rate_limit_ip_key)
async def list_sponsorable_issues(
    request: Request,
    user_slug: str,
    newsletter_slug: str,
    uow: UnitOfWork = Depends(get_uow),
) -> list[SponsorableIssueResponse]:
    newsletter = await uow.newsletter_service.get_newsletter_by_slugs(user_slug, newsletter_slug)
    issues = await uow.issue_service.list_issues_of_slugs(user_slug, newsletter_slug)

    listing: list[SponsorableIssueResponse] = []
    for issue in issues:
        window, is_open = uow.issue_service.sponsor_window(newsletter, issue)
        listing.append(
            SponsorableIssueResponse(
                id=issue.id,
                name=issue.name,
                due_at=issue.due_at,
                sponsor_opens_at=window.opens_at,
                sponsor_closes_at=window.closes_at,
                open_for_sponsorship=is_open,
            )
        )
    return listing
