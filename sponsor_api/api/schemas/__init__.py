"""API request and response schemas.

Import request/response models from the submodules (e.g. newsletter_request_models,
sponsorship_response_models) or from this package for a single entry point.
"""

from __future__ import annotations

from sponsor_api.api.schemas.meta_response_models import HealthResponse
from sponsor_api.api.schemas.newsletter_request_models import (
    CreateIssueRequest,
    CreateNewsletterRequest,
    UpdateIssueRequest,
    UpdateNewsletterRequest,
)
from sponsor_api.api.schemas.newsletter_response_models import (
    DeletedResponse,
    IssueResponse,
    NewsletterResponse,
    SponsorableIssueResponse,
)
from sponsor_api.api.schemas.sponsorship_request_models import (
    CreateSponsorshipRequest,
    UpdateSponsorshipRequest,
)
from sponsor_api.api.schemas.sponsorship_response_models import (
    ConfirmedSponsorshipResponse,
    SponsorshipResponse,
)

__all__ = [
    "ConfirmedSponsorshipResponse",
    "CreateIssueRequest",
    "CreateNewsletterRequest",
    "CreateSponsorshipRequest",
    "DeletedResponse",
    "HealthResponse",
    "IssueResponse",
    "NewsletterResponse",
    "SponsorableIssueResponse",
    "SponsorshipResponse",
    "UpdateIssueRequest",
    "UpdateNewsletterRequest",
    "UpdateSponsorshipRequest",
]
