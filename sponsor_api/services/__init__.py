from sponsor_api.services.errors import (
    AlreadyConfirmedError,
    NotFoundError,
    ServiceError,
    SponsorshipLockedError,
    SponsorWindowClosedError,
)
from sponsor_api.services.issue_service import IssueService
from sponsor_api.services.newsletter_service import NewsletterService
from sponsor_api.services.sponsorship_service import SponsorshipService
from sponsor_api.services.user_service import UserService
from sponsor_api.services.validation import FieldErrors

__all__ = [
    "AlreadyConfirmedError",
    "FieldErrors",
    "IssueService",
    "NewsletterService",
    "NotFoundError",
    "ServiceError",
    "SponsorWindowClosedError",
    "SponsorshipLockedError",
    "SponsorshipService",
    "UserService",
]
