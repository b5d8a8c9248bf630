"""Response models for sponsorship endpoints."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class SponsorshipResponse(BaseModel):
    """Response model for a sponsorship offer."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    issue_id: int
    user_id: int
    ad_copy: str | None


class ConfirmedSponsorshipResponse(BaseModel):
    """Response model for a confirmed sponsorship."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    issue_id: int
    sponsorship_id: int
    ad_copy: str | None
