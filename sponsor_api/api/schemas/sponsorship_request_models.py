"""Request models for sponsorship endpoints."""

from __future__ import annotations

from pydantic import BaseModel, Field


class CreateSponsorshipRequest(BaseModel):
    """Request model for offering to sponsor an issue."""

    issue_id: int = Field(..., description="Issue to sponsor")
    ad_copy: str | None = Field(default=None, description="Proposed ad copy")


class UpdateSponsorshipRequest(BaseModel):
    """Request model for changing an offer's or a confirmed sponsorship's ad copy."""

    ad_copy: str | None = None
