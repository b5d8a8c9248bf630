"""Response models for newsletter and issue endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class NewsletterResponse(BaseModel):
    """Response model for a newsletter."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    name: str
    slug: str
    interval_days: int
    sponsor_in_days: int
    sponsor_before_days: int
    next_issue_at: datetime | None


class IssueResponse(BaseModel):
    """Response model for an issue on the creator's dashboard."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    newsletter_id: int
    name: str
    due_at: datetime


class SponsorableIssueResponse(BaseModel):
    """Response model for an issue listed to sponsors, with its booking window."""

    id: int
    name: str
    due_at: datetime
    sponsor_opens_at: datetime
    sponsor_closes_at: datetime
    open_for_sponsorship: bool


class DeletedResponse(BaseModel):
    """Response model for a soft delete."""

    id: int
    deleted: bool = True
