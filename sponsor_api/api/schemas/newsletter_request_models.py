"""Request models for newsletter and issue endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class CreateNewsletterRequest(BaseModel):
    """Request model for creating a newsletter and its first issues."""

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "name": "Weekly Python",
                    "slug": "weekly-python",
                    "interval_days": 7,
                    "sponsor_in_days": 60,
                    "sponsor_before_days": 3,
                    "next_issue_at": "2026-11-02T09:00:00Z",
                }
            ]
        }
    )

    name: str = Field(..., description="Newsletter name")
    slug: str = Field(..., description="URL slug, unique among the creator's newsletters")
    interval_days: int = Field(..., description="Days between consecutive issues")
    sponsor_in_days: int = Field(
        ..., description="Days before an issue's due date when sponsors may start booking"
    )
    sponsor_before_days: int = Field(
        ..., description="Days before an issue's due date when booking closes"
    )
    next_issue_at: datetime = Field(..., description="Due date of the first issue")


class UpdateNewsletterRequest(BaseModel):
    """Request model for updating a newsletter. Omitted fields keep their value."""

    name: str | None = None
    slug: str | None = None
    interval_days: int | None = None
    sponsor_in_days: int | None = None
    sponsor_before_days: int | None = None


class CreateIssueRequest(BaseModel):
    """Request model for adding an issue to a newsletter."""

    name: str = Field(..., description="Issue name")
    due_at: datetime = Field(..., description="When the issue goes out")


class UpdateIssueRequest(BaseModel):
    """Request model for updating an issue. Omitted fields keep their value."""

    name: str | None = None
    due_at: datetime | None = None
