from __future__ import annotations

from sqlalchemy import ForeignKey, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sponsor_api.db.base import Base, TimestampMixin


class ConfirmedSponsorship(TimestampMixin, Base):
    """The single booked sponsorship of an issue."""

    __tablename__ = "confirmed_sponsorships"
    # One confirmation per issue; concurrent confirmations are settled here.
    __table_args__ = (
        UniqueConstraint("issue_id", name="uq_confirmed_sponsorships_issue_id"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    issue_id: Mapped[int] = mapped_column(ForeignKey("issues.id"))
    sponsorship_id: Mapped[int] = mapped_column(ForeignKey("sponsorships.id"), index=True)
    ad_copy: Mapped[str | None] = mapped_column(Text)

    issue = relationship("Issue", back_populates="confirmed_sponsorship")
    sponsorship = relationship("Sponsorship")
