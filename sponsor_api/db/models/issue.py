from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sponsor_api.db.base import Base, TimestampMixin
from sponsor_api.db.types import UTCDateTime


class Issue(TimestampMixin, Base):
    __tablename__ = "issues"

    id: Mapped[int] = mapped_column(primary_key=True)
    newsletter_id: Mapped[int] = mapped_column(ForeignKey("newsletters.id"), index=True)
    name: Mapped[str] = mapped_column(String(200))
    due_at: Mapped[datetime] = mapped_column(UTCDateTime(), index=True)
    deleted: Mapped[bool] = mapped_column(Boolean, default=False, index=True)

    newsletter = relationship("Newsletter", back_populates="issues")
    sponsorships = relationship("Sponsorship", back_populates="issue")
    confirmed_sponsorship = relationship(
        "ConfirmedSponsorship", back_populates="issue", uselist=False
    )
