from __future__ import annotations

from sqlalchemy import Boolean, ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sponsor_api.db.base import Base, TimestampMixin


class Sponsorship(TimestampMixin, Base):
    """A sponsor's offer to sponsor one issue."""

    __tablename__ = "sponsorships"

    id: Mapped[int] = mapped_column(primary_key=True)
    issue_id: Mapped[int] = mapped_column(ForeignKey("issues.id"), index=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    ad_copy: Mapped[str | None] = mapped_column(Text)
    deleted: Mapped[bool] = mapped_column(Boolean, default=False)

    issue = relationship("Issue", back_populates="sponsorships")
    user = relationship("User", back_populates="sponsorships")
