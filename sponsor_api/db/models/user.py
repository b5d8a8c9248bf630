from __future__ import annotations

from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sponsor_api.db.base import Base, TimestampMixin


class User(TimestampMixin, Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    email: Mapped[str] = mapped_column(String(160), unique=True, index=True)
    # Set when the user finishes onboarding; public pages are addressed by it.
    slug: Mapped[str | None] = mapped_column(String(100), unique=True, index=True)
    is_creator: Mapped[bool] = mapped_column(Boolean, default=False)
    is_sponsor: Mapped[bool] = mapped_column(Boolean, default=False)

    newsletters = relationship("Newsletter", back_populates="user")
    sponsorships = relationship("Sponsorship", back_populates="user")
