from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sponsor_api.db.base import Base, TimestampMixin
from sponsor_api.db.types import UTCDateTime


class Newsletter(TimestampMixin, Base):
    __tablename__ = "newsletters"
    __table_args__ = (
        UniqueConstraint("user_id", "slug", name="uq_newsletters_user_id_slug"),
        CheckConstraint("interval_days > 0", name="ck_newsletters_interval_days_positive"),
        CheckConstraint(
            "sponsor_in_days > sponsor_before_days", name="ck_newsletters_sponsor_window"
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    name: Mapped[str] = mapped_column(String(200))
    slug: Mapped[str] = mapped_column(String(100))
    interval_days: Mapped[int] = mapped_column(Integer)
    sponsor_in_days: Mapped[int] = mapped_column(Integer)
    sponsor_before_days: Mapped[int] = mapped_column(Integer)
    next_issue_at: Mapped[datetime | None] = mapped_column(UTCDateTime())
    deleted: Mapped[bool] = mapped_column(Boolean, default=False, index=True)

    user = relationship("User", back_populates="newsletters")
    issues = relationship("Issue", back_populates="newsletter")
