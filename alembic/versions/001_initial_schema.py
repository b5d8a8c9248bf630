"""Initial schema: users, newsletters, issues, sponsorships, confirmed_sponsorships.

Revision ID: 001_initial
Revises: None
Create Date: 2026-10-18

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("inserted_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("email", sa.String(160), nullable=False),
        sa.Column("slug", sa.String(100), nullable=True),
        sa.Column("is_creator", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("is_sponsor", sa.Boolean, nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_slug", "users", ["slug"], unique=True)

    op.create_table(
        "newsletters",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("slug", sa.String(100), nullable=False),
        sa.Column("interval_days", sa.Integer, nullable=False),
        sa.Column("sponsor_in_days", sa.Integer, nullable=False),
        sa.Column("sponsor_before_days", sa.Integer, nullable=False),
        sa.Column("next_issue_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("deleted", sa.Boolean, nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.UniqueConstraint("user_id", "slug", name="uq_newsletters_user_id_slug"),
        sa.CheckConstraint("interval_days > 0", name="ck_newsletters_interval_days_positive"),
        sa.CheckConstraint(
            "sponsor_in_days > sponsor_before_days", name="ck_newsletters_sponsor_window"
        ),
    )
    op.create_index("ix_newsletters_user_id", "newsletters", ["user_id"])
    op.create_index("ix_newsletters_deleted", "newsletters", ["deleted"])

    op.create_table(
        "issues",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("newsletter_id", sa.Integer, sa.ForeignKey("newsletters.id"), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("due_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("deleted", sa.Boolean, nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index("ix_issues_newsletter_id", "issues", ["newsletter_id"])
    op.create_index("ix_issues_due_at", "issues", ["due_at"])
    op.create_index("ix_issues_deleted", "issues", ["deleted"])

    op.create_table(
        "sponsorships",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("issue_id", sa.Integer, sa.ForeignKey("issues.id"), nullable=False),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=False),
        sa.Column("ad_copy", sa.Text, nullable=True),
        sa.Column("deleted", sa.Boolean, nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index("ix_sponsorships_issue_id", "sponsorships", ["issue_id"])
    op.create_index("ix_sponsorships_user_id", "sponsorships", ["user_id"])

    op.create_table(
        "confirmed_sponsorships",
        sa.Column("id", sa.Integer, primary_key=True),
        sa.Column("issue_id", sa.Integer, sa.ForeignKey("issues.id"), nullable=False),
        sa.Column(
            "sponsorship_id", sa.Integer, sa.ForeignKey("sponsorships.id"), nullable=False
        ),
        sa.Column("ad_copy", sa.Text, nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("issue_id", name="uq_confirmed_sponsorships_issue_id"),
    )
    op.create_index(
        "ix_confirmed_sponsorships_sponsorship_id", "confirmed_sponsorships", ["sponsorship_id"]
    )


def downgrade() -> None:
    op.drop_table("confirmed_sponsorships")
    op.drop_table("sponsorships")
    op.drop_table("issues")
    op.drop_table("newsletters")
    op.drop_table("users")
